from .geometry import Point2, Vec2, ORIGIN
from .entities import (
    ORIGIN_REF,
    Arc,
    Circle,
    Line,
    PointEntity,
    SelectionItem,
    SelectionRole,
    SnapKind,
    SnapTarget,
)
from .store import EntityStore, SketchEntities
from .errors import (
    ClassificationError,
    GeometryError,
    ProjectionMiss,
    ResolveError,
    ResolveErrorKind,
    is_error,
)
from .config import ToleranceConfig, get_tolerance_config, set_tolerance_config
from .projection import (
    CameraState,
    SketchPlane,
    look_at,
    orthographic,
    perspective,
    pixel_size,
    project,
    screen_to_ndc,
)
from .classify import SubjectKind, SubjectPair, classify
from .angles import AngleResult, angle_between
from .dimensions import (
    DimensionKind,
    DimensionMode,
    DimensionProposal,
    DimensionSession,
    propose_dimension,
    resolve,
)
from .inference import (
    Cancelled,
    Committed,
    ConstraintHint,
    ConstraintInferenceEngine,
    Drawing,
    HintKind,
    Idle,
    InferenceFrame,
)
from .measurement import Measurement, MeasurementSession, measure

__all__ = [
    'Point2',
    'Vec2',
    'ORIGIN',
    'ORIGIN_REF',
    'Arc',
    'Circle',
    'Line',
    'PointEntity',
    'SelectionItem',
    'SelectionRole',
    'SnapKind',
    'SnapTarget',
    'EntityStore',
    'SketchEntities',
    'ClassificationError',
    'GeometryError',
    'ProjectionMiss',
    'ResolveError',
    'ResolveErrorKind',
    'is_error',
    'ToleranceConfig',
    'get_tolerance_config',
    'set_tolerance_config',
    'CameraState',
    'SketchPlane',
    'look_at',
    'orthographic',
    'perspective',
    'pixel_size',
    'project',
    'screen_to_ndc',
    'SubjectKind',
    'SubjectPair',
    'classify',
    'AngleResult',
    'angle_between',
    'DimensionKind',
    'DimensionMode',
    'DimensionProposal',
    'DimensionSession',
    'propose_dimension',
    'resolve',
    'Cancelled',
    'Committed',
    'ConstraintHint',
    'ConstraintInferenceEngine',
    'Drawing',
    'HintKind',
    'Idle',
    'InferenceFrame',
    'Measurement',
    'MeasurementSession',
    'measure',
]
