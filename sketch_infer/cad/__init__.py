"""CAD adapters for sketch inference results."""

from .slvs_adapter import (
    AdapterFail,
    AdapterOK,
    AdapterResult,
    CadFailure,
    PromotedHint,
    SlvsAdapter,
    SlvsAdapterOptions,
    CAD_MAPPING_TABLE,
    solve_dimensions_safe,
)

__all__ = [
    "AdapterFail",
    "AdapterOK",
    "AdapterResult",
    "CadFailure",
    "PromotedHint",
    "SlvsAdapter",
    "SlvsAdapterOptions",
    "CAD_MAPPING_TABLE",
    "solve_dimensions_safe",
]
