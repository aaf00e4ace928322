"""
Calculator component - Coating and curing-agent mass calculation.

Pure conversion pipeline: area/thickness -> volume -> mass -> curing-agent
split -> total.
"""

from .component import (
    ROUNDING_PLACES,
    compute,
    distribution,
    example_input,
    round_half_up,
    run,
    validate_input,
)
from .models import (
    CalculateOutput,
    ChartSlice,
    ValidationError,
    parse_pydantic_errors,
)

__all__ = [
    # Entry points
    "run",
    "compute",
    "validate_input",
    "distribution",
    "example_input",
    "round_half_up",
    # Models
    "CalculateOutput",
    "ChartSlice",
    "ValidationError",
    "parse_pydantic_errors",
    # Constants
    "ROUNDING_PLACES",
]
