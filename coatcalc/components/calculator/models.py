"""
Calculator component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from coatcalc.domain.entities import CalculationInput, CalculationResult


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class CalculateOutput:
    """Output from running a calculation."""

    result: CalculationResult | None = None
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class ChartSlice:
    """One component of the mass distribution."""

    key: str
    label: str
    value: float
    share: float  # percent of the four-component sum


def parse_pydantic_errors(exc: PydanticValidationError) -> list[ValidationError]:
    """
    Map a Pydantic ValidationError raised while building CalculationInput
    to field-level errors keyed by the Python field name.
    """
    aliases = {
        info.alias: name
        for name, info in CalculationInput.model_fields.items()
        if info.alias
    }

    errors: list[ValidationError] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        raw = str(loc[0]) if loc else "_schema"
        field_name = aliases.get(raw, raw)

        error_type = error.get("type", "unknown")
        code = "invalid_type"
        if "missing" in error_type:
            code = "required"

        msg = error.get("msg", "Invalid value")
        errors.append(
            ValidationError(
                field=field_name,
                code=code,
                message=f"Field '{field_name}': {msg}",
            )
        )
    return errors
