"""
Calculator component - Coating mass calculation.

Converts surface area and layer thickness to volume, volume to mass, and
splits each layer's mass into its curing-agent share.

Key behaviors:
- Pure and deterministic, no I/O
- Every output rounded half away from zero to 4 decimal places
- Total is the rounded sum of the four rounded components
- Constraint violations raise InvalidInputError, never a silent zero/NaN
"""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal, localcontext

from coatcalc.domain.entities import (
    NUMERIC_FIELDS,
    CalculationInput,
    CalculationResult,
)
from coatcalc.errors import InvalidInputError

from .models import CalculateOutput, ChartSlice, ValidationError

logger = logging.getLogger(__name__)

ROUNDING_PLACES = 4

MM2_PER_M2 = 1_000_000
MM_PER_M = 1000
LITRES_PER_M3 = 1000

POSITIVE_FIELDS = (
    "area_mm2",
    "primer_thickness_mm",
    "topcoat_thickness_mm",
    "density_kg_per_l",
)

RATIO_PAIRS = {
    "primer_ratio": ("primer_ratio_a", "primer_ratio_b"),
    "topcoat_ratio": ("topcoat_ratio_a", "topcoat_ratio_b"),
}

CHART_LABELS = (
    ("primer_weight", "Primer"),
    ("topcoat_weight", "Topcoat"),
    ("primer_curing_agent", "Primer curing agent"),
    ("topcoat_curing_agent", "Topcoat curing agent"),
)


# --- Rounding ---


def round_half_up(value: float, places: int = ROUNDING_PLACES) -> float:
    """
    Round half away from zero on the shortest decimal form of ``value``.

    ``0.00005`` becomes ``0.0001`` even though its binary float sits just
    below the tie, matching what a user reads on screen.
    """
    d = Decimal(repr(value))
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, d.adjusted() + places + 2)
        return float(d.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


# --- Validation ---


def validate_input(inp: CalculationInput) -> list[ValidationError]:
    """Return every constraint violation in ``inp`` (empty when valid)."""
    errors: list[ValidationError] = []
    usable: dict[str, float] = {}

    for name in NUMERIC_FIELDS:
        value = getattr(inp, name, None)

        if value is None:
            errors.append(
                ValidationError(
                    field=name, code="required", message=f"Field '{name}' is required"
                )
            )
            continue

        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(
                ValidationError(
                    field=name,
                    code="invalid_type",
                    message=f"Field '{name}' must be a number",
                )
            )
            continue

        if not math.isfinite(value):
            errors.append(
                ValidationError(
                    field=name,
                    code="not_finite",
                    message=f"Field '{name}' must be a finite number",
                )
            )
            continue

        if name in POSITIVE_FIELDS and value <= 0:
            errors.append(
                ValidationError(
                    field=name,
                    code="not_positive",
                    message=f"Field '{name}' must be greater than 0",
                )
            )
            continue

        if name not in POSITIVE_FIELDS and value < 0:
            errors.append(
                ValidationError(
                    field=name,
                    code="negative",
                    message=f"Field '{name}' must not be negative",
                )
            )
            continue

        usable[name] = float(value)

    for pair, (a_field, b_field) in RATIO_PAIRS.items():
        if a_field in usable and b_field in usable and usable[a_field] + usable[b_field] == 0:
            errors.append(
                ValidationError(
                    field=pair,
                    code="zero_ratio_sum",
                    message=f"Ratio parts '{a_field}' + '{b_field}' must be greater than 0",
                )
            )

    return errors


# --- Calculation ---


def _layer_weight(area_m2: float, thickness_mm: float, density: float) -> float:
    thickness_m = thickness_mm / MM_PER_M
    volume_l = area_m2 * thickness_m * LITRES_PER_M3
    return volume_l * density


def _curing_agent(layer_weight: float, ratio_a: float, ratio_b: float) -> float:
    return layer_weight * (ratio_a / (ratio_a + ratio_b))


def _overflow(name: str) -> InvalidInputError:
    return InvalidInputError(
        [
            ValidationError(
                field=name,
                code="overflow",
                message=f"Result '{name}' is not a finite number",
            )
        ]
    )


def compute(inp: CalculationInput) -> CalculationResult:
    """
    Compute primer, topcoat and curing-agent masses in kilograms.

    Raises:
        InvalidInputError: A field is missing, non-numeric, non-finite,
            non-positive, a ratio sums to zero, or a mass overflows.
    """
    errors = validate_input(inp)
    if errors:
        raise InvalidInputError(errors)

    area_m2 = inp.area_mm2 / MM2_PER_M2
    raw = {
        "primer_weight": _layer_weight(
            area_m2, inp.primer_thickness_mm, inp.density_kg_per_l
        ),
        "topcoat_weight": _layer_weight(
            area_m2, inp.topcoat_thickness_mm, inp.density_kg_per_l
        ),
    }
    raw["primer_curing_agent"] = _curing_agent(
        raw["primer_weight"], inp.primer_ratio_a, inp.primer_ratio_b
    )
    raw["topcoat_curing_agent"] = _curing_agent(
        raw["topcoat_weight"], inp.topcoat_ratio_a, inp.topcoat_ratio_b
    )

    rounded: dict[str, float] = {}
    for name, value in raw.items():
        if not math.isfinite(value):
            raise _overflow(name)
        rounded[name] = round_half_up(value)

    total = sum(rounded.values())
    if not math.isfinite(total):
        raise _overflow("total_weight")

    result = CalculationResult(**rounded, total_weight=round_half_up(total))
    logger.debug("Computed %s for %s", result, inp.project_label)
    return result


def distribution(result: CalculationResult) -> list[ChartSlice]:
    """
    Split a result into the four chart slices with percentage shares.

    Shares are 0 when every component is 0.
    """
    values = [(key, label, getattr(result, key)) for key, label in CHART_LABELS]
    total = sum(v for _, _, v in values)

    return [
        ChartSlice(
            key=key,
            label=label,
            value=value,
            share=round_half_up(value / total * 100, 2) if total > 0 else 0.0,
        )
        for key, label, value in values
    ]


def example_input() -> CalculationInput:
    """Sample job used to pre-fill a fresh form."""
    return CalculationInput(
        project_label="R6-2000H",
        area_mm2=73834,
        primer_thickness_mm=0.04,
        topcoat_thickness_mm=0.14,
        density_kg_per_l=1.22,
        primer_ratio_a=1,
        primer_ratio_b=10,
        topcoat_ratio_a=1,
        topcoat_ratio_b=10,
    )


def run(inp: CalculationInput) -> CalculateOutput:
    """Component entry point: report validation problems instead of raising."""
    try:
        result = compute(inp)
    except InvalidInputError as e:
        return CalculateOutput(errors=e.errors, success=False)
    return CalculateOutput(result=result)
