from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PROJECT_LABEL = "Untitled Project"

NUMERIC_FIELDS = (
    "area_mm2",
    "primer_thickness_mm",
    "topcoat_thickness_mm",
    "density_kg_per_l",
    "primer_ratio_a",
    "primer_ratio_b",
    "topcoat_ratio_a",
    "topcoat_ratio_b",
)

# --- Calculation ---

class CalculationInput(BaseModel):
    """Geometry, density and mix ratios for one coating job."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    project_label: str = Field(default=DEFAULT_PROJECT_LABEL, alias="projectLabel")
    area_mm2: float = Field(alias="areaMm2")
    primer_thickness_mm: float = Field(alias="primerThicknessMm")
    topcoat_thickness_mm: float = Field(alias="topcoatThicknessMm")
    density_kg_per_l: float = Field(alias="densityKgPerL")
    primer_ratio_a: float = Field(alias="primerRatioA")
    primer_ratio_b: float = Field(alias="primerRatioB")
    topcoat_ratio_a: float = Field(alias="topcoatRatioA")
    topcoat_ratio_b: float = Field(alias="topcoatRatioB")

    @field_validator("project_label", mode="before")
    @classmethod
    def _fallback_label(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_PROJECT_LABEL
        return value

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _reject_bool(cls, value: Any) -> Any:
        # bool is an int subclass and would otherwise coerce to 0.0/1.0
        if isinstance(value, bool):
            raise ValueError("must be a number, not a boolean")
        return value

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "CalculationInput":
        """
        Build an input from raw form data (snake_case or camelCase keys).

        Raises InvalidInputError listing every missing or non-numeric field.
        """
        from pydantic import ValidationError as PydanticValidationError

        from coatcalc.components.calculator.models import parse_pydantic_errors
        from coatcalc.errors import InvalidInputError

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise InvalidInputError(parse_pydantic_errors(e)) from e


class CalculationResult(BaseModel):
    """Masses in kilograms, rounded to 4 decimal places."""

    model_config = ConfigDict(frozen=True)

    primer_weight: float
    topcoat_weight: float
    primer_curing_agent: float
    topcoat_curing_agent: float
    total_weight: float

# --- History ---

class HistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    created_at: str  # display string, formatted when recorded
    project_label: str
    area_mm2: float
    total_weight: float
    result: CalculationResult
