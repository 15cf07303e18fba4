# backend/app/schemas/farmer/yield_estimation.py

from typing import Dict, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


AreaUnit = Literal["acres", "hectares"]
SoilFertility = Literal["low", "medium", "high"]
ConfidenceLabel = Literal["Low", "Medium", "High"]
BaselineSource = Literal["previous_yield", "crop_table", "default"]

# upper bounds keep every product in the engine finite
MAX_AREA = 1_000_000
MAX_RAINFALL_MM = 20_000
MAX_FERTILIZER_KG_PER_ACRE = 10_000
MAX_YIELD_QTL_PER_ACRE = 1_000
MAX_PRICE_PER_QUINTAL = 1_000_000


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ============================================================
# MODEL CONFIGURATION
# ============================================================

class YieldModelConfig(CamelModel):
    """
    Tunable constants of the yield heuristic. Defaults describe the
    generic model; a regional JSON file can override any of them.
    """

    # quintals per acre, keyed by lower-case crop name
    baseline_yields: Dict[str, float] = {
        "wheat": 18,
        "rice": 22,
        "maize": 25,
        "cotton": 8,
        "soybean": 12,
    }
    default_baseline: float = Field(15, gt=0)

    fertility_factors: Dict[str, float] = {
        "low": 0.9,
        "medium": 1.0,
        "high": 1.15,
    }

    # rainfall bell around the optimum
    rainfall_optimum_mm: float = Field(750, ge=0)
    rainfall_spread_mm: float = Field(300, gt=0)
    rainfall_penalty_per_spread: float = Field(0.2, ge=0)
    rainfall_factor_min: float = Field(0.75, gt=0, le=1)

    # diminishing returns up to the reference rate
    fertilizer_reference_rate: float = Field(100, gt=0)
    fertilizer_factor_min: float = Field(0.8, gt=0)
    fertilizer_factor_max: float = Field(1.2, gt=0)

    # linear over the management score range
    management_score_min: int = 1
    management_score_max: int = 10
    management_factor_min: float = Field(0.85, gt=0)
    management_factor_max: float = Field(1.2, gt=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True
        # a typo in a regional file must not be silently ignored
        extra = "forbid"

    @field_validator("baseline_yields", "fertility_factors")
    @classmethod
    def _lower_keys(cls, value: Dict[str, float]) -> Dict[str, float]:
        return {str(k).strip().lower(): float(v) for k, v in value.items()}

    @field_validator("baseline_yields")
    @classmethod
    def _positive_baselines(cls, value: Dict[str, float]) -> Dict[str, float]:
        bad = [k for k, v in value.items() if v <= 0]
        if bad:
            raise ValueError(f"baseline yields must be positive: {', '.join(sorted(bad))}")
        return value

    @field_validator("fertility_factors")
    @classmethod
    def _all_fertility_levels(cls, value: Dict[str, float]) -> Dict[str, float]:
        missing = {"low", "medium", "high"} - set(value)
        if missing:
            raise ValueError(f"missing fertility levels: {', '.join(sorted(missing))}")
        return value

    @model_validator(mode="after")
    def _ordered_bounds(self):
        if self.management_score_max <= self.management_score_min:
            raise ValueError("management_score_max must be greater than management_score_min")
        if self.management_factor_max < self.management_factor_min:
            raise ValueError("management_factor_max must not be below management_factor_min")
        if self.fertilizer_factor_max < self.fertilizer_factor_min:
            raise ValueError("fertilizer_factor_max must not be below fertilizer_factor_min")
        return self


# ============================================================
# ESTIMATION INPUT / RESULT
# ============================================================

class EstimationInput(CamelModel):
    crop: str = Field(..., min_length=1, max_length=64)
    area: float = Field(..., gt=0, le=MAX_AREA, allow_inf_nan=False)
    area_unit: AreaUnit
    soil_fertility: SoilFertility
    rainfall_mm: float = Field(..., ge=0, le=MAX_RAINFALL_MM, allow_inf_nan=False)
    fertilizer_rate_kg_per_acre: float = Field(..., ge=0, le=MAX_FERTILIZER_KG_PER_ACRE, allow_inf_nan=False)
    # 0 means "unknown, use the crop default"
    previous_yield_qtl_per_acre: float = Field(..., ge=0, le=MAX_YIELD_QTL_PER_ACRE, allow_inf_nan=False)
    management_score: int = Field(..., ge=1, le=10)

    price_per_quintal: Optional[float] = Field(None, ge=0, le=MAX_PRICE_PER_QUINTAL, allow_inf_nan=False)


class FactorBreakdown(CamelModel):
    baseline: float
    baseline_source: BaselineSource
    fertility_factor: float
    rainfall_factor: float
    fertilizer_factor: float
    management_factor: float


class EstimationResult(CamelModel):
    yield_per_acre: float
    total_yield: float
    unit: Literal["quintals"] = "quintals"
    rationale: str
    confidence: ConfidenceLabel

    area_in_acres: float
    factors: FactorBreakdown
    revenue_estimate: Optional[float] = None


# ============================================================
# SAVED INPUTS
# ============================================================

class SavedEstimationInputOut(CamelModel):
    storage_key: str
    input: EstimationInput
    updated_at: datetime
