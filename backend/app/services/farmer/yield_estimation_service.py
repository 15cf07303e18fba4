# backend/app/services/farmer/yield_estimation_service.py

"""
Crop Yield Estimator (rule-based heuristic)

Estimated yield per acre = baseline x fertility x rainfall x fertilizer x management

 1. Area is normalized to acres (hectares x 2.47105)
 2. Baseline comes from the farmer's previous yield when given,
    otherwise from the crop table (generic default for unknown crops)
 3. Four independent factors, each clamped to its own bounds:
      - soil fertility (discrete low / medium / high)
      - rainfall (symmetric penalty away from the optimum, with a floor)
      - fertilizer (diminishing returns up to a reference rate)
      - management score (linear 1..10)
 4. Per-acre and total yields are rounded half away from zero, only at the end
 5. Confidence is a 3-point rule:
      +1 previous yield supplied
      +1 crop found in the baseline table
      +1 rainfall inside the optimum band

The engine is pure: no I/O, no state between calls. Input validation
happens at the API boundary (pydantic), not here.
"""

import math
from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

from app.core.config import settings
from app.core.logger import get_logger
from app.schemas.farmer.yield_estimation import (
    EstimationInput,
    EstimationResult,
    FactorBreakdown,
    YieldModelConfig,
)

log = get_logger("engine")

# fixed unit definition, not part of the regional model
HECTARE_TO_ACRE = 2.47105


# -----------------------------------------------------------
# Helper functions
# -----------------------------------------------------------
def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_away(value: float) -> float:
    # round() in Python is banker's rounding; 22.5 must become 23
    return math.copysign(math.floor(abs(value) + 0.5), value)


class YieldEstimator:
    """Multi-factor yield heuristic bound to one YieldModelConfig."""

    def __init__(self, config: Optional[YieldModelConfig] = None):
        self.config = config or YieldModelConfig()

    # -------------------------------------------------------
    # Unit normalizer
    # -------------------------------------------------------
    def normalize_area_to_acres(self, area: float, unit: str) -> float:
        if unit == "acres":
            return area
        if unit == "hectares":
            return area * HECTARE_TO_ACRE
        raise ValueError(f"unsupported area unit: {unit!r}")

    # -------------------------------------------------------
    # Baseline selector
    # -------------------------------------------------------
    def is_known_crop(self, crop: str) -> bool:
        return str(crop).strip().lower() in self.config.baseline_yields

    def select_baseline(self, crop: str, previous_yield: float) -> Tuple[float, str]:
        """
        Returns (quintals per acre, source). A farmer-supplied historical
        yield always wins over the table.
        """
        if previous_yield > 0:
            return previous_yield, "previous_yield"

        key = str(crop).strip().lower()
        if key in self.config.baseline_yields:
            return self.config.baseline_yields[key], "crop_table"

        return self.config.default_baseline, "default"

    # -------------------------------------------------------
    # Factor calculator
    # -------------------------------------------------------
    def fertility_factor(self, fertility: str) -> float:
        try:
            return self.config.fertility_factors[fertility]
        except KeyError:
            raise ValueError(f"unsupported soil fertility: {fertility!r}") from None

    def rainfall_factor(self, rainfall_mm: float) -> float:
        cfg = self.config
        delta = abs(rainfall_mm - cfg.rainfall_optimum_mm) / cfg.rainfall_spread_mm
        return _clamp(1.0 - cfg.rainfall_penalty_per_spread * delta, cfg.rainfall_factor_min, 1.0)

    def fertilizer_factor(self, rate_kg_per_acre: float) -> float:
        cfg = self.config
        adequacy = min(1.0, max(0.0, rate_kg_per_acre) / cfg.fertilizer_reference_rate)
        factor = cfg.fertilizer_factor_min + (cfg.fertilizer_factor_max - cfg.fertilizer_factor_min) * adequacy
        return _clamp(factor, cfg.fertilizer_factor_min, cfg.fertilizer_factor_max)

    def management_factor(self, score: int) -> float:
        cfg = self.config
        steps = cfg.management_score_max - cfg.management_score_min
        per_step = (cfg.management_factor_max - cfg.management_factor_min) / steps
        factor = cfg.management_factor_min + (score - cfg.management_score_min) * per_step
        return _clamp(factor, cfg.management_factor_min, cfg.management_factor_max)

    # -------------------------------------------------------
    # Yield composer
    # -------------------------------------------------------
    def compose(
        self,
        baseline: float,
        fertility_factor: float,
        rainfall_factor: float,
        fertilizer_factor: float,
        management_factor: float,
        area_in_acres: float,
    ) -> Tuple[float, float]:
        per_acre = baseline * fertility_factor * rainfall_factor * fertilizer_factor * management_factor
        yield_per_acre = _round_half_away(per_acre)
        total_yield = _round_half_away(yield_per_acre * area_in_acres)
        return yield_per_acre, total_yield

    # -------------------------------------------------------
    # Confidence scorer
    # -------------------------------------------------------
    def score_confidence(self, data: EstimationInput) -> str:
        cfg = self.config
        score = 0
        if data.previous_yield_qtl_per_acre > 0:
            score += 1
        if self.is_known_crop(data.crop):
            score += 1
        if abs(data.rainfall_mm - cfg.rainfall_optimum_mm) < cfg.rainfall_spread_mm:
            score += 1

        if score >= 3:
            return "High"
        if score == 2:
            return "Medium"
        return "Low"

    # -------------------------------------------------------
    # MAIN ESTIMATE
    # -------------------------------------------------------
    def estimate(self, data: EstimationInput) -> EstimationResult:
        area_in_acres = self.normalize_area_to_acres(data.area, data.area_unit)
        baseline, source = self.select_baseline(data.crop, data.previous_yield_qtl_per_acre)

        fertility = self.fertility_factor(data.soil_fertility)
        rainfall = self.rainfall_factor(data.rainfall_mm)
        fertilizer = self.fertilizer_factor(data.fertilizer_rate_kg_per_acre)
        management = self.management_factor(data.management_score)

        yield_per_acre, total_yield = self.compose(
            baseline, fertility, rainfall, fertilizer, management, area_in_acres
        )
        confidence = self.score_confidence(data)

        revenue = None
        if data.price_per_quintal is not None:
            revenue = round(total_yield * data.price_per_quintal, 2)

        log.debug(
            "Yield estimate computed",
            extra={"crop": data.crop, "confidence": confidence},
        )

        return EstimationResult(
            yield_per_acre=yield_per_acre,
            total_yield=total_yield,
            rationale=_build_rationale(data, baseline, source, area_in_acres),
            confidence=confidence,
            area_in_acres=round(area_in_acres, 4),
            factors=FactorBreakdown(
                baseline=baseline,
                baseline_source=source,
                fertility_factor=round(fertility, 4),
                rainfall_factor=round(rainfall, 4),
                fertilizer_factor=round(fertilizer, 4),
                management_factor=round(management, 4),
            ),
            revenue_estimate=revenue,
        )


def _build_rationale(data: EstimationInput, baseline: float, source: str, area_in_acres: float) -> str:
    crop = data.crop.strip() or "the crop"
    if source == "previous_yield":
        basis = "your previous yield"
    elif source == "crop_table":
        basis = f"the typical {crop.lower()} yield"
    else:
        basis = "a generic default for crops not in the table"

    return (
        f"Based on {basis} of {baseline:g} quintals/acre for {crop}, "
        f"{data.soil_fertility} soil fertility, {data.rainfall_mm:g} mm expected rainfall, "
        f"{data.fertilizer_rate_kg_per_acre:g} kg/acre fertilizer and a management score of "
        f"{data.management_score}/10 over {area_in_acres:.2f} acres."
    )


# -----------------------------------------------------------
# Model config loading
# -----------------------------------------------------------
def load_model_config(path: Optional[str] = None) -> YieldModelConfig:
    """
    Read a YieldModelConfig from a JSON file, or the built-in defaults
    when no path is given. Missing file / invalid content raise.
    """
    if not path:
        return YieldModelConfig()

    raw = Path(path).read_text(encoding="utf-8")
    config = YieldModelConfig.model_validate_json(raw)
    log.info("Loaded yield model config from %s", path)
    return config


@lru_cache(maxsize=1)
def get_estimator() -> YieldEstimator:
    return YieldEstimator(load_model_config(settings.YIELD_MODEL_CONFIG_PATH))
