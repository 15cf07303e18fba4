# backend/app/services/farmer/area_conversion_service.py

from typing import Dict, Any

# square metres per unit
AREA_TO_SQ_METERS: Dict[str, float] = {
    "acres": 4046.86,
    "hectares": 10000,
    "gunts": 101.17,
    "cents": 40.4686,
    "sqmeters": 1,
    "sqfeet": 0.092903,
}

UNIT_LABELS: Dict[str, str] = {
    "acres": "Acres",
    "hectares": "Hectares",
    "gunts": "Gunts",
    "cents": "Cents",
    "sqmeters": "Square Meters",
    "sqfeet": "Square Feet",
}


def _unit_key(unit: str) -> str:
    key = str(unit).strip().lower()
    if key not in AREA_TO_SQ_METERS:
        raise ValueError(f"unsupported area unit: {unit!r}")
    return key


def convert_area(value: float, from_unit: str, to_unit: str) -> float:
    """
    Convert a land area between local and metric units via square metres.
    Raises ValueError for negative values or unknown units.
    """
    if value < 0:
        raise ValueError("area must not be negative")

    src = _unit_key(from_unit)
    dst = _unit_key(to_unit)
    return value * AREA_TO_SQ_METERS[src] / AREA_TO_SQ_METERS[dst]


def conversion_summary(value: float, from_unit: str, to_unit: str) -> Dict[str, Any]:
    converted = convert_area(value, from_unit, to_unit)
    src = _unit_key(from_unit)
    dst = _unit_key(to_unit)
    return {
        "value": value,
        "from_unit": src,
        "to_unit": dst,
        "result": round(converted, 4),
        "label": f"{value:g} {UNIT_LABELS[src]} = {converted:,.4f} {UNIT_LABELS[dst]}",
    }
