"""Weight units, rounding grids and plate math."""
import math
from typing import Dict, List, Literal, Optional

Units = Literal["lb", "kg"]

LB_PER_KG = 2.20462

# Loadable increments per equipment type
ROUNDING_STEPS: Dict[str, Dict[str, float]] = {
    "barbell": {"lb": 5.0, "kg": 2.5},
    "dumbbell": {"lb": 2.5, "kg": 1.25},
}
DEFAULT_STEP = 1.0

DEFAULT_BAR = {"lb": 45.0, "kg": 20.0}
PLATE_SIZES = {
    "lb": [45, 35, 25, 10, 5, 2.5, 1.25],
    "kg": [25, 20, 15, 10, 5, 2.5, 1.25],
}


def normalize_units(value: Optional[str]) -> Units:
    """Map free-form unit strings onto "lb" or "kg". Unknown values mean lb."""
    if value and str(value).strip().lower() in ("kg", "kgs", "kilo", "kilos", "kilograms"):
        return "kg"
    return "lb"


def rounding_step(equip: Optional[str], units: str) -> float:
    """Smallest loadable jump for the equipment in the given units."""
    steps = ROUNDING_STEPS.get((equip or "").lower())
    if steps is None:
        return DEFAULT_STEP
    return steps[normalize_units(units)]


def round_to_step(weight: float, step: float) -> float:
    """Round to the nearest multiple of step, halves rounding up."""
    if step <= 0:
        raise ValueError(f"rounding step must be positive, got {step}")
    return math.floor(weight / step + 0.5) * step


def to_kg(pounds: float) -> float:
    return pounds / LB_PER_KG


def to_lb(kilos: float) -> float:
    return kilos * LB_PER_KG


def convert_weight(value: float, from_units: str, to_units: str) -> float:
    """Convert a weight between lb and kg. Same units return the value unchanged."""
    source, target = normalize_units(from_units), normalize_units(to_units)
    if source == target:
        return value
    return to_kg(value) if target == "kg" else to_lb(value)


def compute_plates(total: float, units: str = "lb", bar: Optional[float] = None) -> Dict:
    """
    Greedy per-side plate breakdown for a barbell load.

    Args:
        total: Total load including the bar
        units: "lb" or "kg"
        bar: Bar weight (defaults to 45 lb / 20 kg)

    Returns:
        {"perSide": float, "stacks": [{"size": plate, "count": n}, ...]}
    """
    units = normalize_units(units)
    bar = DEFAULT_BAR[units] if bar is None else bar
    per_side = (float(total or 0) - bar) / 2
    if per_side <= 0:
        return {"perSide": 0.0, "stacks": []}

    remaining = per_side
    stacks: List[Dict] = []
    for size in PLATE_SIZES[units]:
        count = 0
        # 1e-6 absorbs float drift from the subtraction loop
        while remaining + 1e-6 >= size:
            remaining -= size
            count += 1
        if count:
            stacks.append({"size": size, "count": count})

    return {"perSide": per_side, "stacks": stacks}
