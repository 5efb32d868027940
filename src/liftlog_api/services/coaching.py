"""
Rest and warm-up guidance.

Both helpers compute a deterministic answer from the exercise name (and the
top-set target for warm-ups), then let a text oracle rewrite it when one is
configured. An oracle failure returns the deterministic text.
"""
import logging
import re
from typing import List, Optional

from liftlog_api.oracles.base import NULL_ORACLE, RefinementOracle
from liftlog_api.units import normalize_units, round_to_step, rounding_step
from liftlog_api.utils import collapse_whitespace

logger = logging.getLogger(__name__)

ISOLATION_TERMS = re.compile(
    r'raise|curl|extension|fly|flye|pushdown|kickback|shrug|calf|pec deck|crossover|abduction|adduction'
)
COMPOUND_TERMS = re.compile(
    r'squat|deadlift|\brdl\b|press|\brow\b|lunge|pull-up|pullup|chin|\bdip|hip thrust|clean'
)

REST_COMPOUND = "Rest 2-3 min between sets."
REST_MODERATE = "Rest 90-120s between sets."
REST_ISOLATION = "Rest 45-75s between sets."

# (fraction of top set, reps)
WARMUP_RAMP = [(0.4, 8), (0.6, 5), (0.75, 3), (0.9, 1)]
GENERIC_RAMP = [
    "Light set x 10 (RPE 3-4)",
    "Moderate set x 6 (RPE 5-6)",
    "Heavier set x 3 (RPE 7)",
    "Then start working sets.",
]
WARMUP_CUE = "Cue: move the light sets fast and keep the setup identical to your working sets."


def rest_guideline(name: str) -> str:
    """One-line rest recommendation inferred from the exercise name."""
    lowered = collapse_whitespace(name).lower()
    if ISOLATION_TERMS.search(lowered):
        return REST_ISOLATION
    if COMPOUND_TERMS.search(lowered):
        return REST_COMPOUND
    return REST_MODERATE


def warmup_ramp(target: Optional[float], units: str = "lb", equip: str = "barbell") -> List[str]:
    """Warm-up sets tapering to the top-set target, or a generic RPE ramp."""
    if target is None or target <= 0:
        return list(GENERIC_RAMP)

    units = normalize_units(units)
    step = rounding_step(equip, units)
    lines = []
    for fraction, reps in WARMUP_RAMP:
        load = round_to_step(target * fraction, step)
        lines.append(f"{int(fraction * 100)}%: {load:g}{units} x {reps}")
    lines.append(f"Top set: {target:g}{units}")
    return lines


def _refine_text(oracle: RefinementOracle, prompt: str, fallback: str) -> str:
    if not oracle.available:
        return fallback
    try:
        refined = oracle.refine(prompt)
    except Exception as e:
        logger.warning(f"Text oracle '{oracle.name}' failed, using built-in guidance: {e}")
        return fallback
    return refined if isinstance(refined, str) and refined.strip() else fallback


def rest_text(name: str, oracle: Optional[RefinementOracle] = None) -> str:
    fallback = rest_guideline(name)
    return _refine_text(oracle or NULL_ORACLE, f"Exercise: {name}", fallback)


def warmup_text(
    name: str,
    units: str = "lb",
    target: Optional[float] = None,
    oracle: Optional[RefinementOracle] = None,
) -> str:
    units = normalize_units(units)
    ramp = warmup_ramp(target, units)
    fallback = "\n".join(ramp + [WARMUP_CUE])

    if target:
        prompt = f"Exercise: {name}\nTop set target: {target:g}{units}\nGive the ramp + 1 cue."
    else:
        prompt = f"Exercise: {name}\nNo target. Provide a generic ramp based on RPE + 1 cue."
    prompt += "\nSuggested ramp:\n" + "\n".join(ramp)

    return _refine_text(oracle or NULL_ORACLE, prompt, fallback)
