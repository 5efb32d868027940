"""
Progression Advisor

Suggests the next working weight for an exercise from its most recent
session. A fixed percentage-step heuristic always produces a value first;
a refinement oracle, when one is supplied, may replace it.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from liftlog_api.oracles.base import NULL_ORACLE, RefinementOracle
from liftlog_api.units import convert_weight, normalize_units, round_to_step, rounding_step
from liftlog_api.utils import to_number
from .models import (
    ExerciseHistoryEntry,
    ExerciseMeta,
    OracleRefinement,
    ProgressionContext,
    ProgressionSuggestion,
    SetRecord,
    TopSetBasis,
)

logger = logging.getLogger(__name__)

# Base increment as a fraction of the top set's load
BASE_STEPS = {
    "lower_comp": 0.035,
    "upper_comp": 0.0225,
}
ISOLATION_STEP = 0.015

CLEAN_SESSION_MULTIPLIER = 1.25
MOSTLY_FAILED_MULTIPLIER = 0.5


def base_step(cat: Optional[str]) -> float:
    """Percentage step for an exercise category."""
    return BASE_STEPS.get((cat or "").lower(), ISOLATION_STEP)


def select_top_set(sets: Iterable[SetRecord]) -> Optional[SetRecord]:
    """Heaviest set, ties broken by more reps. The earliest wins a full tie."""
    top = None
    for s in sets:
        if top is None or (s.weight, s.reps) > (top.weight, top.reps):
            top = s
    return top


def failed_rate(sets: Sequence[SetRecord]) -> float:
    """Share of sets taken to failure; 0 for an empty session."""
    if not sets:
        return 0.0
    return sum(1 for s in sets if s.failed) / len(sets)


def failure_multiplier(rate: float) -> float:
    """Scale the increment down after a grinding session and up after a clean one."""
    if rate > 0.5:
        return MOSTLY_FAILED_MULTIPLIER
    if rate == 0:
        return CLEAN_SESSION_MULTIPLIER
    return 1.0


def heuristic_next(top: SetRecord, rate: float, meta: ExerciseMeta, units: str) -> float:
    """Deterministic next weight for a top set against the target rep range."""
    step = rounding_step(meta.equip, units)
    increment = max(top.weight, 0) * base_step(meta.cat) * failure_multiplier(rate)

    if top.reps >= meta.high:
        return round_to_step(top.weight + increment, step)
    if top.reps < meta.low:
        return round_to_step(max(0.0, top.weight - increment), step)
    # Hold, snapped onto the loadable grid
    return round_to_step(top.weight, step)


def _to_units(entry: ExerciseHistoryEntry, units: str) -> ExerciseHistoryEntry:
    if not entry.units or normalize_units(entry.units) == units:
        return entry
    converted = [
        s.model_copy(update={"weight": convert_weight(s.weight, entry.units, units)})
        for s in entry.sets
    ]
    return ExerciseHistoryEntry(sets=converted, units=units)


class ProgressionAdvisor:
    """Computes next-weight suggestions, optionally refined by an oracle."""

    def __init__(self, oracle: Optional[RefinementOracle] = None):
        self.oracle = oracle or NULL_ORACLE

    def suggest_next(
        self,
        meta: Any,
        history: Any,
        units: Optional[str] = "lb",
        ex_name: str = "",
    ) -> ProgressionSuggestion:
        """
        Suggest the next working weight.

        Args:
            meta: ExerciseMeta or a dict with cat/equip/low/high
            history: Past sessions for the exercise, most recent first
            units: "lb" or "kg"; selects the rounding grid
            ex_name: Exercise name, shown to the oracle

        Returns:
            ProgressionSuggestion with rationale "fallback", "ai" or "error"
        """
        try:
            meta_model = meta if isinstance(meta, ExerciseMeta) else ExerciseMeta.model_validate(meta)
            entries = self._load_history(history)
        except (ValidationError, TypeError) as e:
            logger.warning(f"Cannot build suggestion from malformed input: {e}")
            return ProgressionSuggestion(next=None, rationale="error")

        if not entries:
            return ProgressionSuggestion(next=None, rationale="fallback")

        unit = normalize_units(units)
        entries = [_to_units(entry, unit) for entry in entries]
        latest = entries[0]
        top = select_top_set(latest.sets)
        if top is None:
            top = SetRecord(w=0, r=0)
        rate = failed_rate(latest.sets)

        try:
            fallback = heuristic_next(top, rate, meta_model, unit)
        except (ArithmeticError, ValueError) as e:
            logger.warning(f"Cannot compute next weight from top set {top.weight}x{top.reps}: {e}")
            return ProgressionSuggestion(next=None, rationale="error")

        suggestion = ProgressionSuggestion(
            next=fallback,
            rationale="fallback",
            basis=TopSetBasis(weight=top.weight, reps=top.reps, failed_rate=rate),
        )

        context = ProgressionContext(
            ex_name=ex_name or meta_model.name or "",
            meta=meta_model,
            units=unit,
            history=entries,
            fallback=suggestion.next,
        )
        refinement = self._consult_oracle(context)
        if refinement is not None:
            suggestion.next = refinement.next
            suggestion.rationale = "ai"
            suggestion.note = refinement.note

        return suggestion

    @staticmethod
    def _load_history(history: Any) -> List[ExerciseHistoryEntry]:
        if history is None:
            return []
        if isinstance(history, (str, bytes, dict)):
            raise TypeError(f"history must be a list of sessions, got {type(history).__name__}")
        return [
            entry if isinstance(entry, ExerciseHistoryEntry) else ExerciseHistoryEntry.model_validate(entry)
            for entry in history
        ]

    def _consult_oracle(self, context: ProgressionContext) -> Optional[OracleRefinement]:
        """Single attempt. Any failure or non-numeric answer keeps the fallback."""
        if not self.oracle.available:
            return None

        try:
            result = self.oracle.refine(context)
        except Exception as e:
            logger.warning(f"Progression oracle '{self.oracle.name}' failed, keeping fallback: {e}")
            return None

        if result is None:
            return None

        if isinstance(result, dict):
            raw_next = result.get("next")
            note = result.get("note") or result.get("rationale")
        else:
            raw_next = getattr(result, "next", None)
            note = getattr(result, "note", None)

        value = to_number(raw_next)
        if value is None or value < 0:
            logger.warning(f"Progression oracle '{self.oracle.name}' returned unusable next value: {raw_next!r}")
            return None

        return OracleRefinement(next=value, note=note if isinstance(note, str) else None)
