"""Next-weight suggestions from logged training history."""
from .advisor import ProgressionAdvisor
from .models import (
    ExerciseHistoryEntry,
    ExerciseMeta,
    ProgressionContext,
    ProgressionSuggestion,
    SetRecord,
)

__all__ = [
    "ExerciseHistoryEntry",
    "ExerciseMeta",
    "ProgressionAdvisor",
    "ProgressionContext",
    "ProgressionSuggestion",
    "SetRecord",
]
