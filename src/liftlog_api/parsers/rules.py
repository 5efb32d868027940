"""
Line Rules

Each rule pairs a predicate (a compiled pattern) with an extractor that turns
a matching line into a token. The split parser runs rules top to bottom and
the first rule that extracts a token wins.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Union

from pydantic import ValidationError

from .models import ParsedExercise


@dataclass(frozen=True)
class DayHeading:
    """A line that opens a new training day"""
    name: str


@dataclass(frozen=True)
class ExerciseLine:
    """A line that prescribes an exercise"""
    exercise: ParsedExercise


LineToken = Union[DayHeading, ExerciseLine]


class LineRule(ABC):
    """Abstract base class for line rules"""

    name: str = "rule"
    pattern: re.Pattern

    def matches(self, line: str) -> bool:
        return self.pattern.match(line) is not None

    def extract(self, line: str) -> Optional[LineToken]:
        """Return a token for the line, or None when the rule does not apply."""
        match = self.pattern.match(line)
        if not match:
            return None
        return self.build(match)

    @abstractmethod
    def build(self, match: re.Match) -> Optional[LineToken]:
        pass


class ExerciseLineRule(LineRule):
    """`<name> <sep> <sets>x<low>[-<high>]`, e.g. "Bench Press — 3x8-10"."""

    name = "exercise"
    pattern = re.compile(
        r'^(?P<name>.+?)\s*(?:—|–|-|:)\s*'  # Name and separator
        r'(?P<sets>\d+)\s*[x×]\s*(?P<low>\d+)'  # Sets x Reps
        r'(?:\s*(?:-|–|to)\s*(?P<high>\d+))?',  # Optional top of range
        re.IGNORECASE,
    )

    def build(self, match: re.Match) -> Optional[LineToken]:
        high = match.group('high')
        try:
            exercise = ParsedExercise(
                name=match.group('name'),
                sets=int(match.group('sets')),
                low=int(match.group('low')),
                high=int(high) if high else None,
            )
        except ValidationError:
            return None
        return ExerciseLine(exercise)


WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class DayHeadingRule(LineRule):
    """Lines starting with a split keyword, "Day <n>" or a weekday name."""

    name = "day_heading"
    pattern = re.compile(
        # "Pull-ups" and "Push-ups AMRAP" are exercise names, not headings
        r'^(?:(?:push|pull|legs|upper|lower|rest|' + "|".join(WEEKDAYS) + r')(?![\w-])|day\s*\d+\b)',
        re.IGNORECASE,
    )

    def build(self, match: re.Match) -> Optional[LineToken]:
        return DayHeading(name=match.string.strip().upper())


# A line carrying a sets x reps prescription is an exercise even when its
# name starts with a heading keyword ("Pull-ups - 3x8").
DEFAULT_RULES: List[LineRule] = [
    ExerciseLineRule(),
    DayHeadingRule(),
]


def classify_line(line: str, rules: Optional[List[LineRule]] = None) -> Optional[LineToken]:
    """Run rules in order against one preprocessed line."""
    for rule in rules if rules is not None else DEFAULT_RULES:
        token = rule.extract(line)
        if token is not None:
            return token
    return None
