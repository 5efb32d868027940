"""
Split Text Parser

Parses pasted workout splits by:
- Segmenting lines into day headings and exercise prescriptions
- Skipping anything it does not recognise
- Handing the raw text to a parsing oracle only when no day was found

Parsing is best effort: malformed text never raises.
"""

import logging
import re
from typing import Any, List, Optional

from pydantic import ValidationError

from liftlog_api.oracles.base import NULL_ORACLE, RefinementOracle
from .models import ParsedDay, ParsedExercise, ParsedSplit
from .rules import DEFAULT_RULES, DayHeading, ExerciseLine, LineRule, classify_line

logger = logging.getLogger(__name__)

DEFAULT_DAY_NAME = "DAY 1"

# One leading bullet marker
BULLET_PATTERN = re.compile(r'^[•\-*]\s*')


def preprocess_lines(text: str) -> List[str]:
    """Normalize line endings, trim, drop blank lines and strip one bullet."""
    normalized = str(text or "").replace('\r\n', '\n').replace('\r', '\n')
    lines: List[str] = []

    for line in normalized.split('\n'):
        trimmed = line.strip()
        if not trimmed:
            continue
        trimmed = BULLET_PATTERN.sub('', trimmed, count=1).strip()
        if trimmed:
            lines.append(trimmed)

    return lines


class SplitTextParser:
    """Parser for pasted training splits"""

    def __init__(self, rules: Optional[List[LineRule]] = None):
        self.rules = rules if rules is not None else DEFAULT_RULES

    def parse_heuristic(self, text: str) -> ParsedSplit:
        """Single pass over the lines; no external calls."""
        days: List[ParsedDay] = []
        current: Optional[ParsedDay] = None

        for line in preprocess_lines(text):
            token = classify_line(line, self.rules)

            if isinstance(token, DayHeading):
                current = ParsedDay(name=token.name)
                days.append(current)
            elif isinstance(token, ExerciseLine):
                if current is None:
                    current = ParsedDay(name=DEFAULT_DAY_NAME)
                    days.append(current)
                current.exercises.append(token.exercise)

        return ParsedSplit(days=days, source="heuristic" if days else "none")

    def parse(self, text: Any, oracle: Optional[RefinementOracle] = None) -> ParsedSplit:
        """
        Parse pasted text into days and exercises.

        Args:
            text: Raw pasted text
            oracle: Parsing oracle consulted only when the heuristic finds no day

        Returns:
            ParsedSplit, possibly with no days
        """
        if not isinstance(text, str):
            text = "" if text is None else str(text)

        result = self.parse_heuristic(text)
        if result.days:
            return result

        oracle = oracle or NULL_ORACLE
        if not oracle.available or not text.strip():
            return result

        try:
            reply = oracle.refine(text)
        except Exception as e:
            logger.warning(f"Split parsing oracle '{oracle.name}' failed: {e}")
            return ParsedSplit(source="none")

        days = self.days_from_reply(reply)
        return ParsedSplit(days=days, source="ai" if days else "none")

    @staticmethod
    def days_from_reply(reply: Any) -> List[ParsedDay]:
        """
        Validate an oracle reply of shape {"days": [{name, exercises: [...]}]}.

        Exercises that fail validation are dropped and unnamed days are
        numbered; a reply that is not of the expected shape yields no days.
        """
        if not isinstance(reply, dict) or not isinstance(reply.get("days"), list):
            logger.warning("Split parsing oracle reply has no 'days' list")
            return []

        days: List[ParsedDay] = []
        for raw_day in reply["days"]:
            if not isinstance(raw_day, dict):
                continue

            exercises: List[ParsedExercise] = []
            raw_exercises = raw_day.get("exercises")
            for raw_ex in raw_exercises if isinstance(raw_exercises, list) else []:
                try:
                    exercises.append(ParsedExercise.model_validate(raw_ex))
                except ValidationError as e:
                    logger.debug(f"Dropping oracle exercise {raw_ex!r}: {e}")

            name = str(raw_day.get("name") or "").strip() or f"DAY {len(days) + 1}"
            days.append(ParsedDay(name=name, exercises=exercises))

        return days
