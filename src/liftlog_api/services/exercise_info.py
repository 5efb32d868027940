"""Keyword classification of exercise names into equipment and category."""
import re
from typing import Dict, List, Tuple

from liftlog_api.utils import collapse_whitespace


# First match wins
EQUIPMENT_RULES: List[Tuple[str, re.Pattern]] = [
    ("smith", re.compile(r'\bsmith\b')),
    ("barbell", re.compile(r'barbell|\bbb\b')),
    ("dumbbell", re.compile(r'dumbbell|\bdb\b')),
    ("cable", re.compile(r'cable|rope|pulldown|\brow\b')),
    ("bodyweight", re.compile(r'dip|hanging|push-up|chin|pull-up|neck|leg raise|back extension')),
    ("machine", re.compile(r'machine|pec deck|leg press|abduction|adduction|ham.*curl|leg extension|calf')),
]
DEFAULT_EQUIPMENT = "machine"

CATEGORY_RULES: List[Tuple[str, re.Pattern]] = [
    ("lower_comp", re.compile(r'squat|deadlift|romanian|\brdl\b|leg press|split squat|hack squat')),
    ("upper_comp", re.compile(r'bench|press|\brow\b|pulldown|pull-up|\bdip|\bohp\b|shoulder press')),
]
DEFAULT_CATEGORY = "iso_small"


def _first_match(rules: List[Tuple[str, re.Pattern]], name: str, default: str) -> str:
    lowered = name.lower()
    for label, pattern in rules:
        if pattern.search(lowered):
            return label
    return default


def guess_equipment(name: str) -> str:
    return _first_match(EQUIPMENT_RULES, name, DEFAULT_EQUIPMENT)


def guess_category(name: str) -> str:
    return _first_match(CATEGORY_RULES, name, DEFAULT_CATEGORY)


def describe_exercise(name: str) -> Dict[str, str]:
    """Canonical name plus guessed equipment and category."""
    canonical = collapse_whitespace(name)
    return {
        "name": canonical,
        "equip": guess_equipment(canonical),
        "cat": guess_category(canonical),
    }
