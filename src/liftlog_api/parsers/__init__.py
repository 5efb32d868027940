"""Parsers for pasted training splits."""
from .models import ParsedDay, ParsedExercise, ParsedSplit
from .split_parser import SplitTextParser, preprocess_lines

__all__ = [
    "ParsedDay",
    "ParsedExercise",
    "ParsedSplit",
    "SplitTextParser",
    "preprocess_lines",
]
