"""
Parser Models

Pydantic models for a parsed training split: ordered days, each holding
ordered exercises with a set count and a rep range.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ParsedExercise(BaseModel):
    """One programmed exercise"""
    name: str = Field(..., min_length=1)
    sets: int = Field(default=1, ge=0)
    low: int = Field(..., ge=0, description="Bottom of the rep range")
    high: Optional[int] = Field(default=None, ge=0, description="Top of the rep range; defaults to low")

    class Config:
        extra = "ignore"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = " ".join(value.split())
        if not value:
            raise ValueError("exercise name is empty")
        return value

    @model_validator(mode="after")
    def _normalize_range(self) -> "ParsedExercise":
        if self.high is None:
            self.high = self.low
        elif self.high < self.low:
            self.low, self.high = self.high, self.low
        return self


class ParsedDay(BaseModel):
    """A named training day"""
    name: str = Field(..., min_length=1)
    exercises: List[ParsedExercise] = Field(default_factory=list)

    class Config:
        extra = "ignore"

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("day name is empty")
        return value


class ParsedSplit(BaseModel):
    """Days in the order they appeared in the source text"""
    days: List[ParsedDay] = Field(default_factory=list)
    source: str = Field(default="none", description="heuristic | ai | none")

    @property
    def exercise_count(self) -> int:
        return sum(len(day.exercises) for day in self.days)
