"""
Progression Models

Pydantic models for logged sets, exercise history and weight suggestions.
Field aliases follow the client's wire names (w, r, exName).
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

Rationale = Literal["fallback", "ai", "error"]


def _blank_to_zero(value: Any) -> Any:
    # Empty form inputs arrive as "" or null
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    return value


class SetRecord(BaseModel):
    """One completed working set."""
    weight: float = Field(default=0, ge=0, allow_inf_nan=False, alias="w")
    reps: int = Field(default=0, ge=0, alias="r")
    failed: bool = Field(default=False, description="Taken to momentary muscular failure")
    drop: bool = Field(default=False, description="Bonus set appended after the main sets")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("weight", "reps", mode="before")
    @classmethod
    def _coerce_blanks(cls, value: Any) -> Any:
        return _blank_to_zero(value)


class ExerciseHistoryEntry(BaseModel):
    """One exercise's sets from one past session, in performed order."""
    sets: List[SetRecord] = Field(default_factory=list)
    units: Optional[str] = Field(default=None, description="Units the weights were logged in")

    class Config:
        extra = "ignore"


class ExerciseMeta(BaseModel):
    """Programming metadata for an exercise."""
    name: Optional[str] = None
    cat: str = Field(default="other", description="lower_comp | upper_comp | other")
    equip: str = Field(default="other", description="barbell | dumbbell | other")
    low: int = Field(default=8, ge=0)
    high: int = Field(default=12, ge=0)

    class Config:
        extra = "ignore"

    @model_validator(mode="after")
    def _order_range(self) -> "ExerciseMeta":
        if self.high < self.low:
            self.low, self.high = self.high, self.low
        return self


class TopSetBasis(BaseModel):
    """The set a suggestion was derived from."""
    weight: float
    reps: int
    failed_rate: float


class ProgressionSuggestion(BaseModel):
    """Suggested next working weight and where it came from."""
    next: Optional[float] = None
    rationale: Rationale = "fallback"
    basis: Optional[TopSetBasis] = None
    note: Optional[str] = None


class ProgressionContext(BaseModel):
    """Everything a refinement oracle is shown when asked for a next weight."""
    ex_name: str = ""
    meta: ExerciseMeta
    units: Literal["lb", "kg"] = "lb"
    history: List[ExerciseHistoryEntry]
    fallback: Optional[float] = None

    def to_payload(self) -> dict:
        """Wire-format view of the context, as the client sends it."""
        return {
            "exName": self.ex_name,
            "meta": self.meta.model_dump(exclude_none=True),
            "units": self.units,
            "history": [
                {"sets": [s.model_dump(by_alias=True) for s in entry.sets]}
                for entry in self.history
            ],
            "fallback": self.fallback,
        }


class OracleRefinement(BaseModel):
    """A refined next weight returned by an oracle."""
    next: float
    note: Optional[str] = None
