"""
API routes for LiftLog.

Every POST endpoint answers 200 with an `ok` flag; callers tell semantic
failure apart by the body. The rate-limited coaching endpoints may answer 429.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from liftlog_api.config import Settings, settings
from liftlog_api.oracles import (
    build_progression_oracle,
    build_split_oracle,
    build_text_oracle,
)
from liftlog_api.parsers import ParsedSplit, SplitTextParser
from liftlog_api.progression import ProgressionAdvisor, ProgressionSuggestion
from liftlog_api.services.coaching import rest_text, warmup_text
from liftlog_api.services.exercise_info import describe_exercise
from liftlog_api.services.llm_service import LLMService
from liftlog_api.services.rate_limiter import SlidingWindowLimiter
from liftlog_api.units import compute_plates, normalize_units
from liftlog_api.utils import to_number

logger = logging.getLogger(__name__)

router = APIRouter()

warmup_limiter = SlidingWindowLimiter(max_requests=12, window_seconds=60)
rest_limiter = SlidingWindowLimiter(max_requests=20, window_seconds=60)

# Bodies returned when a request cannot be read at all
FAILURE_BODIES: Dict[str, Dict[str, Any]] = {
    "/api/suggest": {"ok": False, "next": None, "rationale": "error"},
    "/api/parse-split": {"ok": False, "days": []},
    "/api/warmup": {"ok": False, "text": ""},
    "/api/rest": {"ok": False, "text": ""},
    "/api/describe": {"ok": False, "text": ""},
    "/api/coach": {"ok": False, "advice": ""},
    "/api/exercise-info": {"ok": False},
    "/api/plates": {"ok": False, "perSide": 0, "stacks": []},
}

SLOW_DOWN = {"ok": False, "text": "Please slow down."}


def get_settings() -> Settings:
    """Settings dependency; tests override it to toggle the LLM path."""
    return settings


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "0"


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------

class LenientModel(BaseModel):
    class Config:
        extra = "ignore"


class SuggestRequest(LenientModel):
    """Request model for POST /api/suggest"""
    ex_name: str = Field(default="", alias="exName")
    meta: Any = None
    history: Any = Field(default_factory=list)
    units: Any = "lb"


class ParseSplitRequest(LenientModel):
    """Request model for POST /api/parse-split"""
    text: Any = ""


class NameRequest(LenientModel):
    name: Any = ""


class WarmupRequest(LenientModel):
    name: Any = ""
    units: Any = "lb"
    target: Any = None


class DescribeRequest(LenientModel):
    name: Any = ""
    equip: Any = "machine"
    cat: Any = "iso_small"


class CoachRequest(LenientModel):
    session: Any = None
    recent: Any = Field(default_factory=list)
    units: Any = "lb"
    day: Any = ""


class PlatesRequest(LenientModel):
    weight: Any = 0
    units: Any = "lb"
    bar: Any = None


# ---------------------------------------------------------------------------
# Response shaping
# ---------------------------------------------------------------------------

def suggestion_to_body(suggestion: ProgressionSuggestion) -> Dict[str, Any]:
    basis = None
    if suggestion.basis is not None:
        basis = {
            "weight": suggestion.basis.weight,
            "reps": suggestion.basis.reps,
            "failedRate": suggestion.basis.failed_rate,
        }
    return {
        "ok": suggestion.rationale != "error",
        "next": suggestion.next,
        "rationale": suggestion.rationale,
        "basis": basis,
        "note": suggestion.note,
    }


def split_to_body(split: ParsedSplit) -> Dict[str, Any]:
    body = split.model_dump()
    return {"ok": True, "days": body["days"], "source": body["source"]}


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("/health")
def health(config: Settings = Depends(get_settings)):
    return {
        "status": "ok",
        "environment": config.ENVIRONMENT,
        "llm_configured": config.llm_configured,
    }


@router.post("/api/suggest")
async def suggest(
    request: SuggestRequest,
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Suggest the next working weight for an exercise.

    ## Request Body
    - **exName**: Exercise name
    - **meta**: {cat, equip, low, high}
    - **history**: Past sessions, most recent first, each {sets: [{w, r, failed}]}
    - **units**: "lb" or "kg"

    ## Response
    - next: Suggested weight or null
    - rationale: "fallback" (heuristic), "ai" (LLM refined) or "error"
    """
    advisor = ProgressionAdvisor(oracle=build_progression_oracle(config))
    try:
        suggestion = await asyncio.to_thread(
            advisor.suggest_next,
            request.meta,
            request.history,
            request.units if isinstance(request.units, str) else "lb",
            request.ex_name,
        )
    except Exception:
        logger.exception("Suggestion failed")
        return JSONResponse(FAILURE_BODIES["/api/suggest"])

    return JSONResponse(suggestion_to_body(suggestion))


@router.post("/api/parse-split")
async def parse_split(
    request: ParseSplitRequest,
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    """
    Parse pasted split text into days and exercises.

    The LLM is only consulted when the line heuristics find no day.
    """
    parser = SplitTextParser()
    try:
        split = await asyncio.to_thread(parser.parse, request.text, build_split_oracle(config))
    except Exception:
        logger.exception("Split parsing failed")
        return JSONResponse(FAILURE_BODIES["/api/parse-split"])

    return JSONResponse(split_to_body(split))


@router.post("/api/exercise-info")
async def exercise_info(request: NameRequest) -> JSONResponse:
    """Canonical name plus guessed equipment and category."""
    info = describe_exercise(str(request.name or ""))
    return JSONResponse({"ok": True, **info})


@router.post("/api/rest")
async def rest(
    request: NameRequest,
    raw_request: Request,
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    """One-line rest guideline for an exercise."""
    if not rest_limiter.allow(client_key(raw_request)):
        return JSONResponse(SLOW_DOWN, status_code=429)

    oracle = build_text_oracle(config, LLMService.REST_PROMPT, "rest", temperature=0.2)
    text = await asyncio.to_thread(rest_text, str(request.name or ""), oracle)
    return JSONResponse({"ok": True, "text": text})


@router.post("/api/warmup")
async def warmup(
    request: WarmupRequest,
    raw_request: Request,
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    """Warm-up ramp toward an optional top-set target."""
    if not warmup_limiter.allow(client_key(raw_request)):
        return JSONResponse(SLOW_DOWN, status_code=429)

    units = normalize_units(request.units if isinstance(request.units, str) else None)
    system = LLMService.WARMUP_PROMPT.format(units=units)
    oracle = build_text_oracle(config, system, "warmup", temperature=0.3)
    text = await asyncio.to_thread(
        warmup_text, str(request.name or ""), units, to_number(request.target), oracle
    )
    return JSONResponse({"ok": True, "text": text})


@router.post("/api/describe")
async def describe(
    request: DescribeRequest,
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    """Short how-to text for an exercise. Requires the LLM."""
    oracle = build_text_oracle(config, LLMService.DESCRIBE_SYSTEM, "describe", temperature=0.4)
    if not oracle.available:
        return JSONResponse({"ok": False, "text": ""})

    prompt = LLMService.DESCRIBE_PROMPT.format(
        name=request.name or "", cat=request.cat or "iso_small", equip=request.equip or "machine"
    )
    try:
        text = await asyncio.to_thread(oracle.refine, prompt)
    except Exception as e:
        logger.warning(f"Describe failed: {e}")
        return JSONResponse({"ok": False, "text": ""})

    return JSONResponse({"ok": bool(text), "text": text or ""})


@router.post("/api/coach")
async def coach(
    request: CoachRequest,
    config: Settings = Depends(get_settings),
) -> JSONResponse:
    """Short coaching note about a logged session. Requires the LLM."""
    units = normalize_units(request.units if isinstance(request.units, str) else None)
    system = LLMService.COACH_PROMPT.format(day=request.day or "unknown", units=units)
    oracle = build_text_oracle(config, system, "coach", temperature=0.3)
    if not oracle.available:
        return JSONResponse({"ok": False, "advice": ""})

    payload = json.dumps({"session": request.session, "recent": request.recent}, default=str)
    try:
        advice = await asyncio.to_thread(oracle.refine, payload)
    except Exception as e:
        logger.warning(f"Coach note failed: {e}")
        return JSONResponse({"ok": False, "advice": ""})

    return JSONResponse({"ok": bool(advice), "advice": advice or ""})


@router.post("/api/plates")
async def plates(request: PlatesRequest) -> JSONResponse:
    """Per-side plate breakdown for a barbell load."""
    weight = to_number(request.weight)
    bar: Optional[float] = to_number(request.bar)
    if weight is None or weight < 0 or (request.bar is not None and bar is None):
        return JSONResponse(FAILURE_BODIES["/api/plates"])

    units = normalize_units(request.units if isinstance(request.units, str) else None)
    return JSONResponse({"ok": True, **compute_plates(weight, units, bar)})
