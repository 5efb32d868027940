"""LLM-backed oracles. Each makes exactly one provider call per refine()."""
import json
import logging
from typing import Any, Dict, Optional

from liftlog_api.config import Settings
from liftlog_api.progression.models import OracleRefinement, ProgressionContext
from liftlog_api.services.llm_service import LLMService, LLMServiceError
from liftlog_api.utils import to_number
from .base import OracleError, RefinementOracle

logger = logging.getLogger(__name__)


class LLMProgressionOracle(RefinementOracle):
    """Asks the LLM for a next working weight."""

    name = "llm_progression"

    def __init__(self, config: Settings):
        self.config = config

    def refine(self, context: ProgressionContext) -> Optional[OracleRefinement]:
        try:
            data = LLMService.complete_json(
                LLMService.PROGRESSION_PROMPT,
                json.dumps(context.to_payload()),
                feature="progression_refine",
                config=self.config,
                temperature=0.2,
            )
        except LLMServiceError as e:
            raise OracleError(str(e)) from e

        value = to_number(data.get("next"))
        if value is None:
            logger.warning(f"LLM progression reply had no numeric 'next': {data.get('next')!r}")
            return None

        note = data.get("rationale")
        return OracleRefinement(next=value, note=note if isinstance(note, str) else None)


class LLMSplitOracle(RefinementOracle):
    """Asks the LLM to structure pasted split text into days."""

    name = "llm_split"

    def __init__(self, config: Settings):
        self.config = config

    def refine(self, context: str) -> Optional[Dict]:
        try:
            return LLMService.complete_json(
                LLMService.SPLIT_PROMPT,
                context,
                feature="split_parse",
                config=self.config,
                temperature=0.2,
            )
        except LLMServiceError as e:
            raise OracleError(str(e)) from e


class LLMTextOracle(RefinementOracle):
    """Free-text answer for a fixed system prompt (rest, warm-up, how-to, coaching)."""

    def __init__(self, config: Settings, system_prompt: str, feature: str, temperature: float = 0.3):
        self.config = config
        self.system_prompt = system_prompt
        self.feature = feature
        self.temperature = temperature
        self.name = f"llm_{feature}"

    def refine(self, context: Any) -> Optional[str]:
        message = context if isinstance(context, str) else json.dumps(context)
        try:
            text = LLMService.complete_text(
                self.system_prompt,
                message,
                feature=self.feature,
                config=self.config,
                temperature=self.temperature,
            )
        except LLMServiceError as e:
            raise OracleError(str(e)) from e
        return text or None
