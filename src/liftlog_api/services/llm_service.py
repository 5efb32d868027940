"""LLM service: prompts plus single-shot JSON and text completions."""
import json
import logging
import re
from typing import Any, Dict, Optional

from liftlog_api.ai import AIClientFactory, AIRequestContext
from liftlog_api.config import Settings, settings


logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r'\{.*\}', re.DOTALL)
_CODE_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$', re.IGNORECASE)


class LLMServiceError(Exception):
    """Raised when the LLM call fails or returns unusable content."""


class LLMService:
    """Service for asking an LLM to refine or explain training data."""

    PROGRESSION_PROMPT = """You are an evidence-based hypertrophy coach choosing the next working weight.

You receive JSON with:
- exName: exercise name
- meta: {cat, equip, low, high} where low/high is the target rep range
- units: "lb" or "kg"
- history: past sessions for this exercise, most recent first; each has sets [{w, r, failed}]
- fallback: the weight a simple percentage heuristic suggests (may be null)

Rules:
- If the top set reached the top of the rep range, progress the load.
- If it fell below the bottom of the range, reduce the load.
- Otherwise hold the load.
- Sets taken to failure mean there were no reps in reserve.
- Use weights loadable with the stated equipment and units.
- You may reuse the fallback if it is sensible.

Return ONLY JSON: {"next": number, "rationale": "one short sentence"}"""

    SPLIT_PROMPT = """Parse a pasted lifting split into JSON:

{
  "days": [
    {"name": "PUSH A", "exercises": [
      {"name": "Incline Barbell Press", "sets": 3, "low": 6, "high": 10}
    ]}
  ]
}

Rules:
- Detect day headings vs exercises. Day names are upper case.
- For exercises, parse "3x8-12", "3 x 8-12" or "3 × 8 to 12" into sets/low/high.
- If only one rep number is given, set high equal to low.
- If there are exercises but no heading, use a single day named "DAY 1".
- Return ONLY JSON."""

    WARMUP_PROMPT = """You output a brief warm-up ramp for hypertrophy in {units}.
If a top set target is provided, taper to that over 3-5 mini-sets.
A suggested ramp may be provided; improve it only if needed.
Be concise, 3-5 lines max."""

    REST_PROMPT = """Return ONE short line with a rest guideline for hypertrophy based on exercise name:
- Big compounds: 2-3 min
- Moderate: 90-120s
- Isolation: 45-75s
Infer by common terms: (squat, deadlift, press, row)=compound; (raise, curl, extension, fly)=isolation."""

    DESCRIBE_SYSTEM = "You explain exercises clearly and briefly."

    DESCRIBE_PROMPT = """Write a concise how-to for: "{name}".
Category: {cat}. Equipment: {equip}.
Goal: hypertrophy. Max 90 words. Include 3 short bullet cues and 1 common mistake. No emojis."""

    COACH_PROMPT = """You are an evidence-based hypertrophy coach.
Give an <=80 word note about today's {day} session. Be supportive, note trends, and give 1 concrete next-step cue. Units are {units}."""

    @staticmethod
    def _call_openai(
        system: str,
        user: str,
        config: Settings,
        context: AIRequestContext,
        temperature: float,
        json_mode: bool,
    ) -> str:
        client = AIClientFactory.create_openai_client(
            context=context, timeout=config.LLM_TIMEOUT_SECONDS, config=config
        )
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = client.chat.completions.create(
            model=config.OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            **kwargs,
        )
        return response.choices[0].message.content or ""

    @staticmethod
    def _call_anthropic(
        system: str,
        user: str,
        config: Settings,
        context: AIRequestContext,
        temperature: float,
    ) -> str:
        client = AIClientFactory.create_anthropic_client(
            context=context, timeout=config.LLM_TIMEOUT_SECONDS, config=config
        )
        message = client.messages.create(
            model=config.ANTHROPIC_MODEL,
            max_tokens=1024,
            system=system,
            messages=[{"role": "user", "content": user}],
            temperature=temperature,
        )
        return message.content[0].text if message.content else ""

    @staticmethod
    def _complete(
        system: str,
        user: str,
        feature: str,
        config: Optional[Settings],
        temperature: float,
        json_mode: bool,
    ) -> str:
        config = config or settings
        context = AIRequestContext(
            feature_name=feature,
            custom_properties={"model": config.llm_model},
        )

        try:
            if config.LLM_PROVIDER == "anthropic":
                return LLMService._call_anthropic(system, user, config, context, temperature)
            return LLMService._call_openai(system, user, config, context, temperature, json_mode)
        except Exception as e:
            logger.warning(f"{config.LLM_PROVIDER} call for {feature} failed: {e}")
            raise LLMServiceError(f"{config.LLM_PROVIDER} call failed: {e}") from e

    @staticmethod
    def parse_json_reply(text: str) -> Dict:
        """
        Decode a model reply into a JSON object.

        Tolerates markdown code fences and leading/trailing commentary.

        Raises:
            LLMServiceError: If no JSON object can be decoded
        """
        cleaned = _CODE_FENCE.sub("", str(text).strip())
        try:
            data = json.loads(cleaned)
        except (TypeError, ValueError):
            match = _JSON_BLOCK.search(cleaned)
            if not match:
                raise LLMServiceError("LLM reply contained no JSON object")
            try:
                data = json.loads(match.group(0))
            except ValueError as e:
                raise LLMServiceError(f"LLM reply was not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise LLMServiceError("LLM reply was not a JSON object")
        return data

    @staticmethod
    def complete_json(
        system: str,
        user: str,
        feature: str,
        config: Optional[Settings] = None,
        temperature: float = 0.2,
    ) -> Dict:
        """
        Ask the configured provider for a JSON object.

        Args:
            system: System prompt
            user: User message
            feature: Feature name used for request tracking
            config: Settings to use (defaults to the process settings)
            temperature: Sampling temperature

        Returns:
            Decoded JSON object

        Raises:
            LLMServiceError: If the call fails or the reply is not a JSON object
        """
        text = LLMService._complete(system, user, feature, config, temperature, json_mode=True)
        return LLMService.parse_json_reply(text)

    @staticmethod
    def complete_text(
        system: str,
        user: str,
        feature: str,
        config: Optional[Settings] = None,
        temperature: float = 0.3,
    ) -> str:
        """Ask the configured provider for plain text. Returns stripped text."""
        return LLMService._complete(system, user, feature, config, temperature, json_mode=False).strip()
