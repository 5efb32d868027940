"""Optional external collaborators that may refine deterministic results."""
from liftlog_api.config import Settings
from .base import NULL_ORACLE, NullOracle, OracleError, RefinementOracle
from .llm import LLMProgressionOracle, LLMSplitOracle, LLMTextOracle


def build_progression_oracle(config: Settings) -> RefinementOracle:
    if not config.llm_configured:
        return NULL_ORACLE
    return LLMProgressionOracle(config)


def build_split_oracle(config: Settings) -> RefinementOracle:
    if not config.llm_configured:
        return NULL_ORACLE
    return LLMSplitOracle(config)


def build_text_oracle(
    config: Settings,
    system_prompt: str,
    feature: str,
    temperature: float = 0.3,
) -> RefinementOracle:
    if not config.llm_configured:
        return NULL_ORACLE
    return LLMTextOracle(config, system_prompt, feature, temperature)


__all__ = [
    "LLMProgressionOracle",
    "LLMSplitOracle",
    "LLMTextOracle",
    "NULL_ORACLE",
    "NullOracle",
    "OracleError",
    "RefinementOracle",
    "build_progression_oracle",
    "build_split_oracle",
    "build_text_oracle",
]
