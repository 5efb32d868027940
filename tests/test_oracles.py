"""Unit tests for oracle construction and the LLM-backed oracles."""
import json
from unittest.mock import patch

import pytest

from conftest import make_settings
from liftlog_api.oracles import (
    NULL_ORACLE,
    LLMProgressionOracle,
    LLMSplitOracle,
    LLMTextOracle,
    OracleError,
    build_progression_oracle,
    build_split_oracle,
    build_text_oracle,
)
from liftlog_api.progression import ExerciseMeta, ProgressionContext
from liftlog_api.services.llm_service import LLMService, LLMServiceError


@pytest.fixture
def context():
    return ProgressionContext(
        ex_name="Squat",
        meta=ExerciseMeta(cat="lower_comp", equip="barbell", low=5, high=8),
        units="kg",
        history=[{"sets": [{"w": 100, "r": 8, "failed": False}]}],
        fallback=105.0,
    )


class TestBuilders:
    def test_null_without_credential(self):
        config = make_settings()
        assert build_progression_oracle(config) is NULL_ORACLE
        assert build_split_oracle(config) is NULL_ORACLE
        assert build_text_oracle(config, "system", "rest") is NULL_ORACLE
        assert NULL_ORACLE.available is False
        assert NULL_ORACLE.refine("anything") is None

    def test_llm_with_credential(self):
        config = make_settings(OPENAI_API_KEY="sk-test")
        assert isinstance(build_progression_oracle(config), LLMProgressionOracle)
        assert isinstance(build_split_oracle(config), LLMSplitOracle)
        text_oracle = build_text_oracle(config, "system", "rest")
        assert isinstance(text_oracle, LLMTextOracle)
        assert text_oracle.name == "llm_rest"
        assert text_oracle.available is True


class TestLLMProgressionOracle:
    def test_numeric_reply(self, context):
        oracle = LLMProgressionOracle(make_settings(OPENAI_API_KEY="sk-test"))
        with patch.object(LLMService, "complete_json", return_value={"next": 107.5, "rationale": "Add 2.5"}) as mock_llm:
            result = oracle.refine(context)

        assert result.next == 107.5
        assert result.note == "Add 2.5"
        sent = json.loads(mock_llm.call_args.args[1])
        assert sent["units"] == "kg"
        assert sent["fallback"] == 105.0
        assert sent["meta"]["cat"] == "lower_comp"

    @pytest.mark.parametrize("reply", [{"next": "107.5"}, {"next": None}, {}])
    def test_non_numeric_reply(self, reply, context):
        oracle = LLMProgressionOracle(make_settings(OPENAI_API_KEY="sk-test"))
        with patch.object(LLMService, "complete_json", return_value=reply):
            assert oracle.refine(context) is None

    def test_failure_raises_oracle_error(self, context):
        oracle = LLMProgressionOracle(make_settings(OPENAI_API_KEY="sk-test"))
        with patch.object(LLMService, "complete_json", side_effect=LLMServiceError("429")):
            with pytest.raises(OracleError):
                oracle.refine(context)


class TestLLMSplitOracle:
    def test_passes_raw_text(self):
        oracle = LLMSplitOracle(make_settings(OPENAI_API_KEY="sk-test"))
        with patch.object(LLMService, "complete_json", return_value={"days": []}) as mock_llm:
            assert oracle.refine("my split") == {"days": []}

        assert mock_llm.call_args.args == (LLMService.SPLIT_PROMPT, "my split")
        assert mock_llm.call_args.kwargs["feature"] == "split_parse"


class TestLLMTextOracle:
    def test_blank_reply_is_none(self):
        oracle = LLMTextOracle(make_settings(OPENAI_API_KEY="sk-test"), "system", "rest")
        with patch.object(LLMService, "complete_text", return_value=""):
            assert oracle.refine("Exercise: Row") is None

    def test_dict_context_sent_as_json(self):
        oracle = LLMTextOracle(make_settings(OPENAI_API_KEY="sk-test"), "system", "coach")
        with patch.object(LLMService, "complete_text", return_value="Nice") as mock_llm:
            assert oracle.refine({"session": None}) == "Nice"

        assert mock_llm.call_args.args[1] == '{"session": null}'
