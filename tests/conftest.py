"""
Test fixtures for liftlog-api.

Provides settings overrides and a TestClient so the LLM path can be switched
on and off without environment variables or network access.
"""

import pytest
from fastapi.testclient import TestClient

from liftlog_api.api.routes import get_settings, rest_limiter, warmup_limiter
from liftlog_api.config import Settings
from liftlog_api.main import app


def make_settings(**overrides) -> Settings:
    """Settings with no credentials, then the given attribute overrides."""
    config = Settings()
    config.LLM_PROVIDER = "openai"
    config.OPENAI_API_KEY = None
    config.ANTHROPIC_API_KEY = None
    config.HELICONE_ENABLED = False
    config.HELICONE_API_KEY = None
    config.ENVIRONMENT = "development"
    for key, value in overrides.items():
        setattr(config, key, value)
    return config


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture
def offline_settings() -> Settings:
    """No LLM credential: every oracle is the null oracle."""
    return make_settings()


@pytest.fixture
def online_settings() -> Settings:
    """OpenAI credential present: oracles call LLMService."""
    return make_settings(OPENAI_API_KEY="sk-test-openai")


# ---------------------------------------------------------------------------
# Test Clients
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_rate_limits():
    rest_limiter.reset()
    warmup_limiter.reset()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(offline_settings) -> TestClient:
    """TestClient with the LLM disabled."""
    app.dependency_overrides[get_settings] = lambda: offline_settings
    return TestClient(app)


@pytest.fixture
def llm_client(online_settings) -> TestClient:
    """TestClient with an LLM credential configured (calls must be mocked)."""
    app.dependency_overrides[get_settings] = lambda: online_settings
    return TestClient(app)


# ---------------------------------------------------------------------------
# Sample Data Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def bench_meta() -> dict:
    return {"name": "Bench Press", "cat": "upper_comp", "equip": "barbell", "low": 8, "high": 10}


@pytest.fixture
def bench_history() -> list:
    """Most recent session first; top set 200x10, nothing to failure."""
    return [
        {"sets": [
            {"w": 200, "r": 10, "failed": False},
            {"w": 200, "r": 9, "failed": False},
            {"w": 190, "r": 10, "failed": False},
        ]},
        {"sets": [
            {"w": 195, "r": 8, "failed": True},
        ]},
    ]


@pytest.fixture
def push_split_text() -> str:
    return "PUSH A\nBench Press — 3x8-10\nIncline DB Press - 3x10\n"
