"""Shared fixtures for the Bot Budowniczy test suite.

Every test runs with remote generation and LLM keys removed from the
environment, so nothing reaches the network unless a test wires in an
httpx.MockTransport explicitly.
"""

import sys
from pathlib import Path

import httpx
import pytest

# Ensure the package is importable without an install
PACKAGE_DIR = Path(__file__).resolve().parent.parent
PROJECT_ROOT = PACKAGE_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budowniczy.api_keys import GenerationSettings
from budowniczy.logic.catalog import reset_catalog
from budowniczy.logic.gateway import GenerationGateway
from budowniczy.logic.store import SurveyStore
from budowniczy.logic.survey import SurveyAnswers

ENV_VARS = (
    "BUDOWNICZY_GENERATION_URL",
    "BUDOWNICZY_GENERATION_KEY",
    "BUDOWNICZY_GENERATION_TIMEOUT",
    "BUDOWNICZY_CATALOG_PATH",
    "BUDOWNICZY_STORE_PATH",
    "BUDOWNICZY_LLM_MODEL",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
)


# =============================================================================
# ENVIRONMENT
# =============================================================================

@pytest.fixture(autouse=True)
def offline_env(monkeypatch):
    """No remote configuration and a freshly loaded built-in catalog."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_catalog()
    yield
    reset_catalog()


@pytest.fixture
def settings():
    """Remote endpoint settings pointing at a host that only MockTransport answers."""
    return GenerationSettings(base_url="https://gen.example.test/", api_key="test-key", timeout_s=5.0)


@pytest.fixture
def mock_gateway(settings):
    """Factory: gateway whose HTTP traffic is served by the given handler."""
    def _build(handler):
        return GenerationGateway(settings=settings, transport=httpx.MockTransport(handler))
    return _build


# =============================================================================
# SURVEY FIXTURES
# =============================================================================

@pytest.fixture
def valid_form():
    """Bathroom tiles, mid budget, good quality."""
    return {
        "what_looking_for": "płytki łazienkowe",
        "room_type": "Łazienka",
        "budget_range": "1000-5000zł",
        "quality_level": "Dobra",
        "additional_info": "",
    }


@pytest.fixture
def answers(valid_form):
    return SurveyAnswers.from_dict(valid_form)


@pytest.fixture
def store():
    """In-memory store."""
    return SurveyStore()
