import pytest
from unittest.mock import AsyncMock
import sys
import os

# Add project root to sys.path so we can import screenplay_gen
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from screenplay_gen.core.models import Script


@pytest.fixture
def mock_genai_client(mocker):
    """Fixture to mock the Google GenAI Client."""
    mock_client = mocker.patch('google.genai.Client')
    mock_client.return_value.aio.models.generate_content = AsyncMock()
    return mock_client


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables."""
    monkeypatch.setenv("GEMINI_API_KEY", "fake_key")


@pytest.fixture
def make_script():
    def _make(*elements, title="Test Episode"):
        return Script.model_validate({
            "source_file": "episode.fountain",
            "title": title,
            "scene_elements": list(elements),
        })
    return _make

