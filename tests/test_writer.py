import asyncio
import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from screenplay_gen.core.errors import ScriptGenerationError
from screenplay_gen.core.models import DialogueBlock, StoryElements
from screenplay_gen.core.writer import SCRIPT_RESPONSE_SCHEMA, ScriptWriter

SCRIPT_JSON = json.dumps({
    "source_file": "ep1.fountain",
    "title": "Gas Over Hollywood",
    "scene_elements": [
        {"type": "scene_heading", "content": "EXT. HOLLYWOOD - NIGHT"},
        {"type": "action", "content": "A saucer hovers."},
        {"type": "dialogue_block", "character": "URSULA",
         "elements": [{"type": "parenthetical", "content": "cackling"}, {"type": "dialogue", "content": "Breathe deep!"}]},
    ],
})


@pytest.fixture
def writer():
    client = MagicMock()
    client.generate_text = AsyncMock()
    return ScriptWriter(client)


class TestScriptWriter:
    def test_build_prompt(self, writer):
        elements = StoryElements(characters="Ursula (f)", story="Aliens run a diner.", today="Tacos")
        prompt = writer.build_prompt(elements, "A celebrity launches a car into orbit.")
        assert "Ursula (f)" in prompt
        assert "Aliens run a diner." in prompt
        assert "Tacos" in prompt
        assert "A celebrity launches a car into orbit." in prompt
        assert "Return ONLY the JSON object" in prompt

    def test_generate(self, writer):
        writer.ai_client.generate_text.return_value = SCRIPT_JSON
        script = asyncio.run(writer.generate("prompt"))
        assert script.title == "Gas Over Hollywood"
        assert isinstance(script.scene_elements[2], DialogueBlock)
        args, kwargs = writer.ai_client.generate_text.call_args
        assert kwargs['schema'] is SCRIPT_RESPONSE_SCHEMA

    @pytest.mark.parametrize("response", ["", "   ", None])
    def test_empty_response(self, writer, response):
        writer.ai_client.generate_text.return_value = response
        with pytest.raises(ScriptGenerationError, match="did not return a script"):
            asyncio.run(writer.generate("prompt"))

    def test_malformed_json(self, writer):
        writer.ai_client.generate_text.return_value = "Here is your script: {"
        with pytest.raises(ScriptGenerationError, match="malformed JSON"):
            asyncio.run(writer.generate("prompt"))

    def test_schema_violation(self, writer):
        writer.ai_client.generate_text.return_value = json.dumps({"title": "No elements"})
        with pytest.raises(ScriptGenerationError):
            asyncio.run(writer.generate("prompt"))

    def test_unknown_element_kind(self, writer):
        bad = json.loads(SCRIPT_JSON)
        bad["scene_elements"].append({"type": "song", "content": "La la"})
        writer.ai_client.generate_text.return_value = json.dumps(bad)
        with pytest.raises(ScriptGenerationError):
            asyncio.run(writer.generate("prompt"))

    def test_service_failure(self, writer):
        writer.ai_client.generate_text.side_effect = Exception("quota")
        with pytest.raises(ScriptGenerationError, match="quota"):
            asyncio.run(writer.generate("prompt"))
