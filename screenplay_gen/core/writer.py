import json
import logging

from pydantic import ValidationError

from screenplay_gen.core.ai_client import GenAIClient
from screenplay_gen.core.errors import ScriptGenerationError
from screenplay_gen.core.models import Script, StoryElements

logger = logging.getLogger(__name__)

# Flat schema for the model; Script validates the discriminated union afterwards.
SCRIPT_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "source_file": {"type": "STRING"},
        "title": {"type": "STRING"},
        "scene_elements": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "type": {"type": "STRING", "enum": ["scene_heading", "action", "dialogue_block", "transition"]},
                    "content": {"type": "STRING", "nullable": True},
                    "character": {"type": "STRING", "nullable": True},
                    "elements": {
                        "type": "ARRAY",
                        "nullable": True,
                        "items": {
                            "type": "OBJECT",
                            "properties": {
                                "type": {"type": "STRING", "enum": ["parenthetical", "dialogue"]},
                                "content": {"type": "STRING"},
                            },
                            "required": ["type", "content"],
                        },
                    },
                },
                "required": ["type"],
            },
        },
    },
    "required": ["source_file", "title", "scene_elements"],
}


class ScriptWriter:
    def __init__(self, ai_client: GenAIClient):
        self.ai_client = ai_client

    def build_prompt(self, story_elements: StoryElements, inspirational_event: str) -> str:
        """Combines the series premise with the user's idea."""
        return f"""You are a creative writer for a sci-fi comedy series. Your task is to write a new short movie script based on a series premise and a user-provided event.

**Series Premise:**
---
**Characters:**
{story_elements.characters}

**Core Story:**
{story_elements.story}

**Daily Theme:**
{story_elements.today}
---

**Inspirational Event (Provided by User):**
---
{inspirational_event}
---

Weave the essence of this user-provided event into your story. It should serve as the central conflict or comedic situation for the episode. How would the characters from your Series Premise react to or cause a situation like this?

The final output must be a creative and engaging movie script. Return ONLY the JSON object conforming to the provided schema. Do not include any markdown formatting or any other text outside the JSON structure.
"""

    def parse_script(self, response_text: str) -> Script:
        if not response_text or not response_text.strip():
            raise ScriptGenerationError("The model did not return a script.")
        try:
            return Script.model_validate(json.loads(response_text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to parse script response: {response_text[:100]}... ({e})")
            raise ScriptGenerationError(
                "Could not generate a story. The model returned an invalid response or malformed JSON."
            ) from e

    async def generate(self, prompt: str) -> Script:
        try:
            response_text = await self.ai_client.generate_text(prompt, schema=SCRIPT_RESPONSE_SCHEMA)
        except Exception as e:
            raise ScriptGenerationError(f"Could not generate a story: {e}") from e
        script = self.parse_script(response_text)
        logger.info(f"Generated script '{script.title}' with {len(script.scene_elements)} elements.")
        return script
