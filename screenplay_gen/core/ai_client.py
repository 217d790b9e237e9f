from google import genai
from google.genai import types
import logging
from typing import Any, Optional

from screenplay_gen.config import Config
from screenplay_gen.core.errors import ImagePromptError
from screenplay_gen.core.models import CharacterImage

logger = logging.getLogger(__name__)


def _first_inline_data(response) -> Optional[bytes]:
    """Returns the first inline binary payload of a multimodal response, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates or not candidates[0].content:
        return None
    for part in candidates[0].content.parts or []:
        inline = getattr(part, "inline_data", None)
        if inline and inline.data:
            return inline.data
    return None


class GenAIClient:
    def __init__(self):
        self.client = genai.Client(api_key=Config.GEMINI_API_KEY)
        self.script_model_name = Config.SCRIPT_MODEL_NAME
        self.prompt_model_name = Config.PROMPT_MODEL_NAME
        self.image_model_name = Config.IMAGE_MODEL_NAME
        self.tts_model_name = Config.TTS_MODEL_NAME

    async def generate_text(self, prompt: str, schema: Optional[Any] = None, model: Optional[str] = None) -> str:
        try:
            config_args = {}
            if schema:
                config_args['response_mime_type'] = 'application/json'
                config_args['response_schema'] = schema

            response = await self.client.aio.models.generate_content(
                model=model or self.script_model_name,
                contents=prompt,
                config=config_args
            )
            return response.text
        except Exception as e:
            logger.error(f"Error generating text: {e}")
            raise

    async def create_image_prompt(self, character: str, action: str) -> str:
        """
        Condenses a script action into a one-sentence image prompt.
        Falls back to "<character> <action>" if the model call fails.
        """
        prompt = (
            "Based on the following movie script action, create a short, visually descriptive prompt "
            "for an AI image generator. The prompt should be a single sentence. Focus on the character, "
            "the setting, and the key action. Do not include the character's name directly, instead use "
            "descriptive terms. Do not include dialogue cues or parentheticals.\n\n"
            f"**Character:** {character}\n"
            f"**Action:** \"{action}\"\n\n"
            "**Example Input:**\n"
            "Character: URSULA\n"
            "Action: \"URSULA (60s, grandmotherly but with a manic glint in her eye) pilots a UFO over "
            "Hollywood, spraying a mysterious gas from a large nozzle.\"\n"
            "**Example Output:**\n"
            "\"An elderly woman with a wild look in her eyes pilots a flying saucer over the Hollywood sign, "
            "a thick green gas spraying from a nozzle onto the city below.\""
        )
        try:
            text = await self.generate_text(prompt, model=self.prompt_model_name)
            if not text or not text.strip():
                raise ImagePromptError("The model returned an empty image prompt.")
            return text.strip()
        except Exception as e:
            logger.warning(f"Image prompt creation failed: {e}. Using fallback prompt.")
            return f"{character} {action}"

    async def generate_image(self, prompt: str, reference: Optional[CharacterImage] = None) -> bytes:
        """
        Renders one cinematic frame. The reference image, if given, is sent
        ahead of the prompt so the model can keep the character consistent.
        """
        try:
            logger.info(f"Generating image with model {self.image_model_name}. Reference: {bool(reference)}")
            parts = []
            if reference:
                parts.append(types.Part.from_bytes(data=reference.raw_bytes, mime_type=reference.mime_type))
            parts.append(types.Part.from_text(text=f"{prompt}. Cinematic, 16:9 aspect ratio."))

            response = await self.client.aio.models.generate_content(
                model=self.image_model_name,
                contents=types.Content(role="user", parts=parts),
                config=types.GenerateContentConfig(
                    response_modalities=['IMAGE'],
                )
            )
            data = _first_inline_data(response)
            if not data:
                raise RuntimeError("No image data found in the response.")
            return data
        except Exception as e:
            logger.error(f"Error generating image: {e}")
            raise

    async def generate_speech(self, text: str, voice_name: str) -> bytes:
        """Returns raw 16-bit mono PCM for `text` spoken by the prebuilt voice."""
        try:
            response = await self.client.aio.models.generate_content(
                model=self.tts_model_name,
                contents=text,
                config=types.GenerateContentConfig(
                    response_modalities=['AUDIO'],
                    speech_config=types.SpeechConfig(
                        voice_config=types.VoiceConfig(
                            prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice_name),
                        )
                    ),
                )
            )
            data = _first_inline_data(response)
            if not data:
                raise RuntimeError("No audio data returned from TTS API.")
            return data
        except Exception as e:
            logger.error(f"Error generating speech with voice {voice_name}: {e}")
            raise
