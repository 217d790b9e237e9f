import asyncio
import io
import logging
from typing import Dict, List, Optional

from PIL import Image

from screenplay_gen.core.ai_client import GenAIClient
from screenplay_gen.core.attribution import ActionBeat, attribute_speakers
from screenplay_gen.core.errors import ImageGenerationError
from screenplay_gen.core.models import CharacterImage, GeneratedImage, Script
from screenplay_gen.core.stage_queue import ProgressCallback, StageQueue

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
REFERENCE_PREFIX = (
    "Use the character from the input image. Place them in this scene, "
    "matching the existing art style: "
)


def ensure_png(data: bytes) -> bytes:
    """Re-encodes non-PNG image bytes as PNG so bundled files match their extension."""
    if data.startswith(PNG_SIGNATURE):
        return data
    with Image.open(io.BytesIO(data)) as img:
        if img.mode not in ("RGB", "RGBA", "L", "LA", "P"):
            img = img.convert("RGBA")
        out = io.BytesIO()
        img.save(out, format="PNG")
        return out.getvalue()


class ImageStage:
    def __init__(self, ai_client: GenAIClient, character_images: Optional[Dict[str, CharacterImage]] = None,
                 queue: Optional[StageQueue] = None):
        self.ai_client = ai_client
        self.character_images = character_images or {}
        self.queue = queue or StageQueue("image")

    def reference_for(self, speaker: str) -> Optional[CharacterImage]:
        return self.character_images.get(speaker.strip().lower())

    async def build_prompt(self, beat: ActionBeat) -> str:
        prompt = await self.ai_client.create_image_prompt(beat.speaker, beat.content)
        if self.reference_for(beat.speaker):
            return REFERENCE_PREFIX + prompt
        return prompt

    async def render(self, beat: ActionBeat) -> GeneratedImage:
        prompt = await self.build_prompt(beat)
        reference = self.reference_for(beat.speaker)
        try:
            data = await self.ai_client.generate_image(prompt, reference)
            png = await asyncio.to_thread(ensure_png, data)
        except Exception as e:
            raise ImageGenerationError(
                f"Failed to generate image for prompt: \"{prompt}\". Reason: {e}", scene_index=beat.scene_index
            ) from e
        return GeneratedImage.from_png(beat.scene_index, png)

    async def run(self, script: Script, images: Optional[List[GeneratedImage]] = None,
                  progress: Optional[ProgressCallback] = None) -> List[GeneratedImage]:
        """
        Renders one image per non-empty action, strictly one at a time.

        Each finished image is appended to `images` as soon as it exists, so a
        caller holding that list keeps the completed images if a later one fails.
        """
        images = images if images is not None else []
        beats = attribute_speakers(script)
        logger.info(f"Rendering {len(beats)} action beat(s).")

        async def worker(beat: ActionBeat) -> GeneratedImage:
            image = await self.render(beat)
            images.append(image)
            return image

        await self.queue.run(beats, worker, progress)
        return images
