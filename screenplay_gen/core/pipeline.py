import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from screenplay_gen.config import Config
from screenplay_gen.core.ai_client import GenAIClient
from screenplay_gen.core.image_stage import ImageStage
from screenplay_gen.core.models import CharacterImage, GeneratedAudio, GeneratedImage, Script, StoryElements
from screenplay_gen.core.speech_stage import SpeechStage
from screenplay_gen.core.stage_queue import StageQueue
from screenplay_gen.core.voices import VoiceAssigner
from screenplay_gen.core.writer import ScriptWriter

logger = logging.getLogger(__name__)

_PROGRESS_LABELS = {"image": "Generating image", "speech": "Generating audio"}


@dataclass
class RunState:
    """Everything one generation run has produced so far."""
    status: str = ""
    error: Optional[str] = None
    script: Optional[Script] = None
    images: List[GeneratedImage] = field(default_factory=list)
    audio: List[GeneratedAudio] = field(default_factory=list)
    voices: Dict[str, str] = field(default_factory=dict)

    @property
    def is_running(self) -> bool:
        return bool(self.status)


class GenerationPipeline:
    """
    Script -> images -> voices -> audio, each stage finishing before the next starts.

    A fatal error stops the run, clears the status and is re-raised; whatever
    was already produced stays on `state` for inspection.
    """

    def __init__(self, ai_client: GenAIClient, character_images: Optional[Dict[str, CharacterImage]] = None,
                 male_voices: Optional[List[str]] = None, female_voices: Optional[List[str]] = None,
                 sample_rate: Optional[int] = None):
        self.ai_client = ai_client
        self.writer = ScriptWriter(ai_client)
        self.character_images = character_images or {}
        self.male_voices = male_voices if male_voices is not None else Config.MALE_VOICES
        self.female_voices = female_voices if female_voices is not None else Config.FEMALE_VOICES
        if not self.male_voices:
            raise ValueError("MALE_VOICES must name at least one voice.")
        self.sample_rate = sample_rate or Config.SAMPLE_RATE
        self.image_queue = StageQueue("image")
        self.speech_queue = StageQueue("speech")
        self.state = RunState()

    def _set_status(self, message: str):
        self.state.status = message
        logger.info(message)

    def _progress(self, number: int, total: int, stage: str):
        self._set_status(f"{_PROGRESS_LABELS.get(stage, stage)} {number} of {total}...")

    async def run(self, story_elements: StoryElements, user_input: str) -> RunState:
        if not user_input or not user_input.strip():
            raise ValueError("Please provide a story idea to get started.")

        # Fresh state and queues per run; voice assignments are never carried over.
        self.state = RunState()
        self.image_queue = StageQueue("image")
        self.speech_queue = StageQueue("speech")
        try:
            self._set_status("Constructing story prompt...")
            prompt = self.writer.build_prompt(story_elements, user_input)

            self._set_status("Generating movie script...")
            script = await self.writer.generate(prompt)
            self.state.script = script

            image_stage = ImageStage(self.ai_client, self.character_images, self.image_queue)
            await image_stage.run(script, self.state.images, self._progress)

            self._set_status("Assigning voices to characters...")
            voices = VoiceAssigner(self.male_voices, self.female_voices)
            self.state.voices = voices.assign((block for _, block in script.dialogue_blocks()),
                                              story_elements.characters)

            speech_stage = SpeechStage(self.ai_client, self.speech_queue, self.sample_rate)
            await speech_stage.run(script, voices, self.state.audio, self._progress)
        except Exception as e:
            self.state.error = str(e) or type(e).__name__
            logger.error(f"Asset generation failed: {e}")
            raise
        finally:
            self.state.status = ""

        logger.info(f"Run complete: {len(self.state.images)} image(s), {len(self.state.audio)} audio clip(s).")
        return self.state
