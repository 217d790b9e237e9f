import logging
from typing import List, Optional, Tuple

from screenplay_gen.config import Config
from screenplay_gen.core.ai_client import GenAIClient
from screenplay_gen.core.errors import SpeechGenerationError
from screenplay_gen.core.models import DialogueBlock, GeneratedAudio, Script
from screenplay_gen.core.stage_queue import ProgressCallback, StageQueue
from screenplay_gen.core.voices import VoiceAssigner
from screenplay_gen.core.wav import pcm_duration, pcm_to_wav

logger = logging.getLogger(__name__)


def speech_text(block: DialogueBlock) -> str:
    dialogue = block.dialogue_text
    if block.parenthetical:
        return f"(speaking in a {block.parenthetical} tone) {dialogue}"
    return dialogue


class SpeechStage:
    def __init__(self, ai_client: GenAIClient, queue: Optional[StageQueue] = None, sample_rate: int = None):
        self.ai_client = ai_client
        self.queue = queue or StageQueue("speech")
        self.sample_rate = sample_rate or Config.SAMPLE_RATE

    async def synthesize(self, scene_index: int, block: DialogueBlock, voice: str) -> GeneratedAudio:
        try:
            pcm = await self.ai_client.generate_speech(speech_text(block), voice)
            if not pcm:
                raise RuntimeError("No audio data returned from TTS API.")
            wav = pcm_to_wav(pcm, self.sample_rate)
        except Exception as e:
            raise SpeechGenerationError(
                f"Failed to generate speech for {block.character}: \"{block.dialogue_text}\". Reason: {e}",
                scene_index=scene_index,
            ) from e
        return GeneratedAudio(
            scene_index=scene_index,
            audio_bytes=wav,
            duration_seconds=pcm_duration(len(pcm), self.sample_rate),
            character=block.character,
            dialogue=block.dialogue_text,
        )

    async def run(self, script: Script, voices: VoiceAssigner, clips: Optional[List[GeneratedAudio]] = None,
                  progress: Optional[ProgressCallback] = None) -> List[GeneratedAudio]:
        """Synthesizes one clip per dialogue block with spoken text, in script order."""
        clips = clips if clips is not None else []
        # Blocks without dialogue produce nothing.
        jobs: List[Tuple[int, DialogueBlock]] = [
            (index, block) for index, block in script.dialogue_blocks() if block.dialogue_text
        ]
        logger.info(f"Synthesizing {len(jobs)} dialogue clip(s).")

        async def worker(job: Tuple[int, DialogueBlock]) -> GeneratedAudio:
            index, block = job
            clip = await self.synthesize(index, block, voices.voice_for(block.character))
            clips.append(clip)
            return clip

        await self.queue.run(jobs, worker, progress)
        return clips
