import logging
import re
from typing import Dict, Iterable, List, Optional

from screenplay_gen.core.models import DialogueBlock

logger = logging.getLogger(__name__)

MALE = "male"
FEMALE = "female"


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def infer_gender(name: str, characters_text: str) -> Optional[str]:
    """
    Looks for "<name> (m)" or "<name> (f)" in the premise cast list.

    The match is case-insensitive and the name must stand as a whole word.
    Returns None when no marker is found, which callers treat as male.
    """
    name = name.strip()
    if not name or not characters_text:
        return None
    pattern = re.compile(rf"\b{re.escape(name)}\b\s*\((m|f)\)", re.IGNORECASE)
    match = pattern.search(characters_text)
    if not match:
        return None
    return MALE if match.group(1).lower() == "m" else FEMALE


class VoiceAssigner:
    """Round-robin voice pools for one generation run."""

    def __init__(self, male_voices: List[str], female_voices: List[str]):
        if not male_voices:
            raise ValueError("At least one male voice is required.")
        self.male_voices = list(male_voices)
        self.female_voices = list(female_voices)
        self.male_cursor = 0
        self.female_cursor = 0
        self.genders: Dict[str, Optional[str]] = {}
        self.assignments: Dict[str, str] = {}

    def _next_voice(self, gender: Optional[str]) -> str:
        if gender == FEMALE and self.female_voices:
            voice = self.female_voices[self.female_cursor % len(self.female_voices)]
            self.female_cursor += 1
        else:
            voice = self.male_voices[self.male_cursor % len(self.male_voices)]
            self.male_cursor += 1
        return voice

    def assign(self, blocks: Iterable[DialogueBlock], characters_text: str) -> Dict[str, str]:
        for block in blocks:
            key = normalize_name(block.character)
            if key in self.assignments:
                continue
            if key not in self.genders:
                self.genders[key] = infer_gender(block.character, characters_text)
            self.assignments[key] = self._next_voice(self.genders[key])
            logger.info(f"Assigned voice {self.assignments[key]} to {block.character} "
                        f"(gender: {self.genders[key] or 'unknown'})")
        return dict(self.assignments)

    def voice_for(self, name: str) -> str:
        return self.assignments[normalize_name(name)]
