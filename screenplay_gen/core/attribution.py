"""Speaker attribution for action beats.

Each action is attributed to the character of the nearest preceding dialogue
block. Actions before any dialogue keep the carried-over unknown speaker.
"""
from dataclasses import dataclass
from typing import List

from screenplay_gen.core.models import Action, DialogueBlock, Script

UNKNOWN_SPEAKER = "A character"


@dataclass(frozen=True)
class ActionBeat:
    scene_index: int
    speaker: str
    content: str


@dataclass
class AttributionState:
    current_speaker: str = UNKNOWN_SPEAKER

    def observe(self, element) -> None:
        if isinstance(element, DialogueBlock):
            self.current_speaker = element.character


def attribute_speakers(script: Script, state: AttributionState = None) -> List[ActionBeat]:
    state = state or AttributionState()
    beats = []
    # Single pass: the speaker seen last is the nearest preceding dialogue.
    for index, element in enumerate(script.scene_elements):
        if isinstance(element, Action) and element.content:
            beats.append(ActionBeat(index, state.current_speaker, element.content))
        state.observe(element)
    return beats
