import base64
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator


class DialogueLine(BaseModel):
    type: Literal["parenthetical", "dialogue"] = Field(description="Parenthetical tone cue or spoken line")
    content: str = Field(default="", description="Text of the cue or line")

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class _TextElement(BaseModel):
    @field_validator("content", mode="before", check_fields=False)
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class SceneHeading(_TextElement):
    type: Literal["scene_heading"] = "scene_heading"
    content: str = Field(default="", description="Slug line, e.g. INT. SPACESHIP - NIGHT")


class Action(_TextElement):
    type: Literal["action"] = "action"
    content: str = Field(default="", description="What happens on screen")


class Transition(_TextElement):
    type: Literal["transition"] = "transition"
    content: str = Field(default="", description="Transition, e.g. CUT TO:")


class DialogueBlock(BaseModel):
    type: Literal["dialogue_block"] = "dialogue_block"
    character: str = Field(min_length=1, description="Name of the speaking character")
    elements: List[DialogueLine] = Field(default_factory=list, description="Parenthetical and dialogue lines in order")

    @field_validator("character")
    @classmethod
    def _character_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("dialogue block character must not be blank")
        return value

    @field_validator("elements", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value

    @property
    def parenthetical(self) -> Optional[str]:
        for line in self.elements:
            if line.type == "parenthetical" and line.content:
                return line.content
        return None

    @property
    def dialogue_text(self) -> str:
        return " ".join(line.content.strip() for line in self.elements
                        if line.type == "dialogue" and line.content.strip())


SceneElement = Annotated[
    Union[SceneHeading, Action, Transition, DialogueBlock],
    Field(discriminator="type"),
]


class Script(BaseModel):
    source_file: str = Field(description="Name of the script source file")
    title: str = Field(description="Title of the episode")
    scene_elements: List[SceneElement] = Field(description="Screenplay elements in order")

    def dialogue_blocks(self) -> List[tuple]:
        """(scene_index, block) for every dialogue block, in document order."""
        return [(i, el) for i, el in enumerate(self.scene_elements) if isinstance(el, DialogueBlock)]


class StoryElements(BaseModel):
    characters: str = Field(description="Series cast, optionally with (m)/(f) markers")
    story: str = Field(description="Core story of the series")
    today: str = Field(description="Daily theme")


class GeneratedImage(BaseModel):
    scene_index: int = Field(ge=0, description="Position of the Action element in the script")
    image_url: str = Field(description="data:image/png;base64 URI")

    @property
    def image_bytes(self) -> bytes:
        _, _, payload = self.image_url.partition(",")
        return base64.b64decode(payload)

    @classmethod
    def from_png(cls, scene_index: int, png_bytes: bytes) -> "GeneratedImage":
        encoded = base64.b64encode(png_bytes).decode("ascii")
        return cls(scene_index=scene_index, image_url=f"data:image/png;base64,{encoded}")


class GeneratedAudio(BaseModel):
    scene_index: int = Field(ge=0, description="Position of the dialogue block in the script")
    audio_bytes: bytes = Field(description="Complete WAV file")
    duration_seconds: float
    character: str
    dialogue: str


class CharacterImage(BaseModel):
    character_name: str = Field(description="Lower-cased file name without extension")
    file_name: str
    data: str = Field(description="Base64 payload of the image file")
    mime_type: str

    @property
    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)
