import io
import json
import logging
import re
import zipfile
from pathlib import Path
from typing import Iterable

from screenplay_gen.core.errors import BundlingError
from screenplay_gen.core.models import Action, DialogueBlock, GeneratedAudio, GeneratedImage, SceneHeading, Script, Transition

logger = logging.getLogger(__name__)

# Fixed entry timestamp so identical runs produce identical archives
ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def asset_name(scene_index: int, extension: str) -> str:
    return f"{scene_index:04d}.{extension}"


def safe_title(title: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", title, flags=re.IGNORECASE).lower()


def script_to_text(script: Script) -> str:
    """Plain-text transcript: title line, then each element separated by a blank line."""
    text = f"Title: {script.title}\n\n"
    for element in script.scene_elements:
        if isinstance(element, (SceneHeading, Action, Transition)):
            text += f"{element.content}\n\n"
        elif isinstance(element, DialogueBlock):
            text += f"\t{element.character.upper()}\n"
            for line in element.elements:
                if line.type == "parenthetical":
                    text += f"\t({line.content})\n"
                else:
                    text += f"\t{line.content}\n"
            text += "\n"
        else:
            raise TypeError(f"Unknown scene element: {type(element).__name__}")
    return text


def script_to_json(script: Script) -> str:
    return json.dumps(script.model_dump(mode="json"), ensure_ascii=False, indent=2)


class AssetBundler:
    def __init__(self, output_dir: Path = None):
        self.output_dir = Path(output_dir) if output_dir else None

    def _add(self, archive: zipfile.ZipFile, name: str, data):
        info = zipfile.ZipInfo(name, date_time=ZIP_DATE_TIME)
        if name.endswith("/"):
            info.external_attr = 0o40755 << 16 | 0x10
        else:
            info.external_attr = 0o644 << 16
            info.compress_type = zipfile.ZIP_DEFLATED
        archive.writestr(info, data)

    def build(self, script: Script, images: Iterable[GeneratedImage], audio: Iterable[GeneratedAudio]) -> bytes:
        """Packs script.json, story.txt, images/NNNN.png and audio/NNNN.wav into zip bytes."""
        try:
            images = sorted(images, key=lambda img: img.scene_index)
            audio = sorted(audio, key=lambda clip: clip.scene_index)
            buffer = io.BytesIO()
            with zipfile.ZipFile(buffer, "w") as archive:
                self._add(archive, "script.json", script_to_json(script))
                self._add(archive, "story.txt", script_to_text(script))
                self._add(archive, "images/", b"")
                for image in images:
                    self._add(archive, f"images/{asset_name(image.scene_index, 'png')}", image.image_bytes)
                self._add(archive, "audio/", b"")
                for clip in audio:
                    self._add(archive, f"audio/{asset_name(clip.scene_index, 'wav')}", clip.audio_bytes)
            return buffer.getvalue()
        except Exception as e:
            logger.error(f"Failed to create zip file: {e}")
            raise BundlingError(f"Failed to create zip file: {e}") from e

    def archive_path(self, script: Script) -> Path:
        return (self.output_dir or Path(".")) / f"{safe_title(script.title)}_assets.zip"

    def write(self, script: Script, images: Iterable[GeneratedImage], audio: Iterable[GeneratedAudio]) -> Path:
        data = self.build(script, images, audio)
        path = self.archive_path(script)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise BundlingError(f"Failed to create zip file: {e}") from e
        logger.info(f"Bundle saved to {path}")
        return path
