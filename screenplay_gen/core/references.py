import asyncio
import base64
import logging
import mimetypes
from pathlib import Path
from typing import Dict, Iterable, Optional

from PIL import Image

from screenplay_gen.core.errors import InputError
from screenplay_gen.core.models import CharacterImage

logger = logging.getLogger(__name__)


def character_key(file_name: str) -> str:
    """Maps a file name such as 'Captain Rex.JPG' to 'captain rex'."""
    return Path(file_name).stem.lower()


def read_character_image(path: Path) -> Optional[CharacterImage]:
    path = Path(path)
    name = character_key(path.name)
    if not name:
        return None
    with Image.open(path) as img:
        mime_type = Image.MIME.get(img.format) or mimetypes.guess_type(path.name)[0] or "image/png"
    return CharacterImage(
        character_name=name,
        file_name=path.name,
        data=base64.b64encode(path.read_bytes()).decode("ascii"),
        mime_type=mime_type,
    )


async def load_character_images(paths: Iterable[Path]) -> Dict[str, CharacterImage]:
    """
    Reads reference images concurrently, keyed by lower-cased file stem.
    Raises InputError naming every unreadable file after all reads have finished.
    """
    paths = list(paths)
    if not paths:
        return {}
    logger.info(f"Reading {len(paths)} image(s)...")
    results = await asyncio.gather(
        *(asyncio.to_thread(read_character_image, p) for p in paths),
        return_exceptions=True,
    )
    images: Dict[str, CharacterImage] = {}
    failures = []
    for path, result in zip(paths, results):
        if isinstance(result, Exception):
            logger.error(f"Failed to read image file {path}: {result}")
            failures.append(f"- {Path(path).name}: {str(result) or type(result).__name__}")
        elif result is not None:
            images[result.character_name] = result
    if failures:
        raise InputError("Failed to read image files.\n" + "\n".join(failures))
    return images
