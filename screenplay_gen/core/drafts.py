import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DRAFT_KEY = "userInput"


class DraftStore:
    """Keeps the user's story idea between sessions in a small JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable draft file {self.path}: {e}")
            return {}

    def load(self) -> Optional[str]:
        return self._read().get(DRAFT_KEY) or None

    def save(self, text: str):
        data = self._read()
        data[DRAFT_KEY] = text
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def clear(self):
        data = self._read()
        data.pop(DRAFT_KEY, None)
        if data:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        elif self.path.exists():
            self.path.unlink()
