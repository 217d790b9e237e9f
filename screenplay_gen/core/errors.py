from typing import Dict, Optional


class ScreenplayGenError(Exception):
    """Base class for failures surfaced to the user as a single message."""


class FeedFetchError(ScreenplayGenError):
    """One or more premise feeds could not be fetched or parsed."""

    def __init__(self, failures: Dict[str, str]):
        self.failures = dict(failures)
        lines = [f"- '{name.capitalize()}' feed: {reason}" for name, reason in self.failures.items()]
        super().__init__(
            "Could not fetch all story elements. Please check your connection or try again later.\n\n"
            "Failed feeds:\n" + "\n".join(lines)
        )


class ScriptGenerationError(ScreenplayGenError):
    pass


class ImagePromptError(ScreenplayGenError):
    # Never fatal: callers fall back to a plain prompt.
    pass


class ImageGenerationError(ScreenplayGenError):
    def __init__(self, message: str, scene_index: Optional[int] = None):
        super().__init__(message)
        self.scene_index = scene_index


class SpeechGenerationError(ScreenplayGenError):
    def __init__(self, message: str, scene_index: Optional[int] = None):
        super().__init__(message)
        self.scene_index = scene_index


class BundlingError(ScreenplayGenError):
    pass


class InputError(ScreenplayGenError):
    """A premise file or reference image supplied by the user could not be read."""
    pass
