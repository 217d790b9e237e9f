import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _voice_list(value: str):
    return [v.strip() for v in value.split(",") if v.strip()]


class Config:
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

    # Models used by each stage
    SCRIPT_MODEL_NAME = os.getenv("SCRIPT_MODEL_NAME", "gemini-2.5-pro")
    PROMPT_MODEL_NAME = os.getenv("PROMPT_MODEL_NAME", "gemini-2.5-flash")
    IMAGE_MODEL_NAME = os.getenv("IMAGE_MODEL_NAME", "gemini-2.5-flash-image")
    TTS_MODEL_NAME = os.getenv("TTS_MODEL_NAME", "gemini-2.5-flash-preview-tts")

    # Prebuilt voices, assigned round-robin per gender
    MALE_VOICES = _voice_list(os.getenv("MALE_VOICES", "Puck,Charon,Fenrir,Zephyr"))
    FEMALE_VOICES = _voice_list(os.getenv("FEMALE_VOICES", "Kore"))

    # The TTS model returns 16-bit mono PCM at this rate
    SAMPLE_RATE = int(os.getenv("SAMPLE_RATE", "24000"))

    # Daily premise feeds. {day} is the feed id, {feed} one of characters/story/today.
    FEED_URL_TEMPLATE = os.getenv(
        "FEED_URL_TEMPLATE",
        "https://www.htmlcommentbox.com/rss_clean?page=https%3A%2F%2Fvgy.rf.gd%2F{day}%2F%3Fi%3D{feed}"
        "&opts=16798&mod=$1$wq1rdBcg$ir4fsMQfu76bjx/maFJMv/",
    )
    FEED_TIMEOUT_SECONDS = float(os.getenv("FEED_TIMEOUT_SECONDS", "20"))

    DRAFT_PATH = Path(os.getenv("DRAFT_PATH", ".screenplay_draft.json"))
    BASE_OUTPUT_DIR = Path("output")

    @staticmethod
    def validate():
        if not Config.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is not set.")

# Ensure output directory exists
def setup_directories(base_path: Path):
    base_path.mkdir(parents=True, exist_ok=True)
