from .ai_client import GenAIClient
from .bundler import AssetBundler
from .feeds import PremiseFeedClient
from .models import Script, StoryElements, GeneratedImage, GeneratedAudio, CharacterImage
from .pipeline import GenerationPipeline, RunState
from .writer import ScriptWriter
