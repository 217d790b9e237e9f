import asyncio
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv

from screenplay_gen.config import Config, setup_directories
from screenplay_gen.core.ai_client import GenAIClient
from screenplay_gen.core.bundler import AssetBundler
from screenplay_gen.core.drafts import DraftStore
from screenplay_gen.core.errors import ScreenplayGenError
from screenplay_gen.core.feeds import PremiseFeedClient, load_premise_file
from screenplay_gen.core.pipeline import GenerationPipeline
from screenplay_gen.core.references import load_character_images

# Setup logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def _fail(message: str):
    click.echo(message, err=True)
    sys.exit(1)


@click.group()
def cli():
    """Turns a short story idea into a script, images and narrated audio."""
    load_dotenv()


@cli.command()
@click.option('--save', type=click.Path(dir_okay=False), help='Write the fetched premise to this JSON file.')
def premise(save):
    """Fetches today's series premise."""
    try:
        elements = asyncio.run(PremiseFeedClient().fetch_story_elements())
    except ScreenplayGenError as e:
        _fail(str(e))

    if save:
        Path(save).write_text(elements.model_dump_json(indent=2), encoding="utf-8")
        logger.info(f"Premise saved to {save}")
    click.echo(f"Characters:\n{elements.characters}\n\nStory:\n{elements.story}\n\nToday:\n{elements.today}")


@cli.command()
@click.option('--idea', default=None, help='Story idea. Defaults to the saved draft.')
@click.option('--premise-file', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Premise JSON (characters/story/today). Fetched from the feeds if omitted.')
@click.option('--character-image', 'character_images', multiple=True, type=click.Path(exists=True, dir_okay=False),
              help='Reference image named after a character, e.g. Ursula.png. Repeatable.')
@click.option('--output-dir', default="output", help='Directory to save the asset bundle.')
def generate(idea, premise_file, character_images, output_dir):
    """Generates the script, images and audio, then writes the zip bundle."""
    try:
        Config.validate()
    except ValueError as e:
        logger.error(str(e))
        return

    drafts = DraftStore(Config.DRAFT_PATH)
    if idea:
        drafts.save(idea)
    else:
        idea = drafts.load()
    if not idea or not idea.strip():
        _fail("Please provide a story idea to get started.")

    output_path = Path(output_dir)
    setup_directories(output_path)

    async def run():
        if premise_file:
            elements = load_premise_file(Path(premise_file))
        else:
            logger.info("Fetching today's story premise...")
            elements = await PremiseFeedClient().fetch_story_elements()
        references = await load_character_images(Path(p) for p in character_images)

        pipeline = GenerationPipeline(GenAIClient(), references)
        state = await pipeline.run(elements, idea)
        logger.info("Packaging files for download...")
        return AssetBundler(output_path).write(state.script, state.images, state.audio)

    try:
        bundle_path = asyncio.run(run())
    except (ScreenplayGenError, ValueError) as e:
        _fail(str(e))
    click.echo(f"Assets written to {bundle_path}")


@cli.group()
def draft():
    """Manages the saved story idea."""


@draft.command('show')
def draft_show():
    click.echo(DraftStore(Config.DRAFT_PATH).load() or "")


@draft.command('set')
@click.argument('text')
def draft_set(text):
    DraftStore(Config.DRAFT_PATH).save(text)


@cli.command()
def reset():
    """Clears the saved story idea."""
    DraftStore(Config.DRAFT_PATH).clear()
    click.echo("Draft cleared.")


def main():
    cli()


if __name__ == '__main__':
    main()
