import asyncio
import html
import json
import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional

import requests
from pydantic import ValidationError

from screenplay_gen.config import Config
from screenplay_gen.core.errors import FeedFetchError, InputError
from screenplay_gen.core.models import StoryElements

logger = logging.getLogger(__name__)

FEED_NAMES = ("characters", "story", "today")

# Feed id per weekday of the premise site
DAILY_FEED_IDS = {
    "Sunday": "28", "Monday": "27", "Tuesday": "21", "Wednesday": "22",
    "Thursday": "18", "Friday": "24", "Saturday": "25",
}
DEFAULT_FEED_ID = "22"
_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_TAG_RE = re.compile(r"<[^>]+>")


def daily_feed_id(now: Optional[datetime] = None) -> str:
    """Feed id for the current day in the premise site's timezone (UTC-8)."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    pst = now.astimezone(timezone.utc) - timedelta(hours=8)
    return DAILY_FEED_IDS.get(_WEEKDAYS[pst.weekday()], DEFAULT_FEED_ID)


def html_to_text(fragment: str) -> str:
    # Tags first, then one round of entity decoding, like DOM textContent.
    return html.unescape(_TAG_RE.sub(" ", fragment)).strip()


def extract_story_seed(xml_text: str) -> str:
    """
    Returns the first item description that reads like a story seed:
    plain text (HTML stripped), not a URL, longer than 20 characters.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ValueError(f"Failed to parse the RSS feed XML: {e}") from e

    items = root.findall(".//item")
    if not items:
        raise ValueError("No <item> elements found in the RSS feed.")

    for item in items:
        description = item.findtext("description")
        if not description:
            continue
        seed = " ".join(html_to_text(description).split())
        if seed and not seed.startswith(("http://", "https://")) and len(seed) > 20:
            return seed
    raise ValueError("No valid story seed found in any of the RSS items.")


class PremiseFeedClient:
    def __init__(self, url_template: str = None, timeout: float = None, session: requests.Session = None):
        self.url_template = url_template or Config.FEED_URL_TEMPLATE
        self.timeout = timeout if timeout is not None else Config.FEED_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def feed_urls(self, day_id: str) -> Dict[str, str]:
        return {name: self.url_template.format(day=day_id, feed=name) for name in FEED_NAMES}

    def fetch_description(self, url: str) -> str:
        response = self.session.get(url, timeout=self.timeout)
        if not response.ok:
            raise RuntimeError(f"Network response was not ok, status: {response.status_code}")
        return extract_story_seed(response.text)

    async def fetch_story_elements(self, day_id: Optional[str] = None) -> StoryElements:
        """
        Fetches the three premise feeds concurrently and waits for all of them.
        Raises FeedFetchError naming every feed that failed.
        """
        urls = self.feed_urls(day_id or daily_feed_id())
        results = await asyncio.gather(
            *(asyncio.to_thread(self.fetch_description, urls[name]) for name in FEED_NAMES),
            return_exceptions=True,
        )

        values: Dict[str, str] = {}
        failures: Dict[str, str] = {}
        for name, result in zip(FEED_NAMES, results):
            if isinstance(result, BaseException):
                logger.error(f"Error fetching '{name}' feed: {result}")
                failures[name] = str(result) or type(result).__name__
            else:
                values[name] = result

        if failures:
            raise FeedFetchError(failures)
        logger.info("Fetched all premise feeds.")
        return StoryElements(**values)


def load_premise_file(path: Path) -> StoryElements:
    """Reads a premise saved by `premise --save` (characters/story/today)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return StoryElements.model_validate(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to load premise file {path}: {e}")
        missing = []
        if isinstance(e, ValidationError):
            missing = [str(err["loc"][0]) for err in e.errors() if err["loc"]]
        detail = f"missing or invalid fields: {', '.join(missing)}" if missing else str(e)
        raise InputError(f"Could not read premise file {path}: {detail}") from e
