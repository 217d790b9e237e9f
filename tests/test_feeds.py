import asyncio
from datetime import datetime, timezone

import pytest
from unittest.mock import MagicMock

from screenplay_gen.core.errors import FeedFetchError, InputError
from screenplay_gen.core.feeds import (FEED_NAMES, PremiseFeedClient, daily_feed_id, extract_story_seed,
                                       html_to_text, load_premise_file)

RSS = """<?xml version="1.0"?>
<rss><channel>
  <item><description>https://example.com/link-only-entry</description></item>
  <item><description>short</description></item>
  <item><description>&lt;p&gt;Ursula (f) &amp;amp; Rex (m) run an intergalactic taco truck.&lt;/p&gt;</description></item>
</channel></rss>"""


@pytest.fixture
def feed_client():
    return PremiseFeedClient(url_template="https://feeds.test/{day}/{feed}", timeout=1, session=MagicMock())


class TestStorySeed:
    def test_skips_urls_and_short_entries(self):
        assert extract_story_seed(RSS) == "Ursula (f) & Rex (m) run an intergalactic taco truck."

    def test_no_items(self):
        with pytest.raises(ValueError, match="No <item>"):
            extract_story_seed("<rss><channel></channel></rss>")

    def test_no_valid_seed(self):
        with pytest.raises(ValueError, match="No valid story seed"):
            extract_story_seed("<rss><channel><item><description>tiny</description></item></channel></rss>")

    def test_invalid_xml(self):
        with pytest.raises(ValueError, match="parse"):
            extract_story_seed("<rss><channel>")


class TestDailyFeedId:
    def test_uses_utc_minus_eight(self):
        # Tuesday 05:00 UTC is still Monday in UTC-8
        assert daily_feed_id(datetime(2024, 1, 2, 5, 0, tzinfo=timezone.utc)) == "27"
        assert daily_feed_id(datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc)) == "21"

    def test_naive_datetime_treated_as_utc(self):
        assert daily_feed_id(datetime(2024, 1, 7, 12, 0)) == "28"


class TestPremiseFeedClient:
    def test_feed_urls(self, feed_client):
        urls = feed_client.feed_urls("22")
        assert urls == {name: f"https://feeds.test/22/{name}" for name in FEED_NAMES}

    def test_fetch_description_http_error(self, feed_client):
        feed_client.session.get.return_value = MagicMock(ok=False, status_code=503)
        with pytest.raises(RuntimeError, match="status: 503"):
            feed_client.fetch_description("https://feeds.test/22/today")

    def test_fetch_description(self, feed_client):
        feed_client.session.get.return_value = MagicMock(ok=True, text=RSS)
        assert "taco truck" in feed_client.fetch_description("https://feeds.test/22/story")
        feed_client.session.get.assert_called_with("https://feeds.test/22/story", timeout=1)

    def test_fetch_story_elements(self, feed_client, mocker):
        mocker.patch.object(feed_client, "fetch_description",
                            side_effect=lambda url: f"seed for {url.rsplit('/', 1)[-1]}")
        elements = asyncio.run(feed_client.fetch_story_elements("21"))
        assert elements.characters == "seed for characters"
        assert elements.story == "seed for story"
        assert elements.today == "seed for today"

    def test_partial_failure_names_failed_feed(self, feed_client, mocker):
        def fake_fetch(url):
            if url.endswith("/today"):
                raise RuntimeError("Network response was not ok, status: 503")
            return "a perfectly fine story seed"

        mocker.patch.object(feed_client, "fetch_description", side_effect=fake_fetch)
        with pytest.raises(FeedFetchError) as excinfo:
            asyncio.run(feed_client.fetch_story_elements("21"))

        error = excinfo.value
        assert list(error.failures) == ["today"]
        assert "503" in error.failures["today"]
        entries = [line for line in str(error).splitlines() if line.startswith("- ")]
        assert len(entries) == 1
        assert "today" in entries[0].lower()
        assert "503" in entries[0]

    def test_all_failures_listed_on_separate_lines(self, feed_client, mocker):
        mocker.patch.object(feed_client, "fetch_description", side_effect=RuntimeError("offline"))
        with pytest.raises(FeedFetchError) as excinfo:
            asyncio.run(feed_client.fetch_story_elements("21"))
        entries = [line for line in str(excinfo.value).splitlines() if line.startswith("- ")]
        assert entries == [
            "- 'Characters' feed: offline",
            "- 'Story' feed: offline",
            "- 'Today' feed: offline",
        ]


class TestHtmlToText:
    def test_strips_tags_and_decodes_once(self):
        assert html_to_text("<p>Rex &amp; Ursula</p>") == "Rex & Ursula"

    def test_escaped_markup_kept_as_text(self):
        assert html_to_text("<p>Use &lt;b&gt; for bold</p>") == "Use <b> for bold"
        assert html_to_text("Literal &amp;lt; stays") == "Literal &lt; stays"

    def test_escaped_markup_inside_feed_item(self):
        rss = ("<rss><channel><item><description>&lt;p&gt;The robot types &amp;lt;b&amp;gt; into every "
               "message it sends.&lt;/p&gt;</description></item></channel></rss>")
        assert extract_story_seed(rss) == "The robot types <b> into every message it sends."


class TestLoadPremiseFile:
    def test_valid_file(self, tmp_path):
        path = tmp_path / "premise.json"
        path.write_text('{"characters": "Rex (m)", "story": "Diner.", "today": "Tacos"}', encoding="utf-8")
        assert load_premise_file(path).today == "Tacos"

    def test_missing_fields(self, tmp_path):
        path = tmp_path / "premise.json"
        path.write_text('{"characters": "Rex (m)"}', encoding="utf-8")
        with pytest.raises(InputError, match="story, today"):
            load_premise_file(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "premise.json"
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(InputError, match="Could not read premise file"):
            load_premise_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputError):
            load_premise_file(tmp_path / "nope.json")
