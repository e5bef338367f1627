# ytprompt/scraper.py
import logging
from typing import Optional

from playwright.async_api import async_playwright

from .config import (
    BROWSER_HEADLESS,
    BROWSER_CHANNEL,
    PAGE_LOAD_TIMEOUT_MS,
    INJECT_MAX_ATTEMPTS,
    INJECT_INTERVAL_MS,
    USER_AGENT,
)
from .lookups import TITLE_LOOKUPS, CHANNEL_LOOKUPS, ANCHOR_SELECTORS
from .panel import PanelReader, PanelUnlocker
from .timedtext import TimedTextFetcher
from .ui import PromptContext, UNKNOWN_TITLE, UNKNOWN_CHANNEL, build_prompt
from .utils import extract_youtube_video_id, first_result, poll_until, watch_url


class TranscriptAcquirer:
    """
    Tries the transcript strategies cheapest first:
      1. read the transcript panel if it is already open
      2. open the panel through the UI, then read it
      3. fetch the caption feed (machine captions, no UI side effects)
    """

    def __init__(self, reader: PanelReader, unlocker: PanelUnlocker, fetcher: TimedTextFetcher):
        self.reader = reader
        self.unlocker = unlocker
        self.fetcher = fetcher

    async def acquire(self) -> Optional[str]:
        return await first_result([
            self.from_open_panel,
            self.from_unlocked_panel,
            self.from_caption_feed,
        ])

    async def from_open_panel(self) -> Optional[str]:
        return await self.reader.read_text()

    async def from_unlocked_panel(self) -> Optional[str]:
        if not await self.unlocker.open():
            return None
        return await self.reader.read_text()

    async def from_caption_feed(self) -> Optional[str]:
        return await self.fetcher.fetch()


def build_acquirer(page, video_id: Optional[str] = None) -> TranscriptAcquirer:
    return TranscriptAcquirer(
        PanelReader(page),
        PanelUnlocker(page),
        TimedTextFetcher(page, video_id=video_id),
    )


async def read_field(page, lookups) -> Optional[str]:
    """First non-empty value from an ordered (selector, extractor) table."""
    for lookup in lookups:
        try:
            handle = await page.query_selector(lookup.selector)
            if handle is None:
                continue
            if lookup.extractor == "text":
                value = await handle.text_content()
            else:
                value = await handle.get_attribute(lookup.extractor)
        except Exception as e:
            logging.debug(f"[Context] Lookup failed for {lookup.selector}: {e}")
            continue
        # The first element found decides, like the page's own fallbacks
        return (value or "").strip() or None
    return None


async def read_prompt_context(page) -> PromptContext:
    title = await read_field(page, TITLE_LOOKUPS)
    channel = await read_field(page, CHANNEL_LOOKUPS)
    return PromptContext(
        title=title or UNKNOWN_TITLE,
        channel=channel or UNKNOWN_CHANNEL,
        url=page.url,
    )


async def wait_for_watch_page(page) -> bool:
    """Waits for the watch metadata block that hosts the action bar."""
    async def metadata_rendered() -> bool:
        try:
            return await page.query_selector(ANCHOR_SELECTORS[-1]) is not None
        except Exception:
            return False

    return await poll_until(metadata_rendered, INJECT_INTERVAL_MS / 1000, INJECT_MAX_ATTEMPTS)


async def fetch_prompt_for_url(url: str, mode: str = "prompt"):
    """
    Opens `url` in a headless browser and runs the same strategy chain as the
    in-page button. Returns a result dict, or {"error": ...}.
    """
    video_id = extract_youtube_video_id(url)
    if not video_id:
        return {"error": "Not a YouTube video URL"}

    target = watch_url(video_id)
    logging.info(f"[Headless] Acquiring transcript for {target}")

    async with async_playwright() as p:
        launch_kwargs = {"headless": BROWSER_HEADLESS}
        if BROWSER_CHANNEL:
            launch_kwargs["channel"] = BROWSER_CHANNEL
        browser = await p.chromium.launch(
            args=["--disable-blink-features=AutomationControlled"],
            **launch_kwargs,
        )
        try:
            context = await browser.new_context(
                viewport={"width": 1280, "height": 800},
                user_agent=USER_AGENT,
            )
            page = await context.new_page()
            await page.goto(target, wait_until="domcontentloaded", timeout=PAGE_LOAD_TIMEOUT_MS)

            if not await wait_for_watch_page(page):
                logging.warning(f"[Headless] Watch metadata never rendered for {video_id}")

            transcript = await build_acquirer(page, video_id).acquire()
            if not transcript:
                logging.info(f"[Headless] No transcript for {video_id}")
                return {"error": "No transcript found for this video", "video_id": video_id}

            prompt_context = await read_prompt_context(page)
            logging.info(f"[Headless] Transcript acquired for {video_id} ({len(transcript)} chars)")
            return {
                "status": "COMPLETED",
                "video_id": video_id,
                "title": prompt_context.title,
                "channel": prompt_context.channel,
                "url": prompt_context.url,
                "transcript": transcript,
                "prompt": build_prompt(prompt_context, transcript, mode),
            }
        finally:
            await browser.close()
