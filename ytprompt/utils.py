# ytprompt/utils.py
import re
import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Optional, TypeVar
from urllib.parse import parse_qs, urlparse

T = TypeVar("T")


def normalize_text(raw_text: str) -> str:
    """
    Collapses raw extracted text into clean lines: no carriage returns,
    every line trimmed, blank lines dropped, joined with a single newline.
    Running it on its own output changes nothing.
    """
    lines = raw_text.replace("\r", "").split("\n")
    return "\n".join(line.strip() for line in lines if line.strip())


def video_id_from_location(url: Optional[str]) -> Optional[str]:
    """Returns the `v` query parameter of a watch-page location, if any."""
    if not url:
        return None
    try:
        values = parse_qs(urlparse(url).query).get("v")
    except ValueError:
        return None
    return values[0] if values and values[0] else None


def extract_youtube_video_id(url: str) -> str | None:
    """
    Extracts the 11-character YouTube video ID from a URL.
    Handles standard, short, shorts and embed URLs.
    """
    patterns = [
        r"(?:v=|\/v\/|youtu\.be\/|embed\/|shorts\/)([a-zA-Z0-9_-]{11})",
    ]
    for pattern in patterns:
        match = re.search(pattern, url)
        if match:
            return match.group(1)
    return None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


async def poll_until(
    predicate: Callable[[], Awaitable[bool]],
    interval: float,
    max_attempts: int,
) -> bool:
    """
    Calls `predicate` up to `max_attempts` times, sleeping `interval` seconds
    between calls. Returns True as soon as it reports success.
    """
    for attempt in range(max_attempts):
        if await predicate():
            return True
        if attempt < max_attempts - 1:
            await asyncio.sleep(interval)
    return False


async def first_result(
    strategies: Iterable[Callable[[], Awaitable[Optional[T]]]],
) -> Optional[T]:
    """Runs strategies in order and returns the first non-empty result."""
    for strategy in strategies:
        name = getattr(strategy, "__name__", repr(strategy))
        try:
            result = await strategy()
        except Exception as e:
            logging.warning(f"[Strategy] {name} failed: {e}", exc_info=True)
            continue
        if result:
            logging.info(f"[Strategy] {name} produced a result")
            return result
        logging.info(f"[Strategy] {name} returned nothing")
    return None
