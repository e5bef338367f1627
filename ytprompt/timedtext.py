# ytprompt/timedtext.py
import re
import json
import asyncio
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import httpx

from .config import CAPTION_FETCH_TIMEOUT, CAPTION_FETCH_RETRIES, USER_AGENT
from .tracks import select_caption_track, tracks_from_player_response
from .utils import normalize_text

ZERO_WIDTH_SPACE = "\u200b"

PLAYER_RESPONSE_RE = re.compile(r"ytInitialPlayerResponse\s*=\s*(?=\{)")

# Player response sources, tried in order. The live player is the only one
# that follows SPA navigation; the others describe the first page load.
LIVE_PLAYER_RESPONSE_JS = """() => {
    const player = document.querySelector('#movie_player');
    try {
        return player && player.getPlayerResponse ? player.getPlayerResponse() : null;
    } catch (e) {
        return null;
    }
}"""

GLOBAL_PLAYER_RESPONSE_JS = "() => window.ytInitialPlayerResponse || null"

INLINE_SCRIPTS_JS = """els => els
    .map(el => el.textContent || '')
    .filter(text => text.includes('ytInitialPlayerResponse'))"""

_decoder = json.JSONDecoder()


def player_response_from_script(text: str) -> Optional[Dict[str, Any]]:
    """Pulls the object literal assigned to ytInitialPlayerResponse out of inline script text."""
    for match in PLAYER_RESPONSE_RE.finditer(text):
        try:
            obj, _ = _decoder.raw_decode(text, match.end())
        except ValueError:
            continue
        if isinstance(obj, dict):
            return obj
    return None


def parse_json3(data: Any) -> Optional[str]:
    """
    json3 format has events[].segs[].utf8. Each event becomes one line;
    events that are empty after cleanup are dropped.
    """
    events = data.get("events") if isinstance(data, dict) else None
    if not isinstance(events, list):
        return None

    lines = []
    for event in events:
        segs = event.get("segs") if isinstance(event, dict) else None
        if not isinstance(segs, list):
            continue
        text = "".join(
            seg["utf8"] for seg in segs
            if isinstance(seg, dict) and isinstance(seg.get("utf8"), str)
        )
        cleaned = text.replace(ZERO_WIDTH_SPACE, "").strip()
        if cleaned:
            lines.append(cleaned)

    if not lines:
        return None
    return normalize_text("\n".join(lines))


class TimedTextFetcher:
    """Fetches the caption feed for the best available track of the video on `page`."""

    def __init__(
        self,
        page,
        video_id: Optional[str] = None,
        timeout: float = CAPTION_FETCH_TIMEOUT,
        retries: int = CAPTION_FETCH_RETRIES,
        retry_backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.page = page
        self.video_id = video_id
        self.timeout = timeout
        self.retries = retries
        self.retry_backoff = retry_backoff
        self.transport = transport

    async def fetch(self) -> Optional[str]:
        player = await self.read_player_response()
        tracks = tracks_from_player_response(player)
        if not tracks:
            logging.info("[TimedText] No caption tracks in player response")
            return None

        track = select_caption_track(tracks)
        if not track or not track.source_url:
            return None
        logging.info(
            f"[TimedText] Using track '{track.name}' lang={track.language_code} "
            f"auto={track.is_auto_generated} ({len(tracks)} available)"
        )

        try:
            url = self.feed_url(track.source_url)
        except (httpx.InvalidURL, ValueError) as e:
            logging.warning(f"[TimedText] Bad caption track URL {track.source_url!r}: {e}")
            return None
        data = await self._get_feed(url)
        if data is None:
            return None
        return parse_json3(data)

    def feed_url(self, source_url: str) -> str:
        # Fetch as JSON3, more stable to parse than the XML formats
        absolute = urljoin(self.page.url or "", source_url)
        return str(httpx.URL(absolute).copy_set_param("fmt", "json3"))

    async def read_player_response(self) -> Optional[Dict[str, Any]]:
        for candidate in await self._player_response_candidates():
            if not isinstance(candidate, dict):
                continue
            if self._is_stale(candidate):
                logging.info("[TimedText] Skipping player response for another video")
                continue
            return candidate
        return None

    async def _player_response_candidates(self) -> List[Any]:
        candidates = []
        for script in (LIVE_PLAYER_RESPONSE_JS, GLOBAL_PLAYER_RESPONSE_JS):
            try:
                candidates.append(await self.page.evaluate(script))
            except Exception as e:
                logging.debug(f"[TimedText] Player response lookup failed: {e}")

        try:
            texts = await self.page.eval_on_selector_all("script", INLINE_SCRIPTS_JS)
        except Exception as e:
            logging.debug(f"[TimedText] Inline script scan failed: {e}")
            texts = []
        for text in texts or []:
            candidates.append(player_response_from_script(text))
        return candidates

    def _is_stale(self, player: Dict[str, Any]) -> bool:
        if not self.video_id:
            return False
        found = (player.get("videoDetails") or {}).get("videoId")
        return bool(found) and found != self.video_id

    async def _get_feed(self, url: str) -> Optional[Any]:
        """One GET without cookies. Only network errors and 5xx are retried."""
        attempt = 0
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        ) as client:
            while True:
                attempt += 1
                try:
                    response = await client.get(url)
                except httpx.HTTPError as e:
                    if attempt > self.retries:
                        logging.warning(f"[TimedText] Caption fetch failed: {e}")
                        return None
                    await asyncio.sleep(self.retry_backoff * attempt)
                    continue

                if response.status_code >= 500 and attempt <= self.retries:
                    await asyncio.sleep(self.retry_backoff * attempt)
                    continue

                if not response.is_success:
                    logging.warning(f"[TimedText] Caption feed returned HTTP {response.status_code}")
                    return None

                try:
                    return response.json()
                except ValueError:
                    logging.warning("[TimedText] Caption feed body is not JSON")
                    return None
