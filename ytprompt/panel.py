# ytprompt/panel.py
import asyncio
import logging
from typing import List, Optional

from .config import (
    PAGE_SETTLE_MS,
    CLICK_SETTLE_MS,
    PANEL_WAIT_ATTEMPTS,
    PANEL_WAIT_INTERVAL_MS,
)
from .lookups import (
    ControlRule,
    SEGMENT_SELECTOR,
    SEGMENT_TEXT_SELECTOR,
    DIRECT_TRANSCRIPT_RULE,
    DESCRIPTION_EXPANDER_RULE,
    MORE_ACTIONS_RULE,
    MENU_TRANSCRIPT_RULE,
)
from .utils import normalize_text, poll_until

DISMISS_MENU_JS = "() => document.body && document.body.click()"


async def control_label(handle, sources) -> str:
    """Joins the label sources of a control ("text" is its textContent), lower-cased."""
    parts = []
    for source in sources:
        if source == "text":
            value = await handle.text_content()
        else:
            value = await handle.get_attribute(source)
        if value:
            parts.append(value)
    return " | ".join(parts).lower()


async def is_clickable(handle) -> bool:
    """Ignore hidden/disabled controls."""
    if await handle.is_disabled():
        return False
    box = await handle.bounding_box()
    return bool(box) and box["width"] > 0 and box["height"] > 0


async def find_control(page, rule: ControlRule):
    """Returns the first element matching `rule`, or None."""
    for selector in rule.selectors:
        try:
            if rule.first_only:
                first = await page.query_selector(selector)
                handles = [first] if first else []
            else:
                handles = await page.query_selector_all(selector)
        except Exception as e:
            logging.debug(f"[Panel] Lookup failed for {selector}: {e}")
            continue

        for handle in handles:
            try:
                if rule.require_visible and not await is_clickable(handle):
                    continue
                label = await control_label(handle, rule.label_sources)
            except Exception as e:
                logging.debug(f"[Panel] Could not inspect control: {e}")
                continue
            if any(keyword in label for keyword in rule.keywords):
                return handle
    return None


class PanelReader:
    """Reads transcript lines from the transcript panel as currently rendered."""

    def __init__(self, page):
        self.page = page

    async def read(self) -> Optional[List[str]]:
        try:
            handles = await self.page.query_selector_all(SEGMENT_TEXT_SELECTOR)
        except Exception as e:
            logging.debug(f"[Panel] Segment lookup failed: {e}")
            return None

        lines = []
        for handle in handles:
            try:
                text = (await handle.text_content() or "").strip()
            except Exception:
                continue
            if text:
                lines.append(text)
        return lines or None

    async def read_text(self) -> Optional[str]:
        lines = await self.read()
        if not lines:
            return None
        return normalize_text("\n".join(lines)) or None


class PanelUnlocker:
    """
    Drives the watch page until the transcript panel is open.

    Ladder, stopping at the first success:
      1. panel already rendered
      2. visible "Show transcript" control
      3. expand the description, then (2) again
      4. overflow menu -> "Show transcript" entry
    Every click is followed by a short settle delay so YouTube's own render
    cycle can catch up before the next check.
    """

    def __init__(
        self,
        page,
        page_settle: float = PAGE_SETTLE_MS / 1000,
        click_settle: float = CLICK_SETTLE_MS / 1000,
        wait_interval: float = PANEL_WAIT_INTERVAL_MS / 1000,
        wait_attempts: int = PANEL_WAIT_ATTEMPTS,
    ):
        self.page = page
        self.page_settle = page_settle
        self.click_settle = click_settle
        self.wait_interval = wait_interval
        self.wait_attempts = wait_attempts

    async def open(self) -> bool:
        if await self.segments_present():
            return True

        # Give the page a moment to settle (YouTube SPA races are real)
        await asyncio.sleep(self.page_settle)

        if await self.click_show_transcript_direct():
            logging.info("[Panel] Clicked transcript control")
            return await self.wait_for_segments()

        # Some layouts only reveal the transcript entry after expanding
        if await self.expand_description():
            logging.info("[Panel] Expanded description")
        if await self.click_show_transcript_direct():
            logging.info("[Panel] Clicked transcript control after expanding")
            return await self.wait_for_segments()

        if await self.click_show_transcript_from_menu():
            logging.info("[Panel] Opened transcript from overflow menu")
            return await self.wait_for_segments()

        logging.info("[Panel] Could not open transcript panel")
        return False

    async def segments_present(self) -> bool:
        try:
            return await self.page.query_selector(SEGMENT_SELECTOR) is not None
        except Exception:
            return False

    async def wait_for_segments(self) -> bool:
        return await poll_until(self.segments_present, self.wait_interval, self.wait_attempts)

    async def click_show_transcript_direct(self) -> bool:
        control = await find_control(self.page, DIRECT_TRANSCRIPT_RULE)
        if control is None:
            return False
        return await self._click(control)

    async def expand_description(self) -> bool:
        control = await find_control(self.page, DESCRIPTION_EXPANDER_RULE)
        if control is None:
            return False
        return await self._click(control, settle=self.page_settle)

    async def click_show_transcript_from_menu(self) -> bool:
        menu_button = await find_control(self.page, MORE_ACTIONS_RULE)
        if menu_button is None or not await self._click(menu_button):
            return False

        # Menu items only exist once the menu popup rendered
        item = await find_control(self.page, MENU_TRANSCRIPT_RULE)
        if item is not None and await self._click(item):
            return True

        await self.dismiss_menu()
        return False

    async def dismiss_menu(self) -> None:
        try:
            await self.page.evaluate(DISMISS_MENU_JS)
        except Exception as e:
            logging.debug(f"[Panel] Could not dismiss menu: {e}")

    async def _click(self, handle, settle: Optional[float] = None) -> bool:
        try:
            # DOM-level click, menu items are not always "visible" to Playwright
            await handle.dispatch_event("click")
        except Exception as e:
            logging.debug(f"[Panel] Click failed: {e}")
            return False
        await asyncio.sleep(self.click_settle if settle is None else settle)
        return True
