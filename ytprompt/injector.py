# ytprompt/injector.py
import logging
from typing import Optional

from .config import INJECT_MAX_ATTEMPTS, INJECT_INTERVAL_MS
from .lookups import (
    ANCHOR_SELECTORS,
    CONTROL_SELECTOR,
    CONTROL_WRAP_CLASS,
    CONTROL_BUTTON_CLASS,
)
from .scraper import build_acquirer, read_prompt_context
from .state import SessionContext
from .ui import (
    COPIED_MESSAGE,
    COPY_FAILED_MESSAGE,
    NO_TRANSCRIPT_MESSAGE,
    build_prompt,
    copy_to_clipboard,
    show_toast,
)
from .utils import poll_until, video_id_from_location

CONTROL_BINDING = "__ytPromptCopy"
CONTROL_LABEL = "Copy prompt + transcript"
CONTROL_BUSY_LABEL = "Working…"

CONTROL_CSS = """
.yt-tc-wrap { display: inline-flex; align-items: center; margin-right: 8px; }
.yt-tc-btn {
  font: 500 14px Roboto, Arial, sans-serif; padding: 0 16px; height: 36px;
  border: none; border-radius: 18px; cursor: pointer;
  background: var(--yt-spec-badge-chip-background, #f2f2f2);
  color: var(--yt-spec-text-primary, #0f0f0f);
}
.yt-tc-btn:disabled { opacity: 0.6; cursor: progress; }
.yt-tc-toast {
  position: fixed; left: 50%; bottom: 32px; transform: translateX(-50%);
  z-index: 9999; padding: 10px 16px; border-radius: 8px;
  background: #0f0f0f; color: #fff; font: 14px Roboto, Arial, sans-serif;
}
"""

# Removes every stale control, then prepends a fresh one at the anchor.
# The button stays disabled while the Python side handles the click.
MOUNT_CONTROL_JS = """(anchor, [wrapClass, buttonClass, label, busyLabel, binding, css]) => {
    document.querySelectorAll('.' + wrapClass).forEach(el => el.remove());

    if (!document.getElementById('yt-tc-style')) {
        const style = document.createElement('style');
        style.id = 'yt-tc-style';
        style.textContent = css;
        document.documentElement.appendChild(style);
    }

    const wrap = document.createElement('div');
    wrap.className = wrapClass;

    const btn = document.createElement('button');
    btn.className = buttonClass;
    btn.type = 'button';
    btn.textContent = label;
    btn.addEventListener('click', async () => {
        if (btn.disabled) return;
        btn.disabled = true;
        btn.textContent = busyLabel;
        try {
            await window[binding]();
        } catch (e) {
            console.warn('[ytprompt] copy failed', e);
        } finally {
            btn.disabled = false;
            btn.textContent = label;
        }
    });

    wrap.appendChild(btn);
    anchor.prepend(wrap);
    return true;
}"""


class InjectionScheduler:
    """Keeps exactly one action control in the action bar of the current video."""

    def __init__(
        self,
        page,
        session: SessionContext,
        interval: float = INJECT_INTERVAL_MS / 1000,
        max_attempts: int = INJECT_MAX_ATTEMPTS,
    ):
        self.page = page
        self.session = session
        self.interval = interval
        self.max_attempts = max_attempts

    async def run(self, video_id: str) -> bool:
        """Attempt injection a few times because YouTube loads chunks late."""
        async def attempt() -> bool:
            if self.session.state.last_seen_video_id != video_id:
                # Navigated away, a newer loop owns the control now
                return True
            return await self.inject_once(video_id)

        done = await poll_until(attempt, self.interval, self.max_attempts)
        if not done:
            logging.warning(f"[Inject] Gave up on {video_id} after {self.max_attempts} attempts")
        return done

    async def repair(self, url: Optional[str]) -> bool:
        """Puts the control back if the page re-rendered it away. No-op otherwise."""
        video_id = video_id_from_location(url)
        if not video_id:
            return False
        return await self.inject_once(video_id)

    async def inject_once(self, video_id: str) -> bool:
        state = self.session.state
        if state.last_seen_video_id != video_id:
            return False
        if state.injected_for_video_id == video_id and await self.control_present():
            return True

        anchor = await self.find_anchor()
        if anchor is None:
            return False

        try:
            await anchor.evaluate(MOUNT_CONTROL_JS, [
                CONTROL_WRAP_CLASS,
                CONTROL_BUTTON_CLASS,
                CONTROL_LABEL,
                CONTROL_BUSY_LABEL,
                CONTROL_BINDING,
                CONTROL_CSS,
            ])
        except Exception as e:
            logging.warning(f"[Inject] Mount failed for {video_id}: {e}")
            return False

        if not await self.control_present():
            logging.debug(f"[Inject] Control not found after mount for {video_id}")
            return False

        # Never record a video the page has already moved away from
        if self.session.state.last_seen_video_id != video_id:
            return False
        self.session.state = self.session.state.injected(video_id)
        logging.info(f"[Inject] Control injected for {video_id}")
        return True

    async def control_present(self) -> bool:
        try:
            return await self.page.query_selector(CONTROL_SELECTOR) is not None
        except Exception:
            return False

    async def find_anchor(self):
        for selector in ANCHOR_SELECTORS:
            try:
                anchor = await self.page.query_selector(selector)
            except Exception as e:
                logging.debug(f"[Inject] Anchor lookup failed for {selector}: {e}")
                continue
            if anchor is not None:
                return anchor
        return None


class ControlHandler:
    """What a click on the control does: transcript -> prompt -> clipboard -> toast."""

    def __init__(self, page, mode: str = "prompt", acquirer_factory=build_acquirer):
        self.page = page
        self.mode = mode
        self.acquirer_factory = acquirer_factory

    async def on_click(self, source=None) -> bool:
        video_id = video_id_from_location(self.page.url)
        logging.info(f"[Click] Copy requested for {video_id}")
        try:
            transcript = await self.acquirer_factory(self.page, video_id).acquire()
            if not transcript:
                await show_toast(self.page, NO_TRANSCRIPT_MESSAGE)
                return False

            context = await read_prompt_context(self.page)
            ok = await copy_to_clipboard(self.page, build_prompt(context, transcript, self.mode))
        except Exception as e:
            logging.error(f"[Click] Copy failed for {video_id}: {e}", exc_info=True)
            ok = False

        await show_toast(self.page, COPIED_MESSAGE if ok else COPY_FAILED_MESSAGE)
        return ok
