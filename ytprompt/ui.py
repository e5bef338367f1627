# ytprompt/ui.py
# Small page-side helpers: prompt text, toast notices, clipboard.
import logging
from dataclasses import dataclass

from .config import TOAST_DURATION_MS
from .lookups import TOAST_CLASS

UNKNOWN_TITLE = "Unknown title"
UNKNOWN_CHANNEL = "Unknown channel"

NO_TRANSCRIPT_MESSAGE = "No transcript found for this video"
COPIED_MESSAGE = "Prompt + transcript copied"
COPY_FAILED_MESSAGE = "Copy failed"

PROMPT_INSTRUCTIONS = [
    "Please summarise this YouTube transcript.",
    "Give me:",
    "- a 6-10 bullet summary",
    "- key takeaways",
    "- any actionable items",
    "",
    "Transcript:",
    "",
]

PROMPT_MODES = ("prompt", "transcript")


@dataclass(frozen=True)
class PromptContext:
    title: str = UNKNOWN_TITLE
    channel: str = UNKNOWN_CHANNEL
    url: str = ""


def build_context_header(context: PromptContext) -> str:
    return "\n".join([
        f"Title: {context.title}",
        f"Channel: {context.channel}",
        f"URL: {context.url}",
        "",
    ])


def build_prompt(context: PromptContext, transcript: str, mode: str = "prompt") -> str:
    """mode="transcript" leaves out the summary instructions."""
    if mode not in PROMPT_MODES:
        raise ValueError(f"Unknown prompt mode: {mode}")
    header = build_context_header(context)
    if mode == "transcript":
        return header + transcript
    return header + "\n".join(PROMPT_INSTRUCTIONS + [transcript])


SHOW_TOAST_JS = """([message, className, duration]) => {
    const existing = document.querySelector('.' + className);
    if (existing) existing.remove();

    const el = document.createElement('div');
    el.className = className;
    el.textContent = message;
    document.documentElement.appendChild(el);

    setTimeout(() => el.remove(), duration);
}"""

# Modern clipboard API first, then a temporary textarea
COPY_TO_CLIPBOARD_JS = """async (text) => {
    try {
        await navigator.clipboard.writeText(text);
        return true;
    } catch (e) {
        try {
            const ta = document.createElement('textarea');
            ta.value = text;
            ta.setAttribute('readonly', '');
            ta.style.position = 'fixed';
            ta.style.top = '-1000px';
            ta.style.left = '-1000px';
            document.body.appendChild(ta);
            ta.select();
            const ok = document.execCommand('copy');
            ta.remove();
            return ok;
        } catch (err) {
            return false;
        }
    }
}"""


async def show_toast(page, message: str, duration_ms: int = TOAST_DURATION_MS) -> None:
    try:
        await page.evaluate(SHOW_TOAST_JS, [message, TOAST_CLASS, duration_ms])
    except Exception as e:
        logging.warning(f"[UI] Could not show toast '{message}': {e}")


async def copy_to_clipboard(page, text: str) -> bool:
    try:
        return bool(await page.evaluate(COPY_TO_CLIPBOARD_JS, text))
    except Exception as e:
        logging.warning(f"[UI] Clipboard write failed: {e}")
        return False
