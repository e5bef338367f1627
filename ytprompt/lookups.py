# ytprompt/lookups.py
"""
Lookup tables for the YouTube watch page.

Every lookup is an ordered table tried top to bottom, first match wins.
Layout and locale variants are added here, not in the code that uses them.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class FieldLookup:
    """Where to find a piece of metadata and how to read it ("text" or an attribute name)."""
    selector: str
    extractor: str = "text"


@dataclass(frozen=True)
class ControlRule:
    """
    How to find a clickable control by its label.

    label_sources: attributes joined into the label, "text" means textContent.
    keywords: lower-case fragments, any one of them matching is enough.
    first_only: only look at the first element for each selector.
    require_visible: skip disabled and zero-area controls.
    """
    selectors: Tuple[str, ...]
    label_sources: Tuple[str, ...]
    keywords: Tuple[str, ...]
    first_only: bool = False
    require_visible: bool = False


# The injected control
CONTROL_WRAP_CLASS = "yt-tc-wrap"
CONTROL_BUTTON_CLASS = "yt-tc-btn"
CONTROL_SELECTOR = f".{CONTROL_WRAP_CLASS}"
TOAST_CLASS = "yt-tc-toast"

# Insertion anchors, best first: the action bar row (Like/Share/etc)
ANCHOR_SELECTORS = (
    "ytd-watch-metadata #top-level-buttons-computed",
    "ytd-watch-metadata #actions",
    "ytd-watch-metadata",
)

# Transcript panel
SEGMENT_SELECTOR = "ytd-transcript-segment-renderer"
SEGMENT_TEXT_SELECTOR = (
    "ytd-transcript-segment-renderer #segment-text, "
    "ytd-transcript-segment-renderer .segment-text"
)

TRANSCRIPT_KEYWORDS = (
    "show transcript",
    "open transcript",
    "transcript",
    "afficher la transcription",
    "transcription",
)

# Visible "Show transcript" control, no menus involved
DIRECT_TRANSCRIPT_RULE = ControlRule(
    selectors=("button, tp-yt-paper-button, yt-button-shape button",),
    label_sources=("aria-label", "title", "text"),
    keywords=TRANSCRIPT_KEYWORDS,
    require_visible=True,
)

# Description "Show more" expanders
DESCRIPTION_EXPANDER_RULE = ControlRule(
    selectors=(
        "ytd-watch-metadata ytd-text-inline-expander #expand",
        "ytd-watch-metadata ytd-text-inline-expander tp-yt-paper-button#expand",
        "ytd-watch-metadata button[aria-label]",
    ),
    label_sources=("aria-label", "text"),
    keywords=("show more", "plus", "more"),
    first_only=True,
)

# Overflow ("three dots") menu buttons
MORE_ACTIONS_RULE = ControlRule(
    selectors=(
        "ytd-watch-metadata ytd-menu-renderer yt-icon-button",
        'ytd-watch-metadata button[aria-label*="More"]',
        'ytd-watch-metadata button[aria-label*="Plus"]',
    ),
    label_sources=("aria-label", "title"),
    keywords=("more actions", "more", "plus", "actions"),
)

# Entries inside the opened overflow menu
MENU_TRANSCRIPT_RULE = ControlRule(
    selectors=(
        "tp-yt-paper-item, ytd-menu-service-item-renderer, ytd-menu-navigation-item-renderer",
    ),
    label_sources=("text",),
    keywords=(
        "show transcript",
        "transcript",
        "afficher la transcription",
        "transcription",
    ),
)

# Prompt context metadata
TITLE_LOOKUPS = (
    FieldLookup("ytd-watch-metadata h1 yt-formatted-string"),
    FieldLookup("h1.title yt-formatted-string"),
    FieldLookup('meta[name="title"]', "content"),
)

CHANNEL_LOOKUPS = (
    FieldLookup("#owner ytd-channel-name a"),
    FieldLookup("ytd-video-owner-renderer ytd-channel-name a"),
    FieldLookup("ytd-video-owner-renderer a.yt-simple-endpoint"),
    FieldLookup('meta[itemprop="author"]', "content"),
)
