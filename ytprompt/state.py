# ytprompt/state.py
from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class SessionState:
    """Snapshot of what the current page load has seen and injected."""
    last_seen_video_id: Optional[str] = None
    injected_for_video_id: Optional[str] = None

    def saw(self, video_id: str) -> "SessionState":
        # A new video invalidates any earlier injection
        return replace(self, last_seen_video_id=video_id, injected_for_video_id=None)

    def injected(self, video_id: str) -> "SessionState":
        return replace(self, injected_for_video_id=video_id)


class SessionContext:
    """Holds the current SessionState for one page load."""

    def __init__(self, state: Optional[SessionState] = None):
        self.state = state or SessionState()

    def reset(self) -> SessionState:
        self.state = SessionState()
        return self.state
