# ytprompt/tracks.py
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence


@dataclass(frozen=True)
class CaptionTrack:
    language_code: str
    is_auto_generated: bool
    source_url: str
    name: str = ""


def _track_name(raw: Dict[str, Any]) -> str:
    name = raw.get("name")
    if isinstance(name, dict):
        if name.get("simpleText"):
            return name["simpleText"]
        runs = name.get("runs") or []
        return "".join(run.get("text", "") for run in runs if isinstance(run, dict))
    return name or ""


def tracks_from_player_response(player: Optional[Dict[str, Any]]) -> List[CaptionTrack]:
    """Reads captions.playerCaptionsTracklistRenderer.captionTracks into CaptionTracks."""
    if not isinstance(player, dict):
        return []
    renderer = (player.get("captions") or {}).get("playerCaptionsTracklistRenderer") or {}
    raw_tracks = renderer.get("captionTracks") or []
    if not isinstance(raw_tracks, list):
        return []

    tracks = []
    for raw in raw_tracks:
        if not isinstance(raw, dict):
            continue
        tracks.append(CaptionTrack(
            language_code=(raw.get("languageCode") or "").lower(),
            is_auto_generated=raw.get("kind") == "asr",
            source_url=raw.get("baseUrl") or "",
            name=_track_name(raw),
        ))
    return tracks


def select_caption_track(tracks: Sequence[CaptionTrack]) -> Optional[CaptionTrack]:
    """
    Picks the track to fetch. Prefers English (manual), then English (auto),
    then any manual track, then whatever comes first.
    """
    for track in tracks:
        if track.language_code == "en" and not track.is_auto_generated:
            return track

    for track in tracks:
        if track.language_code == "en":
            return track

    for track in tracks:
        if not track.is_auto_generated:
            return track

    return tracks[0] if tracks else None
