"""Data classes for media server API responses."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class RefKind(Enum):
    """Shapes a media or playlist reference can take in an API response."""

    NUMBER = "number"
    NUMERIC_STRING = "numeric_string"
    OBJECT_ID = "object_id"  # {"id": ...}
    OBJECT_MEDIA_ID = "object_media_id"  # {"media_id": ...}
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class MediaRef:
    """A decoded reference; ``value`` is None when the raw element was unusable."""

    kind: RefKind
    value: int | None = None


def _to_int(raw: Any) -> int | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    if isinstance(raw, str):
        try:
            return int(raw.strip())
        except ValueError:
            return None
    return None


def decode_ref(raw: Any) -> MediaRef:
    """Classify one element of an id list before extracting its value."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return MediaRef(RefKind.NUMBER, _to_int(raw))
    if isinstance(raw, str):
        value = _to_int(raw)
        if value is None:
            return MediaRef(RefKind.UNRECOGNIZED)
        return MediaRef(RefKind.NUMERIC_STRING, value)
    if isinstance(raw, dict):
        if raw.get("id") not in (None, ""):
            return MediaRef(RefKind.OBJECT_ID, _to_int(raw["id"]))
        if raw.get("media_id") not in (None, ""):
            return MediaRef(RefKind.OBJECT_MEDIA_ID, _to_int(raw["media_id"]))
    return MediaRef(RefKind.UNRECOGNIZED)


def decode_media_ids(payload: Any) -> list[int]:
    """Extract positive media ids from a playlist order response.

    Non-list payloads and elements that do not decode to a positive id
    are ignored.
    """
    if not isinstance(payload, list):
        return []
    ids = []
    for raw in payload:
        ref = decode_ref(raw)
        if ref.value is not None and ref.value > 0:
            ids.append(ref.value)
    return ids


@dataclass
class RemoteFile:
    """Point-in-time snapshot of a file stored on the media server."""

    id: str
    title: str = ""
    artist: str = ""
    album: str = ""
    uploaded_at: int | None = None  # Unix seconds
    playlists: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_api(cls, data: dict) -> "RemoteFile":
        """Build a RemoteFile from one element of the file listing."""
        membership = set()
        for raw in data.get("playlists") or []:
            ref = decode_ref(raw)
            if ref.value is not None:
                membership.add(str(ref.value))

        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            artist=data.get("artist") or "",
            album=data.get("album") or "",
            uploaded_at=_to_int(data.get("uploaded_at")) or None,
            playlists=frozenset(membership),
        )

    def in_playlist(self, playlist_id: str) -> bool:
        return str(playlist_id) in self.playlists

    def age_days(self, now: datetime | None = None) -> int:
        """Whole days since upload; 0 when the upload time is unknown."""
        if not self.uploaded_at:
            return 0
        now = now or datetime.now(timezone.utc)
        return int((now.timestamp() - self.uploaded_at) // 86400)


@dataclass
class Playlist:
    """Playlist summary from the station playlist listing."""

    id: str
    name: str = ""
    source: str = ""
    order: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Playlist":
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            source=data.get("source") or "",
            order=data.get("order") or "",
        )

    @property
    def accepts_manual_assignment(self) -> bool:
        return self.source == "songs"
