"""Media server integration.

Provides the station API client and the snapshot types it returns.
"""

from .client import MediaServerClient
from .models import MediaRef, Playlist, RefKind, RemoteFile, decode_media_ids, decode_ref

__all__ = [
    "MediaServerClient",
    "MediaRef",
    "Playlist",
    "RefKind",
    "RemoteFile",
    "decode_media_ids",
    "decode_ref",
]
