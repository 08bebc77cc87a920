"""Client for the media server (AzuraCast-style) station API."""

import base64
import logging
import os
from typing import Any, Optional

import requests

from ..errors import MediaServerError
from .models import Playlist, RemoteFile, decode_media_ids

logger = logging.getLogger(__name__)


class MediaServerClient:
    """Thin wrapper over the station file, art and playlist endpoints.

    Every call authenticates with the ``X-API-Key`` header and raises
    MediaServerError on a non-success status, a connection error or a
    timeout.

    Example:
        client = MediaServerClient("radio.example.com", "1", api_key)
        files = client.list_files()
    """

    DEFAULT_TIMEOUT = 60

    def __init__(
        self,
        host: str,
        station_id: str,
        api_key: str,
        timeout: int = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the media server client.

        Args:
            host: Media server host name, without scheme.
            station_id: Station the uploader manages.
            api_key: API key sent with every request.
            timeout: Request timeout in seconds.
            session: Optional requests session to reuse.
        """
        self.base_url = f"https://{host}/api"
        self.station_id = str(station_id)
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "X-API-Key": api_key,
            "Accept": "application/json",
        })

    @property
    def station_path(self) -> str:
        return f"/station/{self.station_id}"

    def _request(
        self,
        method: str,
        endpoint: str,
        payload: Optional[dict] = None,
        files: Optional[dict] = None,
    ) -> Any:
        """Send a request and decode the JSON body.

        Args:
            method: HTTP method.
            endpoint: Path below the API base URL.
            payload: JSON body, if any.
            files: Multipart files, if any.

        Returns:
            Decoded JSON, or an empty dict for an empty or non-JSON success body.

        Raises:
            MediaServerError: If the request fails or returns a non-2xx status.
        """
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.request(
                method,
                url,
                json=payload,
                files=files,
                timeout=self.timeout,
            )
        except requests.Timeout:
            raise MediaServerError(method, endpoint, detail="request timeout")
        except requests.RequestException as e:
            raise MediaServerError(method, endpoint, detail=str(e))

        if not 200 <= response.status_code < 300:
            raise MediaServerError(method, endpoint, response.status_code, response.text)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            # Some endpoints answer success with a non-JSON body
            return {}

    def list_files(self) -> list[RemoteFile]:
        """List every file stored for the station."""
        data = self._request("GET", f"{self.station_path}/files")
        if not isinstance(data, list):
            logger.warning(f"Unexpected file listing response: {type(data).__name__}")
            return []
        return [RemoteFile.from_api(item) for item in data if isinstance(item, dict)]

    def get_file(self, file_id: str) -> RemoteFile:
        data = self._request("GET", f"{self.station_path}/file/{file_id}")
        return RemoteFile.from_api(data if isinstance(data, dict) else {"id": file_id})

    def create_file(self, path: str, content: bytes) -> Optional[str]:
        """Upload a binary asset.

        Args:
            path: Destination file name on the server.
            content: Raw file bytes, sent base64 encoded.

        Returns:
            The new file's id, or None if the server did not return one.
        """
        data = self._request(
            "POST",
            f"{self.station_path}/files",
            payload={
                "path": path,
                "file": base64.b64encode(content).decode("ascii"),
            },
        )
        file_id = data.get("id") if isinstance(data, dict) else None
        return str(file_id) if file_id not in (None, "") else None

    def update_file(self, file_id: str, **fields: Any) -> Any:
        """Update metadata or playlist fields of a file."""
        return self._request("PUT", f"{self.station_path}/file/{file_id}", payload=fields)

    def set_playlists(self, file_id: str, playlist_ids: list[str]) -> Any:
        """Replace a file's playlist membership. An empty list unassigns it everywhere."""
        return self.update_file(file_id, playlists=[str(pid) for pid in playlist_ids])

    def delete_file(self, file_id: str) -> Any:
        return self._request("DELETE", f"{self.station_path}/file/{file_id}")

    def upload_artwork(self, file_id: str, image_path: str) -> None:
        """Attach album art to a file as a multipart upload."""
        with open(image_path, "rb") as f:
            self._request(
                "POST",
                f"{self.station_path}/art/{file_id}",
                files={"art": (os.path.basename(image_path), f, "image/jpeg")},
            )

    def list_playlists(self) -> list[Playlist]:
        data = self._request("GET", f"{self.station_path}/playlists")
        if not isinstance(data, list):
            return []
        return [Playlist.from_api(item) for item in data if isinstance(item, dict)]

    def get_playlist_media_ids(self, playlist_id: str) -> list[int]:
        """Media ids in a playlist's play order."""
        data = self._request("GET", f"{self.station_path}/playlist/{playlist_id}/order")
        logger.debug(f"Raw playlist order for playlist {playlist_id}: {data}")
        return decode_media_ids(data)

    def close(self):
        """Close the underlying HTTP session."""
        self._session.close()
