"""Exceptions raised by the podcast uploader."""


class UploaderError(Exception):
    """Base exception for all uploader errors."""

    pass


class ConfigError(UploaderError):
    """Configuration is missing or invalid."""

    pass


class FeedFetchError(UploaderError):
    """A feed could not be retrieved."""

    pass


class DownloadError(UploaderError):
    """An episode asset or artwork could not be downloaded."""

    pass


class MediaServerError(UploaderError):
    """The media server API returned a failure."""

    def __init__(
        self,
        method: str,
        endpoint: str,
        status_code: int | None = None,
        detail: str = "",
    ):
        self.method = method
        self.endpoint = endpoint
        self.status_code = status_code
        self.detail = detail
        if status_code is None:
            message = f"API {method} {endpoint} failed: {detail}"
        else:
            message = f"API {method} {endpoint} failed: {status_code} - {detail}"
        super().__init__(message)


class UploadError(UploaderError):
    """The media server did not accept an uploaded asset."""

    pass


class IndexingTimeoutError(UploaderError):
    """An uploaded file never became queryable on the media server."""

    pass


class MetadataUpdateError(UploaderError):
    """Metadata could not be applied to an uploaded file."""

    pass
