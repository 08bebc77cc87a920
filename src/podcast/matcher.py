"""Association between feed episodes and files already on the media server.

The media server keeps no per-episode external key, so an upload is
recognised by its title plus a loose match on the show's author/title,
which were written into the file's artist/album tags at upload time.
"""

from typing import Iterable

from ..media.models import RemoteFile
from .feed_parser import EpisodeRecord, ShowMetadata

# Length of the author/title prefix used for the substring match
PREFIX_LENGTH = 10


def _norm(value: str | None) -> str:
    return (value or "").lower().strip()


def belongs_to_show(remote_file: RemoteFile, show: ShowMetadata) -> bool:
    """Whether a remote file's artist/album tags point at this show.

    Matches when the artist equals the show author, the album equals the
    show title, or either contains the first ten characters of its
    counterpart. Empty show fields never match.
    """
    author = _norm(show.author)
    title = _norm(show.title)
    artist = _norm(remote_file.artist)
    album = _norm(remote_file.album)

    if author and (artist == author or author[:PREFIX_LENGTH] in artist):
        return True
    if title and (album == title or title[:PREFIX_LENGTH] in album):
        return True
    return False


class EpisodeMatcher:
    """Detects episodes that were uploaded by an earlier run."""

    def exists_remotely(
        self,
        episode: EpisodeRecord,
        show: ShowMetadata,
        remote_files: Iterable[RemoteFile],
    ) -> bool:
        """True if some remote file has the episode's title and belongs to its show."""
        episode_title = _norm(episode.title)
        if not episode_title or not (_norm(show.author) or _norm(show.title)):
            return False

        return any(
            _norm(remote_file.title) == episode_title and belongs_to_show(remote_file, show)
            for remote_file in remote_files
        )

    def files_for_show(
        self, show: ShowMetadata, remote_files: Iterable[RemoteFile]
    ) -> list[RemoteFile]:
        """All remote files associated with a show, regardless of title."""
        return [f for f in remote_files if belongs_to_show(f, show)]
