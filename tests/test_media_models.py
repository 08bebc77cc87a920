"""Tests for media server response models."""

from datetime import datetime, timezone

import pytest

from src.media.models import (
    MediaRef,
    Playlist,
    RefKind,
    RemoteFile,
    decode_media_ids,
    decode_ref,
)


class TestDecodeRef:
    """Tests for classifying id list elements."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (42, MediaRef(RefKind.NUMBER, 42)),
            ("42", MediaRef(RefKind.NUMERIC_STRING, 42)),
            ({"id": 42}, MediaRef(RefKind.OBJECT_ID, 42)),
            ({"id": "42"}, MediaRef(RefKind.OBJECT_ID, 42)),
            ({"media_id": 42}, MediaRef(RefKind.OBJECT_MEDIA_ID, 42)),
            ("abc", MediaRef(RefKind.UNRECOGNIZED)),
            (None, MediaRef(RefKind.UNRECOGNIZED)),
            ({"name": "x"}, MediaRef(RefKind.UNRECOGNIZED)),
            ([1], MediaRef(RefKind.UNRECOGNIZED)),
        ],
    )
    def test_decode_ref(self, raw, expected):
        assert decode_ref(raw) == expected

    def test_id_preferred_over_media_id(self):
        """Test an object with both keys decodes through ``id``."""
        assert decode_ref({"id": 1, "media_id": 2}) == MediaRef(RefKind.OBJECT_ID, 1)

    def test_bool_is_not_a_number(self):
        assert decode_ref(True).kind is RefKind.UNRECOGNIZED


class TestDecodeMediaIds:
    """Tests for decoding playlist order responses."""

    def test_mixed_shapes(self):
        """Test every supported element shape in one list."""
        payload = [1, "2", {"id": 3}, {"media_id": "4"}, "junk", None]

        assert decode_media_ids(payload) == [1, 2, 3, 4]

    def test_non_positive_ids_dropped(self):
        assert decode_media_ids([0, -5, "0", 7]) == [7]

    @pytest.mark.parametrize("payload", [None, {}, {"items": [1]}, "1,2"])
    def test_non_list_payload(self, payload):
        """Test a non-list payload yields an empty list."""
        assert decode_media_ids(payload) == []


class TestRemoteFile:
    """Tests for RemoteFile."""

    def test_from_api(self):
        """Test building a RemoteFile from a listing element."""
        data = {
            "id": 17,
            "title": "Episode 1",
            "artist": "John Doe",
            "album": "Test Podcast",
            "uploaded_at": 1700000000,
            "playlists": [{"id": 3, "name": "Podcasts"}, "5", 8],
        }

        remote = RemoteFile.from_api(data)

        assert remote.id == "17"
        assert remote.title == "Episode 1"
        assert remote.artist == "John Doe"
        assert remote.album == "Test Podcast"
        assert remote.uploaded_at == 1700000000
        assert remote.playlists == frozenset({"3", "5", "8"})

    def test_from_api_missing_fields(self):
        """Test missing and null fields fall back to empty values."""
        remote = RemoteFile.from_api({"id": 1, "title": None, "playlists": None})

        assert remote.title == ""
        assert remote.artist == ""
        assert remote.uploaded_at is None
        assert remote.playlists == frozenset()

    def test_in_playlist_accepts_int_or_str(self):
        remote = RemoteFile(id="1", playlists=frozenset({"3"}))

        assert remote.in_playlist("3")
        assert remote.in_playlist(3)
        assert not remote.in_playlist("4")

    def test_age_days(self):
        """Test age is whole days since upload."""
        now = datetime(2024, 1, 11, 12, 0, tzinfo=timezone.utc)
        uploaded = int(datetime(2024, 1, 1, 13, 0, tzinfo=timezone.utc).timestamp())

        assert RemoteFile(id="1", uploaded_at=uploaded).age_days(now) == 9

    def test_age_days_without_timestamp(self):
        assert RemoteFile(id="1").age_days() == 0


class TestPlaylist:
    """Tests for Playlist."""

    def test_from_api(self):
        playlist = Playlist.from_api(
            {"id": 3, "name": "Podcasts", "source": "songs", "order": "sequential"}
        )

        assert playlist.id == "3"
        assert playlist.name == "Podcasts"
        assert playlist.accepts_manual_assignment

    def test_remote_url_playlist_rejects_assignment(self):
        playlist = Playlist.from_api({"id": 4, "source": "remote_url"})

        assert not playlist.accepts_manual_assignment
