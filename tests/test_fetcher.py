"""
Tests for download-if-absent behaviour and partial-file cleanup.
"""

import pytest

from afrobarometer.config import ROUND_SOURCES
from afrobarometer.core.errors import DownloadError
from afrobarometer.core.fetcher import download_file, fetch_round_files

from conftest import FakeResponse, FakeSession

URL = "http://example.org/data/file.sav"


class TestDownloadFile:

    def test_skips_existing_file(self, tmp_path):
        dest = tmp_path / "file.sav"
        dest.write_bytes(b"cached")
        session = FakeSession()

        result = download_file(URL, dest, session=session)

        assert result.downloaded is False
        assert session.calls == []
        assert dest.read_bytes() == b"cached"

    def test_downloads_full_body(self, tmp_path):
        dest = tmp_path / "sub" / "file.sav"
        session = FakeSession({URL: FakeResponse(chunks=[b"abc", b"", b"def"])})

        result = download_file(URL, dest, session=session)

        assert result.downloaded is True
        assert dest.read_bytes() == b"abcdef"
        assert list(dest.parent.glob("*.part")) == []

    def test_http_error_leaves_nothing(self, tmp_path):
        dest = tmp_path / "file.sav"
        with pytest.raises(DownloadError, match="example.org"):
            download_file(URL, dest, session=FakeSession())
        assert not dest.exists()
        assert list(tmp_path.iterdir()) == []

    def test_interrupted_stream_removes_partial(self, tmp_path):
        dest = tmp_path / "file.sav"
        session = FakeSession({URL: FakeResponse(chunks=[b"abc", b"def"], fail_after=1)})
        with pytest.raises(DownloadError):
            download_file(URL, dest, session=session)
        assert not dest.exists()
        assert list(tmp_path.iterdir()) == []

    def test_download_error_is_ioerror(self, tmp_path):
        with pytest.raises(IOError):
            download_file(URL, tmp_path / "x", session=FakeSession())


class TestFetchRoundFiles:

    def test_fetches_codebook_and_questionnaire(self, data_dir):
        src = ROUND_SOURCES[2]
        session = FakeSession({
            src.codebook_url: FakeResponse(chunks=[b"%PDF"]),
            src.questionnaire_url: FakeResponse(chunks=[b"sav"]),
        })

        path = fetch_round_files(2, data_dir, session=session)

        assert path == data_dir.questionnaire_path(2)
        assert path.read_bytes() == b"sav"
        assert data_dir.codebook_path(2).read_bytes() == b"%PDF"
        assert session.calls == [src.codebook_url, src.questionnaire_url]

    def test_failure_carries_round_and_stage(self, data_dir):
        with pytest.raises(DownloadError) as info:
            fetch_round_files(5, data_dir, session=FakeSession())
        assert info.value.round == 5
        assert info.value.stage == "download"
        assert str(info.value).startswith("[round 5/download]")
