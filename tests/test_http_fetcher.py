import pytest
import requests

from audo_level.domain.errors import AudioFetchError
from audo_level.infrastructure.http_fetcher import RequestsAudioFetcher


class FakeResponse:
    def __init__(self, content: bytes = b"", status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.response


def test_fetches_http_with_timeout() -> None:
    session = FakeSession(FakeResponse(b"RIFF"))
    fetcher = RequestsAudioFetcher(timeout_seconds=5, session=session)

    assert fetcher.fetch("https://cdn.example/track.mp3") == b"RIFF"
    assert session.calls == [("https://cdn.example/track.mp3", 5.0)]


def test_http_status_error_becomes_fetch_error() -> None:
    fetcher = RequestsAudioFetcher(session=FakeSession(FakeResponse(b"", status_code=404)))

    with pytest.raises(AudioFetchError) as excinfo:
        fetcher.fetch("https://cdn.example/missing.mp3")

    assert excinfo.value.code == "fetch_failed"
    assert isinstance(excinfo.value.__cause__, requests.HTTPError)


def test_connection_error_becomes_fetch_error() -> None:
    fetcher = RequestsAudioFetcher(session=FakeSession(error=requests.ConnectionError("refused")))

    with pytest.raises(AudioFetchError, match="refused"):
        fetcher.fetch("http://localhost:1/track.wav")


def test_empty_body_is_rejected() -> None:
    fetcher = RequestsAudioFetcher(session=FakeSession(FakeResponse(b"")))

    with pytest.raises(AudioFetchError) as excinfo:
        fetcher.fetch("https://cdn.example/empty.wav")

    assert excinfo.value.code == "empty_response"


def test_reads_local_paths_and_file_urls(tmp_path) -> None:
    path = tmp_path / "track.wav"
    path.write_bytes(b"local-audio")
    fetcher = RequestsAudioFetcher(session=FakeSession())

    assert fetcher.fetch(str(path)) == b"local-audio"
    assert fetcher.fetch(path.as_uri()) == b"local-audio"


def test_missing_file_is_unreadable(tmp_path) -> None:
    fetcher = RequestsAudioFetcher(session=FakeSession())

    with pytest.raises(AudioFetchError) as excinfo:
        fetcher.fetch(str(tmp_path / "missing.wav"))

    assert excinfo.value.code == "file_unreadable"


def test_unsupported_scheme_is_rejected() -> None:
    fetcher = RequestsAudioFetcher(session=FakeSession())

    with pytest.raises(AudioFetchError) as excinfo:
        fetcher.fetch("ftp://example.com/track.wav")

    assert excinfo.value.code == "unsupported_scheme"
