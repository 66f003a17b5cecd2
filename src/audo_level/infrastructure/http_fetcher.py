"""Byte fetcher for HTTP(S) URLs, ``file://`` URLs and local paths."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from audo_level.domain.errors import AudioFetchError


class RequestsAudioFetcher:
    """Fetch encoded audio bytes with ``requests``."""

    def __init__(self, timeout_seconds: float = 30.0, session: requests.Session | None = None) -> None:
        self.timeout_seconds = float(timeout_seconds)
        self._session = session or requests.Session()

    def fetch(self, url: str) -> bytes:
        parsed = urlparse(url)
        if parsed.scheme in {"http", "https"}:
            return self._fetch_http(url)
        if parsed.scheme == "file":
            return _read_path(Path(unquote(parsed.path)))
        if parsed.scheme in {"", None} or len(parsed.scheme) == 1:
            # Plain paths, including Windows drive letters.
            return _read_path(Path(url))
        raise AudioFetchError("unsupported_scheme", f"Unsupported audio source scheme: {parsed.scheme!r}")

    def _fetch_http(self, url: str) -> bytes:
        try:
            response = self._session.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise AudioFetchError("fetch_failed", f"Fetch failed for {url}: {exc}") from exc

        if not response.content:
            raise AudioFetchError("empty_response", f"Fetch returned no audio bytes for {url}.")
        return response.content


def _read_path(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise AudioFetchError("file_unreadable", f"Audio file is unreadable: {path}") from exc
