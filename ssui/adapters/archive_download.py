"""HTTP adapter implementing ``ArchiveSourcePort``.

Downloads a complete archive into memory within one overall deadline and
maps each kind of failure to its own pipeline error.

Dependencies:
    - ``DownloadSession``/``HttpConfig`` for the shared HTTP policy.

Call context:
    - Invoked by ``ssui/usecases/install_updater.py`` in the acquiring state.
"""

from __future__ import annotations

import time
from typing import Callable, List, Optional
from urllib.parse import urlsplit

import requests
from requests import exceptions as req_exc

from ssui.adapters.http_client import DownloadSession, HttpConfig
from ssui.domain.errors import HTTPStatusError, InvalidURLError, NetworkError, ReadError
from ssui.domain.install_models import ArchivePayload
from ssui.domain.ports import ArchiveSourcePort
from ssui.utils.reporting import PipelineReporter

_ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: str) -> str:
    """Return ``url`` stripped, or raise ``InvalidURLError`` if not absolute.

    Raises:
        InvalidURLError: Missing/unsupported scheme, missing host, or a value
            ``urlsplit`` cannot parse.
    """
    text = str(url or "").strip()
    if not text:
        raise InvalidURLError(text, "URL is empty.")
    try:
        parts = urlsplit(text)
        _ = parts.port  # raises ValueError for malformed ports
    except ValueError as exc:
        raise InvalidURLError(text, str(exc)) from exc
    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise InvalidURLError(text, "Expected an absolute http(s) URL.")
    if not parts.hostname:
        raise InvalidURLError(text, "URL has no host.")
    return text


class ArchiveDownloader(ArchiveSourcePort):
    """Fetch archives with a bounded total download time."""

    def __init__(
        self,
        session: Optional[DownloadSession] = None,
        *,
        cfg: Optional[HttpConfig] = None,
        reporter: Optional[PipelineReporter] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cfg = cfg or (session.cfg if session is not None else HttpConfig())
        self.session = session or DownloadSession(self.cfg)
        self.reporter = reporter or PipelineReporter()
        self._clock = clock

    def fetch(self, url: str) -> ArchivePayload:
        """Download ``url`` and return the full body.

        Raises:
            InvalidURLError: ``url`` is malformed; no request is sent.
            NetworkError: Connection failure or deadline exceeded.
            HTTPStatusError: Response status other than 200.
            ReadError: Body could not be read completely.
        """
        target = validate_url(url)
        self.reporter.progress("Validated download URL: %s", target)

        deadline = self._clock() + float(self.cfg.download_timeout_s)
        try:
            resp = self.session.get(target, timeout=self.cfg.download_timeout_s, stream=True)
        except (req_exc.InvalidURL, req_exc.MissingSchema, req_exc.InvalidSchema) as exc:
            raise InvalidURLError(target, str(exc)) from exc
        except req_exc.Timeout as exc:
            raise NetworkError(
                target, f"deadline of {self.cfg.download_timeout_s:g}s exceeded"
            ) from exc
        except req_exc.RequestException as exc:
            raise NetworkError(target, str(exc)) from exc

        try:
            if resp.status_code != 200:
                raise HTTPStatusError(target, resp.status_code, getattr(resp, "reason", "") or "")
            self.reporter.progress("Received HTTP status: %s", resp.status_code)
            data = self._read_body(resp, target, deadline)
        finally:
            resp.close()

        self.reporter.progress("Read %d bytes from %s", len(data), target)
        return ArchivePayload.from_bytes(data)

    def _read_body(self, resp: requests.Response, url: str, deadline: float) -> bytes:
        chunks: List[bytes] = []
        try:
            for chunk in resp.iter_content(chunk_size=self.cfg.chunk_size):
                if self._clock() > deadline:
                    raise NetworkError(
                        url, f"deadline of {self.cfg.download_timeout_s:g}s exceeded"
                    )
                if chunk:
                    chunks.append(chunk)
        except req_exc.Timeout as exc:
            raise NetworkError(
                url, f"deadline of {self.cfg.download_timeout_s:g}s exceeded"
            ) from exc
        except (req_exc.RequestException, OSError) as exc:
            raise ReadError(url, str(exc)) from exc
        return b"".join(chunks)


__all__ = ["ArchiveDownloader", "validate_url"]
