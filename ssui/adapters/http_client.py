"""Shared HTTP transport utilities for archive downloads.

This module provides a thin wrapper around ``requests.Session`` so the
downloader shares one timeout policy and header construction.

Dependencies:
    - ``requests`` for network I/O.

Call context:
    - Constructed by ``ssui/adapters/archive_download.py``.
    - Transport only: callers decide how to map status codes and transport
      exceptions into pipeline errors. No retries are performed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import requests

DEFAULT_USER_AGENT = "ssui-companion"


@dataclass
class HttpConfig:
    """Timeout configuration for download calls.

    Attributes:
        download_timeout_s: Total deadline in seconds for one archive download.
        chunk_size: Bytes requested per streamed body read.
    """
    download_timeout_s: float = 30.0
    chunk_size: int = 64 * 1024


class DownloadSession:
    """Single-attempt ``requests`` wrapper used by the archive downloader."""

    def __init__(self, cfg: Optional[HttpConfig] = None, *, user_agent: str = DEFAULT_USER_AGENT) -> None:
        """Create a download session.

        Args:
            cfg: Shared timeout settings.
            user_agent: ``User-Agent`` header value.

        Side Effects:
            Creates a persistent ``requests.Session`` object.
        """
        self.session = requests.Session()
        self.cfg = cfg or HttpConfig()
        self.user_agent = user_agent

    def _headers(self, accept: str = "application/octet-stream") -> Dict[str, str]:
        return {"Accept": accept, "User-Agent": self.user_agent}

    def get(self, url: str, *, timeout: Optional[float] = None, stream: bool = True) -> requests.Response:
        """Send one GET request.

        Args:
            url: Absolute archive URL.
            timeout: Optional connect/read timeout override in seconds.
            stream: Whether to stream the response body.

        Returns:
            ``requests.Response``; the caller owns closing it.

        Raises:
            requests.exceptions.RequestException: Transport failures are
                propagated unchanged for the caller to classify.
        """
        return self.session.get(
            url,
            headers=self._headers(),
            timeout=timeout or self.cfg.download_timeout_s,
            stream=stream,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "DownloadSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["DEFAULT_USER_AGENT", "DownloadSession", "HttpConfig"]
