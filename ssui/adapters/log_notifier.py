"""Console implementation of ``NotifierPort``.

Chat-bot channels plug in behind the same port; this adapter only writes
status lines to the log so operators see them without a bot configured.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ssui.domain.ports import NotifierPort


class LogNotifier(NotifierPort):
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.log = logger or logging.getLogger("ssui.notify")
        self.sent: List[str] = []

    def send(self, message: str) -> None:
        text = str(message or "").strip()
        if not text:
            return
        self.sent.append(text)
        self.log.info("Sent status message: %s", text)


__all__ = ["LogNotifier"]
