"""Verbosity-aware progress reporting for the install pipeline.

Pipeline objects receive a ``PipelineReporter`` at construction instead of
reading a process-wide verbose flag, so tests can run them fully silent or
fully verbose.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Optional


class Verbosity(IntEnum):
    SILENT = 0
    NORMAL = 1
    VERBOSE = 2

    @classmethod
    def for_branch(cls, branch: str) -> "Verbosity":
        """Release builds only report failures."""
        return cls.NORMAL if (branch or "").strip() == "Release" else cls.VERBOSE


class PipelineReporter:
    """Route pipeline messages to a logger according to ``verbosity``."""

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NORMAL,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.verbosity = Verbosity(verbosity)
        self.log = logger or logging.getLogger("ssui.pipeline")

    def progress(self, message: str, *args: object) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self.log.info(message, *args)

    def success(self, message: str, *args: object) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self.log.info(message, *args)

    def warning(self, message: str, *args: object) -> None:
        if self.verbosity >= Verbosity.VERBOSE:
            self.log.warning(message, *args)

    def error(self, message: str, *args: object) -> None:
        if self.verbosity >= Verbosity.NORMAL:
            self.log.error(message, *args)

    def exception(self, message: str, *args: object) -> None:
        if self.verbosity >= Verbosity.NORMAL:
            self.log.exception(message, *args)


__all__ = ["PipelineReporter", "Verbosity"]
