"""Child-process execution for the updater and the package manager.

Commands run with the parent's console streams so the operator sees the
updater's output live. ``quiet`` runs discard output; they are used for
status queries such as ``dpkg -s``.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from ssui.domain.errors import ProcessSpawnError
from ssui.domain.ports import CommandRunnerPort

logger = logging.getLogger(__name__)


def format_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(str(a)) for a in argv)


class SubprocessRunner(CommandRunnerPort):
    """Run commands with ``subprocess.run`` and return the exit status."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        quiet: bool = False,
    ) -> int:
        argv_list = [str(a) for a in argv]
        logger.debug("CMD %s", format_argv(argv_list))
        stream = subprocess.DEVNULL if quiet else None
        try:
            completed = subprocess.run(
                argv_list,
                cwd=str(cwd) if cwd is not None else None,
                stdout=stream,
                stderr=stream,
                check=False,
            )
        except OSError as exc:
            raise ProcessSpawnError(argv_list[0] if argv_list else "<empty>", str(exc)) from exc
        logger.debug("CMD exit=%s %s", completed.returncode, format_argv(argv_list))
        return completed.returncode


__all__ = ["SubprocessRunner", "format_argv"]
