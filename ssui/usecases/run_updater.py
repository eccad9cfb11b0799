"""Use case for running the installed updater against the game server."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ssui.domain.errors import InstallError, ProcessExitError, ProcessSpawnError
from ssui.domain.install_models import InstallTarget, InvocationResult
from ssui.domain.ports import CommandRunnerPort
from ssui.domain.targets import DEFAULT_APP_ID
from ssui.utils.reporting import PipelineReporter


def build_update_command(target: InstallTarget, server_dir: Path, app_id: str = DEFAULT_APP_ID) -> List[str]:
    """Return the update-and-quit command line for ``target``."""
    return [
        str(target.executable_path),
        "+force_install_dir",
        str(server_dir),
        "+login",
        "anonymous",
        "+app_update",
        str(app_id),
        "+quit",
    ]


@dataclass
class RunUpdater:
    """Run the updater once with inherited console streams.

    Failures are terminal: they are reported in the result and never retried
    or turned into a re-install.
    """

    target: InstallTarget
    runner: CommandRunnerPort
    server_dir: Optional[Path] = None
    app_id: str = DEFAULT_APP_ID
    reporter: PipelineReporter = field(default_factory=PipelineReporter)

    def __call__(self) -> InvocationResult:
        server_dir = Path(self.server_dir) if self.server_dir is not None else Path.cwd()
        self.reporter.progress("Game server directory: %s", server_dir)
        argv = build_update_command(self.target, server_dir, self.app_id)
        self.reporter.progress("Updater command path: %s", argv[0])

        self.reporter.progress("Running updater...")
        try:
            exit_code = self.runner.run(argv)
        except ProcessSpawnError as exc:
            self.reporter.error("Error running updater: %s", exc)
            return InvocationResult(argv=argv, error=exc)
        except InstallError as exc:
            wrapped = ProcessSpawnError(argv[0], str(exc))
            self.reporter.error("Error running updater: %s", wrapped)
            return InvocationResult(argv=argv, error=wrapped)

        if exit_code != 0:
            err = ProcessExitError(Path(argv[0]).name, exit_code)
            self.reporter.error("Error running updater: %s", err)
            return InvocationResult(argv=argv, exit_code=exit_code, error=err)

        self.reporter.success("Updater executed successfully.")
        return InvocationResult(argv=argv, exit_code=exit_code)


__all__ = ["RunUpdater", "build_update_command"]
