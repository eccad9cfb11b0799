"""Install-if-needed then run: the full updater pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ssui.adapters.archive_extract import extractor_for
from ssui.adapters.filesystem import FilesystemPreparer
from ssui.adapters.system_packages import AptDependencyInstaller, NoopDependencyInstaller
from ssui.domain.install_models import InstallTarget, UpdaterOutcome
from ssui.domain.ports import ArchiveSourcePort, CommandRunnerPort, NotifierPort
from ssui.domain.targets import DEFAULT_APP_ID
from ssui.usecases.install_updater import InstallUpdater
from ssui.usecases.outcome_message import format_outcome_message
from ssui.usecases.run_updater import RunUpdater
from ssui.utils.reporting import PipelineReporter


@dataclass
class EnsureUpdater:
    """Use-case callable composing install and invocation.

    The updater runs whenever the install step ends ready (fresh install or
    existing directory). A failed install skips invocation; a failed
    invocation never triggers a re-install.
    """

    install: InstallUpdater
    run: RunUpdater
    notifier: Optional[NotifierPort] = None

    def __call__(self) -> UpdaterOutcome:
        install_result = self.install()
        outcome = UpdaterOutcome(platform=self.install.target.platform, install=install_result)
        if install_result.ready:
            outcome.invocation = self.run()
        if self.notifier is not None:
            self.notifier.send(format_outcome_message(outcome))
        return outcome


@dataclass
class PipelineFactory:
    """Wire concrete adapters for one install target.

    The extractor variant is resolved once here from the target's archive
    kind; the dependency step is the apt installer only for targets that
    need it.
    """

    source: ArchiveSourcePort
    runner: CommandRunnerPort
    reporter: PipelineReporter = field(default_factory=PipelineReporter)

    def build(
        self,
        target: InstallTarget,
        *,
        server_dir: Optional[Path] = None,
        app_id: str = DEFAULT_APP_ID,
        notifier: Optional[NotifierPort] = None,
    ) -> EnsureUpdater:
        dependencies = (
            AptDependencyInstaller(self.runner, reporter=self.reporter)
            if target.needs_dependencies
            else NoopDependencyInstaller()
        )
        install = InstallUpdater(
            target=target,
            source=self.source,
            extractor=extractor_for(target.extractor_kind),
            preparer=FilesystemPreparer(self.reporter),
            dependencies=dependencies,
            reporter=self.reporter,
        )
        run = RunUpdater(
            target=target,
            runner=self.runner,
            server_dir=server_dir,
            app_id=app_id,
            reporter=self.reporter,
        )
        return EnsureUpdater(install=install, run=run, notifier=notifier)


__all__ = ["EnsureUpdater", "PipelineFactory"]
