# ssui/app/main.py
"""CLI entrypoint: make sure the updater is installed, then run it once."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from ..adapters.archive_download import ArchiveDownloader
from ..adapters.http_client import DownloadSession, HttpConfig
from ..adapters.log_notifier import LogNotifier
from ..adapters.process_runner import SubprocessRunner
from ..domain.errors import UnsupportedPlatformError
from ..domain.install_models import Platform, UpdaterOutcome
from ..domain.ports import ArchiveSourcePort, CommandRunnerPort, ConfigProvider
from ..domain.targets import detect_platform, target_for
from ..usecases.ensure_updater import PipelineFactory
from ..utils import logging as logging_utils
from ..utils.reporting import PipelineReporter, Verbosity
from .settings import ConfigError, Settings, load_settings, with_overrides

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2

log = logging.getLogger("ssui.app")


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI args for one install-and-update run."""
    parser = argparse.ArgumentParser(description="Install (if needed) and run the game server updater.")
    parser.add_argument("--config", default=None, help="Path to config.json (default ./UIMod/config.json).")
    parser.add_argument("--platform", choices=[p.value for p in Platform], default=None)
    parser.add_argument("--install-dir", default=None)
    parser.add_argument("--server-dir", default=None)
    parser.add_argument("--app-id", default=None)
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true")
    verbosity.add_argument("--quiet", action="store_true")
    parser.add_argument("--no-color", action="store_true")
    return parser.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    verbosity = None
    if args.verbose:
        verbosity = Verbosity.VERBOSE
    elif args.quiet:
        verbosity = Verbosity.SILENT
    return with_overrides(
        settings,
        install_dir=Path(args.install_dir) if args.install_dir else None,
        server_dir=Path(args.server_dir) if args.server_dir else None,
        app_id=args.app_id,
        verbosity=verbosity,
        color=False if args.no_color else None,
    )


def describe_build(config: ConfigProvider) -> str:
    return f"{config.version} ({config.branch})"


def run_pipeline(
    settings: Settings,
    *,
    platform: Optional[Platform] = None,
    downloader: Optional[ArchiveSourcePort] = None,
    runner: Optional[CommandRunnerPort] = None,
) -> UpdaterOutcome:
    """Build the pipeline for the host (or given) platform and run it once."""
    host = platform or detect_platform()
    target = target_for(host, settings.install_dir)
    reporter = PipelineReporter(settings.effective_verbosity)
    cfg = HttpConfig(download_timeout_s=settings.download_timeout_s)
    session: Optional[DownloadSession] = None
    if downloader is None:
        session = DownloadSession(cfg)
        downloader = ArchiveDownloader(session, cfg=cfg, reporter=reporter)
    factory = PipelineFactory(source=downloader, runner=runner or SubprocessRunner(), reporter=reporter)
    pipeline = factory.build(
        target,
        server_dir=settings.server_dir,
        app_id=settings.app_id,
        notifier=LogNotifier(),
    )
    log.debug("Companion %s on %s", describe_build(settings), host.value)
    try:
        return pipeline()
    finally:
        if session is not None:
            session.close()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint; returns the process exit status."""
    args = _parse_args(argv)
    try:
        settings = _settings_from_args(args)
    except ConfigError as exc:
        logging_utils.configure_root()
        log.error("%s", exc)
        return EXIT_CONFIG

    default_level = logging.INFO if settings.effective_verbosity > Verbosity.SILENT else logging.WARNING
    logging_utils.configure_root(default_level, color=settings.color)

    try:
        outcome = run_pipeline(
            settings,
            platform=Platform(args.platform) if args.platform else None,
        )
    except UnsupportedPlatformError as exc:
        log.error("%s", exc)
        return EXIT_CONFIG

    return EXIT_OK if outcome.ok else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
