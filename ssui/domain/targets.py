"""Per-platform install targets and host OS detection."""

from __future__ import annotations

import platform as _platform
from pathlib import Path
from typing import Optional

from ssui.domain.errors import UnsupportedPlatformError
from ssui.domain.install_models import ExtractorKind, InstallTarget, Platform

STEAMCMD_LINUX_URL = "https://steamcdn-a.akamaihd.net/client/installer/steamcmd_linux.tar.gz"
STEAMCMD_WINDOWS_URL = "https://steamcdn-a.akamaihd.net/client/installer/steamcmd.zip"
STEAMCMD_LINUX_DIR = "./steamcmd"
STEAMCMD_WINDOWS_DIR = "C:\\SteamCMD"

LINUX_ENTRY_POINTS = (
    "steamcmd.sh",
    "linux32/steamcmd",
    "linux32/steamerrorreporter",
)
LINUX_BINARY = "linux32/steamcmd"
# 32-bit runtime SteamCMD needs on Debian/Ubuntu hosts.
LINUX_REQUIRED_LIBRARIES = (
    "lib32gcc-s1",
    "lib32stdc++6",
    "libcurl4-gnutls-dev:i386",
)

# Stationeers dedicated server.
DEFAULT_APP_ID = "600760"


def detect_platform(system_name: Optional[str] = None) -> Platform:
    """Map ``platform.system()`` output to a supported platform."""
    name = (system_name if system_name is not None else _platform.system()).strip().lower()
    if name == "windows":
        return Platform.WINDOWS
    if name == "linux":
        return Platform.LINUX
    raise UnsupportedPlatformError(name)


def target_for(platform: Platform, install_dir: Optional[str | Path] = None) -> InstallTarget:
    """Return the install target for ``platform``, optionally relocated."""
    if platform is Platform.LINUX:
        return InstallTarget(
            platform=Platform.LINUX,
            install_dir=Path(install_dir or STEAMCMD_LINUX_DIR),
            download_url=STEAMCMD_LINUX_URL,
            extractor_kind=ExtractorKind.TAR_GZ,
            executable_ext=".sh",
            entry_points=LINUX_ENTRY_POINTS,
            binary=LINUX_BINARY,
            required_libraries=LINUX_REQUIRED_LIBRARIES,
            needs_permissions=True,
            needs_dependencies=True,
        )
    if platform is Platform.WINDOWS:
        return InstallTarget(
            platform=Platform.WINDOWS,
            install_dir=Path(install_dir or STEAMCMD_WINDOWS_DIR),
            download_url=STEAMCMD_WINDOWS_URL,
            extractor_kind=ExtractorKind.ZIP,
            executable_ext=".exe",
        )
    raise UnsupportedPlatformError(str(platform))


__all__ = [
    "DEFAULT_APP_ID",
    "LINUX_BINARY",
    "LINUX_ENTRY_POINTS",
    "LINUX_REQUIRED_LIBRARIES",
    "STEAMCMD_LINUX_DIR",
    "STEAMCMD_LINUX_URL",
    "STEAMCMD_WINDOWS_DIR",
    "STEAMCMD_WINDOWS_URL",
    "detect_platform",
    "target_for",
]
