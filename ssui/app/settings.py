"""Companion settings: JSON config file plus environment overrides.

The JSON file uses the camelCase keys the web UI writes
(``branch``, ``version``, ``installDir``, ``serverDir``, ``appId``,
``downloadTimeoutSeconds``, ``color``). ``SSUI_*`` environment variables
win over file values.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ssui.domain.targets import DEFAULT_APP_ID
from ssui.utils.logging import env_truthy
from ssui.utils.reporting import Verbosity

DEFAULT_CONFIG_PATH = Path("./UIMod/config.json")
DEFAULT_BRANCH = "Release"
DEFAULT_DOWNLOAD_TIMEOUT_S = 30.0

_ENV_KEYS = {
    "SSUI_BRANCH": "branch",
    "SSUI_VERSION": "version",
    "SSUI_INSTALL_DIR": "install_dir",
    "SSUI_SERVER_DIR": "server_dir",
    "SSUI_APP_ID": "app_id",
}
_FILE_KEYS = {
    "branch": "branch",
    "version": "version",
    "installDir": "install_dir",
    "serverDir": "server_dir",
    "appId": "app_id",
    "downloadTimeoutSeconds": "download_timeout_s",
    "color": "color",
}


class ConfigError(ValueError):
    """Raised when the config file cannot be used."""


@dataclass(frozen=True)
class Settings:
    """Read-only companion configuration (also the ``ConfigProvider``)."""

    branch: str = DEFAULT_BRANCH
    version: str = "0.0.0"
    install_dir: Optional[Path] = None
    server_dir: Optional[Path] = None
    app_id: str = DEFAULT_APP_ID
    download_timeout_s: float = DEFAULT_DOWNLOAD_TIMEOUT_S
    color: bool = True
    verbosity: Optional[Verbosity] = None

    @property
    def effective_verbosity(self) -> Verbosity:
        if self.verbosity is not None:
            return self.verbosity
        return Verbosity.for_branch(self.branch)


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file {path} is invalid JSON: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Config file {path} could not be read: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return payload


def _coerce(field_name: str, value: Any) -> Any:
    if field_name in ("install_dir", "server_dir"):
        text = str(value or "").strip()
        return Path(text).expanduser() if text else None
    if field_name == "download_timeout_s":
        try:
            timeout = float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"downloadTimeoutSeconds must be a number, got {value!r}") from exc
        if timeout <= 0:
            raise ConfigError("downloadTimeoutSeconds must be positive")
        return timeout
    if field_name == "color":
        return value if isinstance(value, bool) else env_truthy(str(value))
    return str(value).strip()


def load_settings(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build ``Settings`` from ``path`` (if present) and ``environ``.

    Raises:
        ConfigError: Unreadable or malformed config file, or invalid values.
    """
    env = os.environ if environ is None else environ
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    values: Dict[str, Any] = {}
    file_payload = _read_config_file(config_path)
    for file_key, field_name in _FILE_KEYS.items():
        if file_payload.get(file_key) is not None:
            values[field_name] = _coerce(field_name, file_payload[file_key])

    for env_key, field_name in _ENV_KEYS.items():
        raw_env = env.get(env_key)
        if raw_env is not None and raw_env.strip():
            values[field_name] = _coerce(field_name, raw_env)

    verbose_env = env.get("SSUI_VERBOSE")
    if verbose_env is not None and verbose_env.strip():
        values["verbosity"] = Verbosity.VERBOSE if env_truthy(verbose_env) else Verbosity.NORMAL

    return Settings(**values)


def with_overrides(settings: Settings, **overrides: Any) -> Settings:
    """Return ``settings`` with non-``None`` overrides applied."""
    changes = {key: value for key, value in overrides.items() if value is not None}
    return replace(settings, **changes) if changes else settings


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "Settings",
    "load_settings",
    "with_overrides",
]
