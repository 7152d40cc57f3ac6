import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from hostbridge.profiles import LauncherProfile


DEFAULT_CONFIG_PATH = Path("hostbridge.config.json")

# BUFSIZ - 1: size of the cwd buffer, terminator included.
DEFAULT_PATH_BUFFER_SIZE = 8191

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class BuildConfigurationError(RuntimeError):
    """A constant the launcher cannot run without is missing."""


@dataclass(frozen=True)
class BuildConfig:
    app_id: str
    version: str
    devel: bool = False
    program: str = ""
    shell: str = "/bin/sh"
    notify_module: str = "inotify_simple"
    log_level: str = "WARNING"
    path_buffer_size: int = DEFAULT_PATH_BUFFER_SIZE

    def __post_init__(self) -> None:
        if not str(self.version or "").strip():
            raise BuildConfigurationError("Application version is not defined")
        if not str(self.app_id or "").strip():
            raise BuildConfigurationError("Application id is not defined")

    @property
    def application_id(self) -> str:
        return f"{self.app_id}.Devel" if self.devel else self.app_id

    def export_env(self) -> None:
        os.environ["HOSTBRIDGE_APP_ID"] = self.application_id
        os.environ["HOSTBRIDGE_APP_VERSION"] = self.version
        os.environ["HOSTBRIDGE_DEVEL"] = "1" if self.devel else "0"


def _required(data: Dict[str, Any], key: str) -> str:
    val = str(data.get(key, "")).strip()
    if not val:
        raise BuildConfigurationError(f"Missing required config key: {key}")
    return val


def _bool(data: Dict[str, Any], key: str, default: bool) -> bool:
    val = data.get(key, default)
    if isinstance(val, bool):
        return val
    text = str(val).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return default


def _int(data: Dict[str, Any], key: str, default: int, minimum: int = 0) -> int:
    try:
        val = int(data.get(key, default))
    except (TypeError, ValueError):
        val = default
    return max(minimum, val)


def _env_overrides() -> Dict[str, Any]:
    mapping = {
        "HOSTBRIDGE_DEVEL": "devel",
        "HOSTBRIDGE_VERSION": "version",
        "HOSTBRIDGE_PROGRAM": "program",
        "HOSTBRIDGE_SHELL": "shell",
        "HOSTBRIDGE_NOTIFY_MODULE": "notify_module",
        "HOSTBRIDGE_LOG_LEVEL": "log_level",
    }
    return {key: os.environ[env] for env, key in mapping.items() if env in os.environ}


def load_build_config(profile: LauncherProfile, path: Optional[str] = None) -> BuildConfig:
    """Resolve the build configuration once: profile defaults, then the JSON file, then the environment.

    The default config file is optional; a file named explicitly (argument or
    HOSTBRIDGE_CONFIG) must exist.
    """
    explicit = path or os.environ.get("HOSTBRIDGE_CONFIG")
    cfg_path = Path(explicit or str(DEFAULT_CONFIG_PATH)).expanduser().resolve()

    data: Dict[str, Any] = {
        "app_id": profile.app_id,
        "version": profile.version,
    }
    if cfg_path.exists():
        loaded = json.loads(cfg_path.read_text(encoding="utf-8"))
        if not isinstance(loaded, dict):
            raise BuildConfigurationError(f"Config file must hold a JSON object: {cfg_path}")
        data.update(loaded)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    data.update(_env_overrides())

    program = str(data.get("program") or "").strip()
    if program:
        program = str(Path(program).expanduser().resolve())

    return BuildConfig(
        app_id=_required(data, "app_id"),
        version=_required(data, "version"),
        devel=_bool(data, "devel", False),
        program=program,
        shell=str(data.get("shell", "/bin/sh")).strip() or "/bin/sh",
        notify_module=str(data.get("notify_module", "inotify_simple")).strip() or "inotify_simple",
        log_level=str(data.get("log_level", "WARNING")).strip().upper() or "WARNING",
        path_buffer_size=_int(data, "path_buffer_size", DEFAULT_PATH_BUFFER_SIZE, minimum=1),
    )
