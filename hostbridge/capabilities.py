"""Host functions exposed to the embedded program.

Each function answers a single query or fires a single side effect. Results
are plain values; "no result" is None.
"""

from __future__ import annotations

import functools
import importlib
import logging
import os
import subprocess
from types import ModuleType
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from hostbridge.config import DEFAULT_PATH_BUFFER_SIZE, BuildConfig
from hostbridge.profiles import LauncherProfile
from hostbridge.registry import CapabilityTable

log = logging.getLogger(__name__)

DEFAULT_SHELL = "/bin/sh"

# Children still running. Held only so finished ones can be reaped with a
# non-blocking poll; never waited on, never handed to the program.
_detached: List[subprocess.Popen] = []


def is_devel_build(config: BuildConfig) -> bool:
    return bool(config.devel)


def application_id(config: BuildConfig) -> str:
    return config.application_id


def application_version(config: BuildConfig) -> str:
    return config.version


def current_working_directory(buffer_size: int = DEFAULT_PATH_BUFFER_SIZE) -> Optional[str]:
    """Return the process working directory, or None if it cannot be reported.

    The path must fit in `buffer_size` bytes with a terminating NUL; longer
    paths are treated as a failed query.
    """
    try:
        path = os.getcwd()
    except OSError:
        log.debug("getcwd failed", exc_info=True)
        return None
    if len(os.fsencode(path)) >= buffer_size:
        return None
    return path


def command_line_arguments(argv: Sequence[str]) -> Tuple[str, ...]:
    return tuple(argv)


def _reap_detached() -> None:
    _detached[:] = [proc for proc in _detached if proc.poll() is None]


def spawn_shell_command(directory: Optional[Union[str, os.PathLike]], command: str,
                        shell: str = DEFAULT_SHELL) -> None:
    """Start `shell -c command` inside `directory` and return at once.

    The child gets its own session and is never waited on. Its handle stays
    private to this module until a later call sees the child has exited, so
    it is never dropped while still running. When the directory change or the
    exec fails the command never runs, and the caller is not told.
    """
    if not isinstance(command, str):
        raise TypeError(f"command must be a string, not {type(command).__name__}")
    if directory is not None and not isinstance(directory, (str, os.PathLike)):
        raise TypeError(f"directory must be a path, not {type(directory).__name__}")
    _reap_detached()
    try:
        proc = subprocess.Popen(
            [shell, "-c", command],
            cwd=directory,
            stdin=subprocess.DEVNULL,
            close_fds=True,
            start_new_session=True,
        )
        _detached.append(proc)
    except (OSError, subprocess.SubprocessError):
        log.debug("Spawn failed: dir=%s command=%r", directory, command, exc_info=True)


def build_core_table(profile: LauncherProfile, config: BuildConfig, argv: Sequence[str]) -> CapabilityTable:
    functions: Dict[str, Callable] = {
        "is_devel_build": functools.partial(is_devel_build, config),
        "application_id": functools.partial(application_id, config),
        "application_version": functools.partial(application_version, config),
    }
    if profile.with_cwd:
        functions["current_working_directory"] = functools.partial(
            current_working_directory, config.path_buffer_size)
    if profile.with_argv:
        functions["command_line_arguments"] = functools.partial(command_line_arguments, tuple(argv))
    if profile.directory_spawn:
        functions["spawn_shell_command"] = functools.partial(spawn_shell_command, shell=config.shell)
    else:
        functions["spawn_shell_command"] = functools.partial(spawn_shell_command, None, shell=config.shell)
    return CapabilityTable(profile.core_table, functions)


def load_notify_module(config: BuildConfig) -> ModuleType:
    """Import the filesystem-notification module the workspace launcher exposes."""
    return importlib.import_module(config.notify_module)
