"""
Bootstrap sequence: create the runtime, install capability tables, load the
embedded program, run it, exit.

Every load failure is terminal and maps to its own exit code:

    0    program ran to completion
    1    program is malformed (or missing)
    2    out of memory while loading
    255  any other load failure
"""

from __future__ import annotations

import functools
import logging
import sys
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from hostbridge.capabilities import build_core_table, load_notify_module
from hostbridge.config import BuildConfig, load_build_config
from hostbridge.loader import EmbeddedBlob, LoadStatus, load_buffer
from hostbridge.profiles import EDITOR, WORKSPACE, LauncherProfile
from hostbridge.registry import TableLoader, register
from hostbridge.runtime import Runtime

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MALFORMED = 1
EXIT_NO_MEMORY = 2
EXIT_UNHANDLED = 255


def table_loaders(profile: LauncherProfile, config: BuildConfig,
                  argv: Sequence[str]) -> List[Tuple[str, TableLoader]]:
    loaders: List[Tuple[str, TableLoader]] = [
        (profile.core_table, functools.partial(build_core_table, profile, config, tuple(argv))),
    ]
    if profile.notify_table:
        loaders.append((profile.notify_table, functools.partial(load_notify_module, config)))
    return loaders


def run(profile: LauncherProfile, blob: EmbeddedBlob, argv: Sequence[str],
        config: BuildConfig, stderr: Optional[TextIO] = None) -> int:
    stderr = stderr or sys.stderr
    app = profile.display_name

    runtime = Runtime(profile.label)
    runtime.open_standard_libraries()

    for name, loader in table_loaders(profile, config, argv):
        register(runtime, loader, name)

    result = load_buffer(blob, profile.label)
    if result.status is LoadStatus.SYNTAX_ERROR:
        print(f"Failed to load {app}: embedded binary is malformed.", file=stderr)
        if result.message:
            print(result.message, file=stderr)
        return EXIT_MALFORMED
    if result.status is LoadStatus.MEMORY_ERROR:
        print(f"Failed to load {app}: could not allocate memory.", file=stderr)
        return EXIT_NO_MEMORY
    if result.status is not LoadStatus.LOADED:
        print(f"Failed to load {app}: an unhandled error occurred.", file=stderr)
        return EXIT_UNHANDLED

    runtime.call(result.unit)
    return EXIT_OK


def locate_blob(profile: LauncherProfile, config: BuildConfig) -> EmbeddedBlob:
    if config.program:
        return EmbeddedBlob.from_file(config.program)
    return EmbeddedBlob.from_resource("hostbridge", profile.program_resource)


def _configure_logging(config: BuildConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(profile: LauncherProfile, argv: Optional[Sequence[str]] = None) -> int:
    # The argument vector is fixed here, once, and only read afterwards.
    snapshot = tuple(sys.argv if argv is None else argv)
    config = load_build_config(profile)
    _configure_logging(config)
    config.export_env()
    log.info("Starting %s %s (%s)", config.application_id, config.version, profile.name)

    try:
        blob = locate_blob(profile, config)
    except FileNotFoundError as e:
        print(f"Failed to load {profile.display_name}: embedded program not found: {e}", file=sys.stderr)
        return EXIT_MALFORMED
    except ValueError as e:
        print(f"Failed to load {profile.display_name}: embedded binary is malformed.", file=sys.stderr)
        print(str(e), file=sys.stderr)
        return EXIT_MALFORMED
    return run(profile, blob, snapshot, config)


def _entry(profile: LauncherProfile) -> Callable[[], int]:
    def entry() -> int:
        return main(profile)
    entry.__name__ = f"{profile.name}_main"
    return entry


editor_main = _entry(EDITOR)
workspace_main = _entry(WORKSPACE)
