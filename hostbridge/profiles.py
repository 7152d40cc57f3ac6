"""Launcher profiles.

Both launchers run the same bootstrap sequence; they differ only in the
capability tables they install and in the identity baked into them.
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class LauncherProfile:
    name: str
    display_name: str
    label: str
    app_id: str
    version: str
    core_table: str
    program_resource: str
    with_argv: bool = False
    with_cwd: bool = False
    directory_spawn: bool = False
    notify_table: Optional[str] = None


EDITOR = LauncherProfile(
    name="editor",
    display_name="Editor",
    label="editor",
    app_id="org.hostbridge.Editor",
    version="0.1.0-alpha",
    core_table="editorlib",
    program_resource="editor.pyc",
    with_argv=True,
)

WORKSPACE = LauncherProfile(
    name="workspace",
    display_name="Workspace",
    label="workspace",
    app_id="org.hostbridge.Workspace",
    version="0.1.0-alpha",
    core_table="workspacelib",
    program_resource="workspace.pyc",
    with_cwd=True,
    directory_spawn=True,
    notify_table="inotify",
)

PROFILES: Dict[str, LauncherProfile] = {p.name: p for p in (EDITOR, WORKSPACE)}


def get_profile(name: str) -> LauncherProfile:
    try:
        return PROFILES[str(name or "").strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown launcher profile: {name!r} (expected one of: {', '.join(sorted(PROFILES))})")
