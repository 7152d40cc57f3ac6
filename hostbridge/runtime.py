"""
Runtime instance: an isolated namespace the embedded program runs in.

The runtime keeps its own module cache. Host capability tables live there and
nowhere else: not in the program's globals, not in sys.modules. The program
reaches them through its builtins' __import__, which consults the cache before
falling back to the regular import system.
"""

from __future__ import annotations

import builtins
import logging
from dataclasses import dataclass
from types import CodeType, ModuleType
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgramUnit:
    """A fully loaded program, ready to run with no arguments."""
    code: CodeType
    label: str


class Runtime:

    def __init__(self, label: str = "main"):
        self.label = label
        self.loaded: Dict[str, ModuleType] = {}
        self.globals: Optional[Dict[str, Any]] = None

    def open_standard_libraries(self) -> None:
        """Build the program globals with a private copy of the builtins."""
        program_builtins = dict(vars(builtins))
        program_builtins["__import__"] = self._import
        self.globals = {
            "__name__": "__main__",
            "__doc__": None,
            "__builtins__": program_builtins,
        }

    def _import(self, name: str, globals=None, locals=None, fromlist=(), level: int = 0) -> ModuleType:
        if level == 0 and name in self.loaded:
            return self.loaded[name]
        return builtins.__import__(name, globals, locals, fromlist, level)

    def require(self, name: str) -> ModuleType:
        """Resolve `name` the way the embedded program's import would."""
        if name in self.loaded:
            return self.loaded[name]
        return builtins.__import__(name)

    def call(self, unit: ProgramUnit) -> None:
        # Errors raised by the program, SystemExit included, are not ours to handle.
        if self.globals is None:
            raise RuntimeError("standard libraries are not open")
        log.debug("Running %s in runtime %s", unit.label, self.label)
        exec(unit.code, self.globals)
