"""Capability tables and their installation into a runtime's module cache."""

from __future__ import annotations

import logging
from types import MappingProxyType, ModuleType
from typing import Callable, Dict, Mapping, Union

from hostbridge.runtime import Runtime

log = logging.getLogger(__name__)


class CapabilityTable:
    """Named, immutable bundle of host functions."""

    def __init__(self, name: str, functions: Mapping[str, Callable]):
        for key, fn in functions.items():
            if not callable(fn):
                raise TypeError(f"Capability {name}.{key} is not callable")
        self.name = name
        self.functions: Mapping[str, Callable] = MappingProxyType(dict(functions))

    def __contains__(self, key: str) -> bool:
        return key in self.functions

    def __getitem__(self, key: str) -> Callable:
        return self.functions[key]

    def __len__(self) -> int:
        return len(self.functions)

    def to_module(self) -> ModuleType:
        # The module is the runtime's copy; the program may extend it freely.
        mod = ModuleType(self.name, f"Host capabilities: {', '.join(sorted(self.functions))}")
        for key, fn in self.functions.items():
            setattr(mod, key, fn)
        return mod


TableLoader = Callable[[], Union[CapabilityTable, ModuleType]]


def register(runtime: Runtime, loader: TableLoader, name: str) -> None:
    """Install the table produced by `loader` into `runtime` under `name`.

    Equivalent to the program importing `name` once without keeping the result:
    the table is cached for its later import, but no global is bound.
    Registering the same name twice replaces the first entry.
    """
    table = loader()
    mod = table.to_module() if isinstance(table, CapabilityTable) else table
    if name in runtime.loaded:
        log.debug("Replacing capability table %s", name)
    runtime.loaded[name] = mod
