import sys
from types import ModuleType

import pytest

from hostbridge.loader import EmbeddedBlob, load_buffer
from hostbridge.registry import CapabilityTable, register
from hostbridge.runtime import Runtime


def _runtime():
    rt = Runtime("test")
    rt.open_standard_libraries()
    return rt


def _exec(rt, source):
    result = load_buffer(EmbeddedBlob(source.encode("utf-8")), "test")
    assert result.ok, result.message
    rt.call(result.unit)


def test_two_tables_are_importable_by_name_without_globals():
    rt = _runtime()
    register(rt, lambda: CapabilityTable("alpha", {"ping": lambda: "pong"}), "alpha")
    register(rt, lambda: CapabilityTable("beta", {"twice": lambda x: 2 * x}), "beta")

    assert "alpha" not in rt.globals
    assert "beta" not in rt.globals
    assert "alpha" not in sys.modules
    assert "beta" not in sys.modules

    _exec(rt, (
        "seen_before = sorted(n for n in ('alpha', 'beta') if n in globals())\n"
        "import alpha\n"
        "from beta import twice\n"
        "result = (alpha.ping(), twice(21))\n"
    ))
    assert rt.globals["seen_before"] == []
    assert rt.globals["result"] == ("pong", 42)
    assert "beta" not in rt.globals


def test_reregistering_overwrites():
    rt = _runtime()
    register(rt, lambda: CapabilityTable("lib", {"v": lambda: 1}), "lib")
    register(rt, lambda: CapabilityTable("lib", {"v": lambda: 2}), "lib")
    assert rt.require("lib").v() == 2


def test_loader_may_return_a_module():
    rt = _runtime()
    mod = ModuleType("watcher")
    mod.IN_CREATE = 0x100
    register(rt, lambda: mod, "inotify")
    assert rt.require("inotify") is mod


def test_register_returns_nothing():
    rt = _runtime()
    assert register(rt, lambda: CapabilityTable("lib", {}), "lib") is None


def test_program_can_extend_its_copy_of_a_table():
    rt = _runtime()
    table = CapabilityTable("lib", {"base": lambda: "base"})
    register(rt, lambda: table, "lib")
    _exec(rt, "import lib\nlib.extra = lambda: 'extra'\n")
    assert rt.require("lib").extra() == "extra"
    assert "extra" not in table


def test_unregistered_names_fall_back_to_regular_import():
    rt = _runtime()
    _exec(rt, "import json\nencoded = json.dumps([1])\n")
    assert rt.globals["encoded"] == "[1]"


def test_runtimes_do_not_share_tables():
    first, second = _runtime(), _runtime()
    register(first, lambda: CapabilityTable("lib", {}), "lib")
    assert "lib" in first.loaded
    assert "lib" not in second.loaded


class TestCapabilityTable:

    def test_table_is_immutable(self):
        table = CapabilityTable("lib", {"f": len})
        with pytest.raises(TypeError):
            table.functions["g"] = len

    def test_entries_must_be_callable(self):
        with pytest.raises(TypeError):
            CapabilityTable("lib", {"f": 42})

    def test_module_carries_every_function(self):
        mod = CapabilityTable("lib", {"f": len, "g": max}).to_module()
        assert mod.__name__ == "lib"
        assert mod.f is len
        assert mod.g is max
