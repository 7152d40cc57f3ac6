import json

import pytest

from hostbridge.config import BuildConfig, BuildConfigurationError, load_build_config
from hostbridge.profiles import EDITOR, WORKSPACE


def _write_cfg(tmp_path, data):
    p = tmp_path / "cfg.json"
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_defaults_come_from_profile_without_config_file():
    cfg = load_build_config(EDITOR)
    assert cfg.app_id == EDITOR.app_id
    assert cfg.version == EDITOR.version
    assert cfg.devel is False
    assert cfg.shell == "/bin/sh"
    assert cfg.program == ""


def test_default_config_file_in_cwd_is_picked_up(tmp_path):
    (tmp_path / "hostbridge.config.json").write_text(json.dumps({"devel": True}), encoding="utf-8")
    cfg = load_build_config(WORKSPACE)
    assert cfg.devel is True
    assert cfg.application_id == "org.hostbridge.Workspace.Devel"


def test_environment_overrides_file(tmp_path, monkeypatch):
    cfg_path = _write_cfg(tmp_path, {"version": "1.0", "devel": True, "shell": "/bin/bash"})
    monkeypatch.setenv("HOSTBRIDGE_DEVEL", "0")
    monkeypatch.setenv("HOSTBRIDGE_VERSION", "2.0")
    cfg = load_build_config(EDITOR, str(cfg_path))
    assert cfg.version == "2.0"
    assert cfg.devel is False
    assert cfg.shell == "/bin/bash"


def test_program_path_is_resolved(tmp_path, monkeypatch):
    monkeypatch.setenv("HOSTBRIDGE_PROGRAM", "prog.pyc")
    cfg = load_build_config(EDITOR)
    assert cfg.program == str((tmp_path / "prog.pyc").resolve())


def test_explicit_missing_config_file_fails(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_build_config(EDITOR, str(tmp_path / "missing.json"))


def test_empty_version_is_a_build_configuration_error(tmp_path):
    cfg_path = _write_cfg(tmp_path, {"version": "  "})
    with pytest.raises(BuildConfigurationError):
        load_build_config(EDITOR, str(cfg_path))


def test_build_config_requires_version():
    with pytest.raises(BuildConfigurationError):
        BuildConfig(app_id="org.example.App", version="")


def test_non_object_config_is_rejected(tmp_path):
    cfg_path = _write_cfg(tmp_path, ["not", "an", "object"])
    with pytest.raises(BuildConfigurationError):
        load_build_config(EDITOR, str(cfg_path))


def test_bad_path_buffer_size_falls_back_to_default(tmp_path):
    cfg_path = _write_cfg(tmp_path, {"path_buffer_size": "lots"})
    cfg = load_build_config(WORKSPACE, str(cfg_path))
    assert cfg.path_buffer_size == 8191


def test_export_env_publishes_identity(monkeypatch):
    import os

    BuildConfig(app_id="org.example.App", version="3.1", devel=True).export_env()
    assert os.environ["HOSTBRIDGE_APP_ID"] == "org.example.App.Devel"
    assert os.environ["HOSTBRIDGE_APP_VERSION"] == "3.1"
    assert os.environ["HOSTBRIDGE_DEVEL"] == "1"
