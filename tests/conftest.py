import pytest

HOSTBRIDGE_ENV = (
    "HOSTBRIDGE_CONFIG",
    "HOSTBRIDGE_DEVEL",
    "HOSTBRIDGE_VERSION",
    "HOSTBRIDGE_PROGRAM",
    "HOSTBRIDGE_SHELL",
    "HOSTBRIDGE_NOTIFY_MODULE",
    "HOSTBRIDGE_LOG_LEVEL",
    "HOSTBRIDGE_PROFILE",
    "HOSTBRIDGE_APP_ID",
    "HOSTBRIDGE_APP_VERSION",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Start every test without HOSTBRIDGE_* variables or a config file in cwd."""
    for name in HOSTBRIDGE_ENV:
        # setenv first so monkeypatch restores the variable's absence afterwards.
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
