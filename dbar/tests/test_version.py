from __future__ import annotations

import pytest

from dbar import __version__
from dbar.version import DEV_MODE_ENV_VAR, is_dev_build


def test_release_version_is_not_dev(monkeypatch):
    monkeypatch.delenv(DEV_MODE_ENV_VAR, raising=False)
    assert is_dev_build("1.2.0") is False
    assert is_dev_build("1.3.0-dev") is True


@pytest.mark.parametrize("value, expected", [("1", True), ("on", True), ("0", False), ("off", False)])
def test_env_flag_wins(monkeypatch, value, expected):
    monkeypatch.setenv(DEV_MODE_ENV_VAR, value)
    assert is_dev_build("1.3.0-dev" if not expected else "1.2.0") is expected


def test_package_exposes_version():
    assert __version__.count(".") == 2
