from __future__ import annotations

import logging

import pytest

from printlink.utils import logging as logging_utils


@pytest.fixture(autouse=True)
def _restore_levels(monkeypatch):
    monkeypatch.delenv(logging_utils.LEVEL_ENV, raising=False)
    monkeypatch.delenv(logging_utils.DEBUG_ENV, raising=False)
    root = logging.getLogger()
    chatty = logging.getLogger("urllib3.connectionpool")
    saved = (root.level, chatty.level)
    yield
    root.setLevel(saved[0])
    chatty.setLevel(saved[1])


def test_env_level_overrides_preferences(monkeypatch) -> None:
    monkeypatch.setenv(logging_utils.LEVEL_ENV, "warning")

    assert logging_utils.apply_preferences(debug_enabled=True) == logging.WARNING


def test_numeric_env_level(monkeypatch) -> None:
    monkeypatch.setenv(logging_utils.LEVEL_ENV, " 15 ")

    assert logging_utils.configure_root() == 15


@pytest.mark.parametrize("raw", ["²", "verbose"])
def test_unparseable_env_level_falls_back_to_info(monkeypatch, raw: str) -> None:
    monkeypatch.setenv(logging_utils.LEVEL_ENV, raw)

    assert logging_utils.configure_root(logging.ERROR) == logging.INFO


def test_debug_flag_enables_debug_but_keeps_urllib3_quiet(monkeypatch) -> None:
    monkeypatch.setenv(logging_utils.DEBUG_ENV, "yes")

    assert logging_utils.configure_root(logging.INFO) == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("urllib3.connectionpool").level == logging.INFO


def test_preferences_without_env() -> None:
    assert logging_utils.apply_preferences(debug_enabled=False) == logging.INFO
    assert logging_utils.apply_preferences(debug_enabled=True) == logging.DEBUG


def test_default_level_accepts_names() -> None:
    assert logging_utils.configure_root("error") == logging.ERROR
