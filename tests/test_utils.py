from __future__ import annotations

import pytest

from paramexp.utils import (
    DEBUG_PY_TRACE_ENV,
    DEFAULT_MAX_DEPTH,
    MAX_DEPTH_ENV,
    debug_py_trace_enabled,
    max_depth_from_env,
    set_debug_py_trace,
)


def test_max_depth_default() -> None:
    assert max_depth_from_env() == DEFAULT_MAX_DEPTH == 64


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("7", 7),
        ("", DEFAULT_MAX_DEPTH),
        ("abc", DEFAULT_MAX_DEPTH),
        ("0", DEFAULT_MAX_DEPTH),
        ("-3", DEFAULT_MAX_DEPTH),
    ],
)
def test_max_depth_from_env(monkeypatch: pytest.MonkeyPatch, raw: str, expected: int) -> None:
    monkeypatch.setenv(MAX_DEPTH_ENV, raw)
    assert max_depth_from_env() == expected


def test_debug_py_trace_toggle(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(DEBUG_PY_TRACE_ENV, "")
    assert not debug_py_trace_enabled()

    set_debug_py_trace(True)
    assert debug_py_trace_enabled()

    set_debug_py_trace(False)
    assert not debug_py_trace_enabled()
