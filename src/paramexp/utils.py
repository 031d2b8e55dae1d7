from __future__ import annotations

import os as _os

DEFAULT_MAX_DEPTH = 64

DEBUG_PY_TRACE_ENV = "PARAMEXP_DEBUG_PY_TRACE"
MAX_DEPTH_ENV = "PARAMEXP_MAX_DEPTH"


def debug_py_trace_enabled() -> bool:
    """True when Python tracebacks should accompany reported parse errors."""
    return bool(_os.environ.get(DEBUG_PY_TRACE_ENV))


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        _os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        _os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def max_depth_from_env() -> int:
    """Nesting limit from PARAMEXP_MAX_DEPTH; non-positive or junk values fall back to the default."""
    raw = _os.environ.get(MAX_DEPTH_ENV)
    if not raw:
        return DEFAULT_MAX_DEPTH

    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MAX_DEPTH

    return value if value > 0 else DEFAULT_MAX_DEPTH
