"""TMDb trailer channel service.

Heavy modules load on first attribute access so importing ``app.config`` or a
single service does not build the FastAPI application.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS = {
    "app": "app.main",
    "create_app": "app.main",
    "Settings": "app.config",
    "get_settings": "app.config",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module 'app' has no attribute {name!r}")
    return getattr(import_module(module_name), name)
