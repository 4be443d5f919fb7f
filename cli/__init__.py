"""Command-line client for the crowd temperature dashboard."""

from importlib import import_module
from types import ModuleType

__all__ = []


def __getattr__(name: str) -> ModuleType:
    # ``cli.app`` must stay the module; tests patch ``cli.app.ApiClient``.
    if name == "app":
        return import_module("cli.app")
    raise AttributeError(name)
