"""
Adapter registry for looking up backends by name.

Only the CLI consults the registry; the node pipeline is always handed an
adapter instance.
"""

from typing import Type

from .base import AdapterBase

# Global registry
_adapters: dict[str, Type[AdapterBase]] = {}


def register_adapter(name: str, adapter_class: Type[AdapterBase]) -> None:
    """Register an adapter class."""
    _adapters[name] = adapter_class


def get_adapter(name: str, **kwargs) -> AdapterBase:
    """Get an adapter instance by name."""
    if name not in _adapters:
        _try_load_adapter(name)

    if name not in _adapters:
        available = ", ".join(_adapters.keys()) or "none"
        raise ValueError(f"Unknown adapter: {name}. Available: {available}")

    return _adapters[name](**kwargs)


def list_adapters() -> list[str]:
    """List available adapter names."""
    _try_load_adapter("mock")
    _try_load_adapter("openai")
    return list(_adapters.keys())


def adapter_models() -> dict[str, list[str]]:
    """Map each available adapter name to the models it serves."""
    return {name: list(_adapters[name].models) for name in list_adapters()}


def adapter_for_model(model: str) -> str:
    """Name of the first registered adapter that serves ``model``."""
    for name in list_adapters():
        if model in _adapters[name].models:
            return name
    raise ValueError(f"No adapter serves model {model}")


def _try_load_adapter(name: str) -> None:
    """Try to load an adapter module."""
    try:
        if name == "mock":
            from .mock import MockAdapter

            register_adapter("mock", MockAdapter)
        elif name == "openai":
            from .openai import OpenAIAdapter

            register_adapter("openai", OpenAIAdapter)
    except ImportError:
        # Adapter not available (missing dependencies)
        pass
