"""
Model backend adapters for aidss.
"""

from .base import AdapterBase, AdapterConfig
from .registry import (
    adapter_for_model,
    adapter_models,
    get_adapter,
    list_adapters,
    register_adapter,
)

__all__ = [
    "AdapterBase",
    "AdapterConfig",
    "adapter_for_model",
    "adapter_models",
    "get_adapter",
    "list_adapters",
    "register_adapter",
]
