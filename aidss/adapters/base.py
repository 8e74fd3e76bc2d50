"""
Base adapter interface for model backends.

An adapter turns an ordered list of role-tagged messages into reply text.
The node pipeline receives an adapter instance explicitly, so tests can
pass a stub without touching the registry.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..core.messages import Message


@dataclass
class AdapterConfig:
    """Configuration for an adapter."""

    model: str = "gpt-4"
    max_tokens: Optional[int] = None  # None = adapter's per-model default
    temperature: float = 0.7
    extra: dict = field(default_factory=dict)


class AdapterBase(ABC):
    """
    Base class for model backend adapters.

    generate() blocks until the backend answers. There is no timeout or
    cancellation; a slow call holds the node lock until it returns.
    """

    name: str = "base"
    models: tuple[str, ...] = ()

    def __init__(self, config: Optional[AdapterConfig] = None):
        self.config = config or AdapterConfig()

    @abstractmethod
    def generate(self, messages: list[Message]) -> str:
        """
        Send the conversation and return the complete reply text.

        Raises:
            BackendFailure: if the backend call fails for any reason
        """

    def get_available_models(self) -> list[str]:
        """Model identifiers this adapter accepts."""
        return list(self.models)

    def get_info(self) -> dict:
        """Get adapter information."""
        return {
            "name": self.name,
            "model": self.config.model,
            "models": self.get_available_models(),
        }
