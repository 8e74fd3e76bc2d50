"""
Mock adapter for testing and development.

Provides canned responses, cycling through them in order.
"""

from typing import Optional

from ..core.messages import Message
from .base import AdapterBase, AdapterConfig


class MockAdapter(AdapterBase):
    """Mock adapter for testing."""

    name = "mock"
    models = ("mock-model",)

    def __init__(
        self,
        responses: Optional[list[str]] = None,
        config: Optional[AdapterConfig] = None,
    ):
        """
        Initialize mock adapter.

        Args:
            responses: List of canned responses (cycles through them)
            config: Adapter configuration (model name is informational)
        """
        super().__init__(config or AdapterConfig(model="mock-model"))
        self.responses = responses or ["This is a mock response."]
        self.response_index = 0
        self.calls: list[list[Message]] = []

    def generate(self, messages: list[Message]) -> str:
        self.calls.append(list(messages))
        response = self.responses[self.response_index % len(self.responses)]
        self.response_index += 1
        return response
