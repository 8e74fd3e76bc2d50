"""
OpenAI adapter.

Uses the openai Python SDK's chat completions endpoint. The API is
stateless, so the whole conversation is sent on every call.

Requires OPENAI_API_KEY in the environment (or api_key passed explicitly).
"""

import logging
import os
from typing import Optional

from openai import OpenAI, OpenAIError

from ..core.exceptions import BackendFailure
from ..core.logging import TRACE
from ..core.messages import Message
from .base import AdapterBase, AdapterConfig

logger = logging.getLogger("aidss.adapters.openai")

# model -> max completion tokens
OPENAI_MODELS: dict[str, int] = {
    "gpt-3.5-turbo": 4096,
    "gpt-4": 8192,
    "gpt-4-turbo": 4096,
    "gpt-4o": 16384,
    "gpt-4o-mini": 16384,
}


class OpenAIAdapter(AdapterBase):
    """Adapter for OpenAI's chat completions API."""

    name = "openai"
    models = tuple(OPENAI_MODELS)

    def __init__(
        self,
        config: Optional[AdapterConfig] = None,
        api_key: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ):
        super().__init__(config)
        if self.config.model not in OPENAI_MODELS:
            raise ValueError(
                f"Unsupported model: {self.config.model}. "
                f"Available: {', '.join(OPENAI_MODELS)}"
            )
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self._client = client

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise BackendFailure(self.name, "OPENAI_API_KEY is not set", self.config.model)
            self._client = OpenAI(api_key=self.api_key)
        return self._client

    def generate(self, messages: list[Message]) -> str:
        max_tokens = self.config.max_tokens or OPENAI_MODELS[self.config.model]
        logger.debug(
            f"Sending {len(messages)} messages to {self.config.model} "
            f"(max_tokens={max_tokens})"
        )
        if logger.isEnabledFor(TRACE):
            for msg in messages:
                logger.trace(f"{msg.role.value}: {msg.content}")

        try:
            resp = self.client.chat.completions.create(
                model=self.config.model,
                messages=[m.to_dict() for m in messages],
                max_tokens=max_tokens,
                temperature=self.config.temperature,
                **self.config.extra,
            )
        except OpenAIError as e:
            raise BackendFailure(self.name, str(e), self.config.model) from e

        if not resp.choices:
            raise BackendFailure(self.name, "response contained no choices", self.config.model)
        return resp.choices[0].message.content or ""
