"""Role-tagged chat messages exchanged with model backends."""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Message author."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True)
class Message:
    """A single chat message. Never mutated after creation."""

    role: Role
    content: str

    def to_dict(self) -> dict:
        return {"role": self.role.value, "content": self.content}
