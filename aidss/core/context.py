"""
Conversation context for a node.

Each directory under the watched root is a node. A node's conversational
memory is every request/reply pair on the path from the root down to the
node itself, oldest first. The chain is rebuilt from disk on every call
because any ancestor may have been edited since the last turn.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .messages import Message, Role

logger = logging.getLogger("aidss.core.context")

DEFAULT_PROMPT_NAME = "prompt.txt"
DEFAULT_RESPONSE_NAME = "response.txt"


def ancestor_chain(node: Union[str, Path], root: Union[str, Path]) -> list[Path]:
    """Return the nodes from ``root`` down to ``node``, root first.

    Stops at the filesystem root if ``node`` is not inside ``root``.
    """
    current = Path(node).resolve()
    root = Path(root).resolve()
    chain = []
    while True:
        chain.append(current)
        if current == root:
            break
        parent = current.parent
        if parent == current:
            break
        current = parent
    chain.reverse()
    return chain


def _read_artifact(path: Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.debug(f"Skipping unreadable artifact {path}: {e}")
        return None


def build_context_messages(
    node: Union[str, Path],
    root: Union[str, Path],
    prompt_name: str = DEFAULT_PROMPT_NAME,
    response_name: str = DEFAULT_RESPONSE_NAME,
) -> list[Message]:
    """Build the prior exchanges for ``node`` as role-tagged messages.

    For every node in the chain, the request artifact becomes a user message
    and the reply artifact an assistant message, in that order. A missing
    artifact contributes nothing.
    """
    messages = []
    for path in ancestor_chain(node, root):
        request = _read_artifact(path / prompt_name)
        if request is not None:
            messages.append(Message(Role.USER, request))
        reply = _read_artifact(path / response_name)
        if reply is not None:
            messages.append(Message(Role.ASSISTANT, reply))

    logger.debug(f"Context for {node}: {len(messages)} messages")
    return messages
