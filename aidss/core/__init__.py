"""Core components for aidss."""

from .attachments import Attachment, render_attachments, resolve_attachments
from .context import ancestor_chain, build_context_messages
from .extractor import ExtractionReport, atomic_write, extract_outputs, scan_sections
from .logging import get_logger, setup_logging
from .messages import Message, Role
from .node import NodeProcessor, NodeResult, create_node, summarize_node
from .prompt import HeaderBlock, PromptDocument, parse_headers

__all__ = [
    "Attachment",
    "ExtractionReport",
    "HeaderBlock",
    "Message",
    "NodeProcessor",
    "NodeResult",
    "PromptDocument",
    "Role",
    "ancestor_chain",
    "atomic_write",
    "build_context_messages",
    "create_node",
    "extract_outputs",
    "get_logger",
    "parse_headers",
    "render_attachments",
    "resolve_attachments",
    "scan_sections",
    "setup_logging",
    "summarize_node",
]
