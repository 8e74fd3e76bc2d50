"""
Prompt document parser - header/body format for conversation nodes.

This package provides the header parser and the typed PromptDocument.
"""

from .document import HEADER_IN, HEADER_OUT, HEADER_SYSMSG, PromptDocument
from .headers import HeaderBlock, parse_headers, split_document

__all__ = [
    "HeaderBlock",
    "PromptDocument",
    "parse_headers",
    "split_document",
    "HEADER_IN",
    "HEADER_OUT",
    "HEADER_SYSMSG",
]
