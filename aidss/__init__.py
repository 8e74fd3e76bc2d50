"""
aidss - AI Decision Support System

A branching, file-system-resident conversation with a language model.
Each directory is a conversation node; its prompt.txt declares context,
attachments, a system message and expected output files.
"""

__version__ = "0.1.0"

from .core.node import NodeProcessor
from .core.prompt import PromptDocument

__all__ = ["NodeProcessor", "PromptDocument", "__version__"]
