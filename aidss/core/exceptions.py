"""
Custom exceptions for aidss.

Fatal errors abort processing of a single node and carry an exit code for
the one-shot CLI. Extraction warnings are collected in an ExtractionReport
rather than raised, so one bad section never blocks its siblings.
All errors support JSON serialization via --json-errors.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional


class ExitCode:
    """Standard exit codes for aidss."""
    SUCCESS = 0
    GENERAL_ERROR = 1
    MALFORMED_DOCUMENT = 2
    ATTACHMENT_NOT_FOUND = 3
    BACKEND_FAILURE = 4
    EXTRACTION_INCOMPLETE = 5
    TEXT_EXTRACTION_FAILED = 6


class AidssError(Exception):
    """Base class for errors that abort processing of a node."""

    @property
    def exit_code(self) -> int:
        return ExitCode.GENERAL_ERROR


@dataclass
class MalformedDocument(AidssError):
    """Raised when a prompt document cannot be split into headers and body.

    Attributes:
        reason: What was wrong with the document
        line_number: 1-based header line that failed, if known
        path: Source file, if parsed from disk
    """
    reason: str
    line_number: Optional[int] = None
    path: Optional[str] = None

    def __str__(self) -> str:
        where = self.path or "prompt document"
        if self.line_number is not None:
            where = f"{where}:{self.line_number}"
        return f"Malformed document ({where}): {self.reason}"

    @property
    def exit_code(self) -> int:
        return ExitCode.MALFORMED_DOCUMENT


@dataclass
class AttachmentNotFound(AidssError):
    """Raised when a declared input file cannot be read.

    Attributes:
        path: The path as declared in the In header
        resolved_path: Absolute path that was tried
        reason: Underlying OS or decode error
    """
    path: str
    resolved_path: Optional[str] = None
    reason: Optional[str] = None

    def __str__(self) -> str:
        detail = f": {self.reason}" if self.reason else ""
        return f"Cannot read attachment {self.path}{detail}"

    @property
    def exit_code(self) -> int:
        return ExitCode.ATTACHMENT_NOT_FOUND


@dataclass
class BackendFailure(AidssError):
    """Raised when the model backend returns an error.

    Attributes:
        adapter: Name of the adapter that failed
        details: Human-readable explanation
        model: Model requested, if known
    """
    adapter: str
    details: str
    model: Optional[str] = None

    def __str__(self) -> str:
        model_info = f" ({self.model})" if self.model else ""
        return f"Backend {self.adapter}{model_info} failed: {self.details}"

    @property
    def exit_code(self) -> int:
        return ExitCode.BACKEND_FAILURE


@dataclass
class TextExtractionFailed(AidssError):
    """Raised when text cannot be extracted from a binary attachment."""
    path: str
    reason: str

    def __str__(self) -> str:
        return f"Cannot extract text from {self.path}: {self.reason}"

    @property
    def exit_code(self) -> int:
        return ExitCode.TEXT_EXTRACTION_FAILED


class ExtractionWarning(Warning):
    """Base class for non-fatal problems found while reconciling a reply."""


@dataclass
class DeclaredOutputMissing(ExtractionWarning):
    """A declared output file has no matching section in the reply."""
    filename: str

    def __str__(self) -> str:
        return (
            f"Filename {self.filename} specified in Out: header "
            "but not found in reply"
        )


@dataclass
class UndeclaredOutputFound(ExtractionWarning):
    """A section in the reply names a file that was not declared."""
    filename: str

    def __str__(self) -> str:
        return (
            f"Filename {self.filename} found in reply "
            "but not specified in Out: header"
        )


@dataclass
class NoSectionsFound(ExtractionWarning):
    """The reply contains no sections although outputs were declared."""
    declared: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"No OUT sections found in reply "
            f"(expected {len(self.declared)}: {', '.join(self.declared)})"
        )


@dataclass
class UnterminatedSection(ExtractionWarning):
    """A section was opened but never closed before the end of the reply."""
    filename: Optional[str] = None
    offset: int = 0

    def __str__(self) -> str:
        name = self.filename or "<unnamed>"
        return f"Section {name} opened at offset {self.offset} is never closed"


def exception_to_json(exc: Exception, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Convert an exception to a JSON-serializable dictionary.

    Args:
        exc: The exception to convert
        context: Optional additional context (node, root, etc.)

    Returns:
        JSON-serializable dict with error details
    """
    error_dict: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": str(exc),
    }

    if hasattr(exc, "exit_code"):
        error_dict["exit_code"] = exc.exit_code
    else:
        error_dict["exit_code"] = ExitCode.GENERAL_ERROR

    if isinstance(exc, MalformedDocument):
        error_dict["reason"] = exc.reason
        if exc.line_number is not None:
            error_dict["line_number"] = exc.line_number
        if exc.path:
            error_dict["path"] = exc.path

    elif isinstance(exc, AttachmentNotFound):
        error_dict["path"] = exc.path
        if exc.resolved_path:
            error_dict["resolved_path"] = exc.resolved_path
        if exc.reason:
            error_dict["reason"] = exc.reason

    elif isinstance(exc, BackendFailure):
        error_dict["adapter"] = exc.adapter
        error_dict["details"] = exc.details[:2000]
        if exc.model:
            error_dict["model"] = exc.model

    elif isinstance(exc, TextExtractionFailed):
        error_dict["path"] = exc.path
        error_dict["reason"] = exc.reason

    if context:
        error_dict["context"] = context

    return {"error": error_dict}


def format_json_error(exc: Exception, context: Optional[dict[str, Any]] = None) -> str:
    """Format an exception as a JSON string."""
    return json.dumps(exception_to_json(exc, context), indent=2, default=str)
