"""
Attachment resolution for the In: header.

Declared input files are resolved against the parent of the watched root,
not against the node, so a conversation can reference project files that
live beside the tree. Attachments are all-or-nothing: one unreadable file
aborts the turn before the backend is called.
"""

import html
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

from .exceptions import AttachmentNotFound, TextExtractionFailed
from .pdf import extract_pdf_text

logger = logging.getLogger("aidss.core.attachments")

ATTACHMENT_TAG = "IN"
ATTACHMENT_PREAMBLE = "The following files are attached:\n"

# suffix -> callable(path) -> text
DEFAULT_EXTRACTORS: dict[str, Callable[[Path], str]] = {
    ".pdf": extract_pdf_text,
}


def project_path(base_dir: Union[str, Path], name: str) -> Path:
    """Join a declared In:/Out: path onto ``base_dir``.

    Absolute names lose their anchor, so "/etc/x" becomes ``base_dir/etc/x``.
    """
    relative = Path(name)
    if relative.anchor:
        relative = relative.relative_to(relative.anchor)
    return Path(base_dir) / relative


@dataclass
class Attachment:
    """A declared input file and its text."""

    name: str  # As declared, relative to base_dir
    path: Path
    content: str


def resolve_attachments(
    input_files: Iterable[str],
    base_dir: Union[str, Path],
    extractors: Optional[dict[str, Callable[[Path], str]]] = None,
) -> list[Attachment]:
    """Read every declared input file, in declared order.

    Args:
        input_files: Paths from the In: header
        base_dir: Directory the paths are relative to (parent of the tree root)
        extractors: Text extractors by lowercase suffix; defaults to PDF support

    Raises:
        AttachmentNotFound: naming the first file that cannot be read
    """
    if extractors is None:
        extractors = DEFAULT_EXTRACTORS
    base_dir = Path(base_dir)

    attachments = []
    for name in input_files:
        path = project_path(base_dir, name)
        extract = extractors.get(path.suffix.lower())
        try:
            if extract is not None:
                content = extract(path)
            else:
                content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError, TextExtractionFailed) as e:
            raise AttachmentNotFound(name, resolved_path=str(path), reason=str(e)) from e
        logger.debug(f"Attached {name} ({len(content)} chars)")
        attachments.append(Attachment(name=name, path=path, content=content))
    return attachments


def render_attachment(attachment: Attachment) -> str:
    name = html.escape(attachment.name, quote=True)
    return (
        f'<{ATTACHMENT_TAG} filename="{name}">\n'
        f"{attachment.content}\n"
        f"</{ATTACHMENT_TAG}>\n"
    )


def render_attachments(attachments: Iterable[Attachment]) -> str:
    """Render attachments as delimited blocks, concatenated in order."""
    return "".join(render_attachment(a) for a in attachments)


def build_user_content(body: str, attachments: list[Attachment]) -> str:
    """Compose the outgoing user message from the prompt body and attachments."""
    content = f"{body}\n\n"
    if attachments:
        content += ATTACHMENT_PREAMBLE + render_attachments(attachments) + "\n"
    return content
