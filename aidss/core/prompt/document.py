"""Typed view of a parsed prompt document."""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..exceptions import MalformedDocument
from .headers import HeaderBlock, parse_headers

HEADER_IN = "In"
HEADER_OUT = "Out"
HEADER_SYSMSG = "Sysmsg"


@dataclass(frozen=True)
class PromptDocument:
    """One conversational turn: attachments, expected outputs, instructions, body."""

    input_files: tuple[str, ...] = ()
    output_files: tuple[str, ...] = ()
    system_message: str = ""
    body: str = ""

    @classmethod
    def from_headers(cls, block: HeaderBlock) -> "PromptDocument":
        """Interpret In/Out/Sysmsg; every other header is ignored."""
        return cls(
            input_files=tuple(block.get(HEADER_IN).split()),
            output_files=tuple(block.get(HEADER_OUT).split()),
            system_message=block.get(HEADER_SYSMSG),
            body=block.body,
        )

    @classmethod
    def parse(cls, text: str) -> "PromptDocument":
        return cls.from_headers(parse_headers(text))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PromptDocument":
        """Read and parse a prompt document from disk.

        Raises:
            MalformedDocument: with ``path`` set to the offending file
            OSError: if the file cannot be read
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        try:
            return cls.parse(text)
        except MalformedDocument as e:
            e.path = str(path)
            raise
