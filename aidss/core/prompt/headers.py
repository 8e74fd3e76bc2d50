"""Header/body splitting for prompt documents.

A prompt document looks like an email message:

    In: notes.txt
      more-notes.txt
    Out: result.txt
    Sysmsg: be terse

    Summarize.

Everything before the first blank line is headers, everything after is the
body. Indented lines continue the previous header.
"""

from dataclasses import dataclass, field

from ..exceptions import MalformedDocument

SEPARATOR = "\n\n"


@dataclass
class HeaderBlock:
    """Raw header values and the untouched body text."""

    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def get(self, name: str, default: str = "") -> str:
        return self.headers.get(name, default)


def split_document(text: str) -> tuple[str, str]:
    """Split document text at the first blank line.

    Raises:
        MalformedDocument: if there is no blank line
    """
    header_text, sep, body = text.partition(SEPARATOR)
    if not sep:
        raise MalformedDocument("missing blank line between headers and body")
    return header_text, body


def parse_headers(text: str) -> HeaderBlock:
    """Parse document text into a HeaderBlock.

    Continuation lines (leading whitespace) are stripped and appended to the
    open header with a single space. A header name seen again starts over
    rather than appending to its earlier value.

    Raises:
        MalformedDocument: on a missing separator, a header line without a
            colon, or a continuation line before any header
    """
    header_text, body = split_document(text)
    headers: dict[str, str] = {}
    current = None

    for line_num, line in enumerate(header_text.split("\n"), start=1):
        if not line.strip():
            continue

        if line[0].isspace():
            if current is None:
                raise MalformedDocument(
                    "continuation line before any header", line_number=line_num
                )
            headers[current] = f"{headers[current]} {line.strip()}"
            continue

        name, colon, value = line.partition(":")
        if not colon:
            raise MalformedDocument(
                f"header line without colon: {line!r}", line_number=line_num
            )
        current = name.strip()
        headers[current] = value.strip()

    return HeaderBlock(headers=headers, body=body)
