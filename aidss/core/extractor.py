"""
Response extraction - write the files a model reply declares.

A reply may contain any number of sections:

    Here is the update.
    <OUT filename="src/app.py">
    ...file content...
    </OUT>

Section payloads are often source code or documentation that itself shows
the <OUT> syntax, so sections are matched with a depth-counting scan: an
opening tag inside a section increments the depth and only the close that
brings it back to zero ends the section. Only top-level sections are
extracted; nested tags stay in the payload verbatim.

Sections are then reconciled against the Out: header by exact filename.
Matched content is written atomically (temp file + rename) relative to the
parent of the watched root. Mismatches are reported as warnings and never
abort sibling writes.
"""

import contextlib
import html
import logging
import os
import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from .attachments import project_path
from .exceptions import (
    DeclaredOutputMissing,
    ExtractionWarning,
    NoSectionsFound,
    UndeclaredOutputFound,
    UnterminatedSection,
)

logger = logging.getLogger("aidss.core.extractor")

SECTION_TAG = "OUT"

_FILENAME_ATTR = re.compile(r"""\bfilename\s*=\s*(?:"([^"]*)"|'([^']*)')""")


def _token_pattern(tag: str) -> re.Pattern:
    # group 1: "/" for a closing tag; group 2: raw attribute text
    return re.compile(rf"<(/?){re.escape(tag)}\b([^>]*)>")


@dataclass
class ExtractedSection:
    """One top-level section of a reply."""

    filename: str
    content: str


@dataclass
class ScanResult:
    sections: list[ExtractedSection] = field(default_factory=list)
    unterminated: list[UnterminatedSection] = field(default_factory=list)


def _filename(attrs: str) -> Optional[str]:
    match = _FILENAME_ATTR.search(attrs)
    if not match:
        return None
    value = match.group(1) if match.group(1) is not None else match.group(2)
    return html.unescape(value)


def scan_sections(reply: str, tag: str = SECTION_TAG) -> ScanResult:
    """Find the top-level ``<tag filename="...">`` sections of a reply.

    Text outside sections is ignored. Closing tags with no open section are
    ignored. A section still open at the end of the reply is reported in
    ``unterminated`` and not returned.
    """
    result = ScanResult()
    depth = 0
    opening = None  # re.Match of the open top-level tag

    for token in _token_pattern(tag).finditer(reply):
        closing = token.group(1) == "/"
        attrs = token.group(2)

        if closing:
            if depth == 0:
                logger.debug(f"Ignoring stray </{tag}> at offset {token.start()}")
                continue
            depth -= 1
            if depth == 0:
                _add_section(
                    result, _filename(opening.group(2)),
                    reply[opening.end():token.start()], opening.start(),
                )
                opening = None
            continue

        if attrs.rstrip().endswith("/"):
            # self-closing: empty payload, depth unchanged
            if depth == 0:
                _add_section(result, _filename(attrs.rstrip()[:-1]), "", token.start())
            continue

        if depth == 0:
            opening = token
        depth += 1

    if opening is not None:
        result.unterminated.append(
            UnterminatedSection(_filename(opening.group(2)), opening.start())
        )
    return result


def _add_section(result: ScanResult, filename: Optional[str], content: str, offset: int) -> None:
    if filename is None:
        logger.warning(f"Skipping section without filename attribute at offset {offset}")
        return
    result.sections.append(ExtractedSection(filename, content))


def atomic_write(path: Union[str, Path], content: str) -> Path:
    """Write ``content`` so readers see either the old file or the new one.

    The temp file lives in the destination directory so the final rename
    stays on one filesystem. Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        mode = path.stat().st_mode & 0o777
    except FileNotFoundError:
        mode = 0o644

    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise
    return path


@dataclass
class ExtractionReport:
    """Outcome of reconciling a reply against the declared outputs."""

    written: list[Path] = field(default_factory=list)
    warnings: list[ExtractionWarning] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # filename -> error

    def warn(self, warning: ExtractionWarning) -> None:
        logger.warning(f"Warning: {warning}")
        self.warnings.append(warning)

    @property
    def missing(self) -> list[str]:
        return [w.filename for w in self.warnings if isinstance(w, DeclaredOutputMissing)]

    @property
    def unexpected(self) -> list[str]:
        return [w.filename for w in self.warnings if isinstance(w, UndeclaredOutputFound)]

    @property
    def no_sections(self) -> bool:
        return any(isinstance(w, NoSectionsFound) for w in self.warnings)

    @property
    def ok(self) -> bool:
        return not self.warnings and not self.failed

    def to_dict(self) -> dict:
        return {
            "written": [str(p) for p in self.written],
            "warnings": [f"{type(w).__name__}: {w}" for w in self.warnings],
            "failed": dict(self.failed),
        }


def extract_outputs(
    reply: str,
    output_files: Iterable[str],
    base_dir: Union[str, Path],
) -> ExtractionReport:
    """Write every declared output found in ``reply`` under ``base_dir``.

    Declared names are de-duplicated first. When the reply repeats a
    filename the last section wins.
    """
    base_dir = Path(base_dir)
    declared = list(dict.fromkeys(output_files))
    report = ExtractionReport()

    scan = scan_sections(reply)
    for warning in scan.unterminated:
        report.warn(warning)

    found: dict[str, str] = {}
    for section in scan.sections:
        if section.filename in found:
            logger.warning(f"Duplicate section for {section.filename}; keeping the last one")
        found[section.filename] = section.content

    if not found and declared:
        report.warn(NoSectionsFound(declared))
        return report

    for name in declared:
        if name not in found:
            report.warn(DeclaredOutputMissing(name))
            continue
        target = project_path(base_dir, name)
        try:
            atomic_write(target, found[name])
        except OSError as e:
            logger.error(f"Error writing {name}: {e}")
            report.failed[name] = str(e)
            continue
        logger.info(f"Updated file written to: {name}")
        report.written.append(target)

    for name in found:
        if name not in declared:
            report.warn(UndeclaredOutputFound(name))

    return report
