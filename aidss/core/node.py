"""
Node processing - one conversational turn per directory.

Processing a node:
    prompt.txt -> PromptDocument -> context (root..node) + Sysmsg
    -> attachments -> backend -> response.txt -> OUT sections -> files

All node work in the process runs under one lock, so a change event for
one branch waits while another branch is mid-turn. Parse and attachment
errors abort before the backend is called; nothing is written for a turn
that fails before the reply arrives.
"""

import json
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional, Union

from .attachments import build_user_content, resolve_attachments
from .context import DEFAULT_PROMPT_NAME, DEFAULT_RESPONSE_NAME, build_context_messages
from .exceptions import AidssError, BackendFailure
from .extractor import ExtractionReport, atomic_write, extract_outputs
from .logging import get_node_logger
from .messages import Message, Role
from .pdf import extract_pdf_text
from .prompt import PromptDocument

if TYPE_CHECKING:
    from ..adapters.base import AdapterBase
    from .config import Config

logger = logging.getLogger("aidss.core.node")

# Serializes every node operation in the process.
NODE_LOCK = threading.Lock()

SUMMARY_FILENAME = "summary.txt"
METRICS_FILENAME = "metrics.json"
SUMMARY_PROMPT = "Please provide a concise summary of the following conversation:\n\n{text}"


def call_backend(adapter: "AdapterBase", messages: list[Message]) -> str:
    """Call the adapter, reporting any failure as BackendFailure."""
    try:
        return adapter.generate(messages)
    except BackendFailure:
        raise
    except Exception as e:
        raise BackendFailure(adapter.name, str(e), adapter.config.model) from e


@dataclass
class NodeResult:
    """Outcome of one processed turn."""

    node: Path
    document: PromptDocument
    messages: list[Message]
    reply: str
    response_path: Path
    report: ExtractionReport
    duration: float

    def metrics(self) -> dict:
        return {
            "node": str(self.node),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "duration_seconds": round(self.duration, 3),
            "messages": len(self.messages),
            "input_files": list(self.document.input_files),
            "output_files": list(self.document.output_files),
            "reply_chars": len(self.reply),
            **self.report.to_dict(),
        }


class NodeProcessor:
    """Runs conversational turns for nodes under one tree root.

    The adapter is injected; the processor never looks one up.
    """

    def __init__(
        self,
        adapter: "AdapterBase",
        root: Union[str, Path],
        prompt_name: str = DEFAULT_PROMPT_NAME,
        response_name: str = DEFAULT_RESPONSE_NAME,
        lock: Optional[threading.Lock] = None,
        write_metrics: bool = True,
    ):
        self.adapter = adapter
        self.root = Path(root).resolve()
        self.prompt_name = prompt_name
        self.response_name = response_name
        self.lock = lock or NODE_LOCK
        self.write_metrics = write_metrics

    @classmethod
    def from_config(cls, adapter: "AdapterBase", root: Union[str, Path], config: "Config") -> "NodeProcessor":
        return cls(
            adapter,
            root,
            prompt_name=config.files.prompt,
            response_name=config.files.response,
            write_metrics=config.metrics_enabled,
        )

    @property
    def base_dir(self) -> Path:
        """Directory that In: and Out: paths are relative to."""
        return self.root.parent

    def build_messages(self, node: Path, document: PromptDocument) -> list[Message]:
        """Assemble the outgoing request for ``node``.

        Raises:
            AttachmentNotFound: if any declared input file cannot be read
        """
        messages = build_context_messages(node, self.root, self.prompt_name, self.response_name)
        if document.system_message:
            messages.append(Message(Role.SYSTEM, document.system_message))
        attachments = resolve_attachments(document.input_files, self.base_dir)
        messages.append(Message(Role.USER, build_user_content(document.body, attachments)))
        return messages

    def process(self, node: Union[str, Path]) -> NodeResult:
        """Run one turn for ``node``.

        Raises:
            MalformedDocument: prompt document cannot be parsed
            AttachmentNotFound: a declared input file cannot be read
            BackendFailure: the backend call failed
            OSError: the prompt document or reply artifact cannot be read/written
        """
        node = Path(node).resolve()
        log = get_node_logger("aidss.core.node", node, self.root)

        with self.lock:
            start = time.monotonic()
            document = PromptDocument.from_file(node / self.prompt_name)
            messages = self.build_messages(node, document)
            log.info(
                f"Sending {len(messages)} messages "
                f"({len(document.input_files)} attachments) to {self.adapter.name}"
            )

            reply = call_backend(self.adapter, messages)
            response_path = atomic_write(node / self.response_name, reply)
            log.info(f"LLM response written to: {response_path}")

            report = extract_outputs(reply, document.output_files, self.base_dir)
            result = NodeResult(
                node=node,
                document=document,
                messages=messages,
                reply=reply,
                response_path=response_path,
                report=report,
                duration=time.monotonic() - start,
            )

            if self.write_metrics:
                try:
                    write_metrics(node, result.metrics())
                except OSError as e:
                    log.warning(f"Error writing metrics: {e}")

        return result

    def handle(self, node: Union[str, Path]) -> Optional[NodeResult]:
        """Process ``node`` for an event source; log failures, never raise."""
        log = get_node_logger("aidss.core.node", node, self.root)
        try:
            return self.process(node)
        except AidssError as e:
            log.error(f"Error processing node: {e}")
        except OSError as e:
            log.error(f"I/O error processing node: {e}")
        except Exception:
            log.exception("Unexpected error processing node")
        return None


def sanitize_descriptor(descriptor: str) -> str:
    """Make a descriptor safe for use in a directory name."""
    for ch in (" ", "/", "\\"):
        descriptor = descriptor.replace(ch, "_")
    return descriptor


def create_node(parent: Union[str, Path], descriptor: str) -> Path:
    """Create a new child node ``<descriptor>_<uuid>`` under ``parent``."""
    path = Path(parent) / f"{sanitize_descriptor(descriptor)}_{uuid.uuid4()}"
    path.mkdir()
    logger.info(f"Created node: {path}")
    return path


def write_metrics(node: Union[str, Path], metrics: dict) -> Path:
    """Write ``metrics.json`` for a node."""
    path = atomic_write(Path(node) / METRICS_FILENAME, json.dumps(metrics, indent=2, default=str))
    logger.debug(f"Metrics updated at: {path}")
    return path


def summarize_node(
    node: Union[str, Path],
    root: Union[str, Path],
    adapter: "AdapterBase",
    prompt_name: str = DEFAULT_PROMPT_NAME,
    response_name: str = DEFAULT_RESPONSE_NAME,
    lock: Optional[threading.Lock] = None,
) -> Path:
    """Ask the backend to summarize the conversation down to ``node``.

    Writes ``summary.txt`` in the node and returns its path.

    Raises:
        BackendFailure: if the backend call fails
    """
    node = Path(node)
    with lock or NODE_LOCK:
        context = build_context_messages(node, root, prompt_name, response_name)
        text = "".join(f"{m.role.value}: {m.content}\n" for m in context)
        request = [Message(Role.USER, SUMMARY_PROMPT.format(text=text))]
        summary = call_backend(adapter, request)
        path = atomic_write(node / SUMMARY_FILENAME, summary)
    logger.info(f"Summary written to: {path}")
    return path


def handle_pdf(
    pdf_path: Union[str, Path],
    extract: Callable[[Path], str] = extract_pdf_text,
    lock: Optional[threading.Lock] = None,
) -> Optional[Path]:
    """Save the text of a PDF beside it as ``<name>.pdf.txt``.

    Failures are logged and return None.
    """
    pdf_path = Path(pdf_path)
    with lock or NODE_LOCK:
        try:
            text = extract(pdf_path)
            txt_path = atomic_write(pdf_path.with_name(pdf_path.name + ".txt"), text)
        except AidssError as e:
            logger.error(f"Error extracting text from PDF: {e}")
            return None
        except OSError as e:
            logger.error(f"Error writing extracted text: {e}")
            return None
    logger.info(f"Extracted text from PDF saved to: {txt_path}")
    return txt_path
