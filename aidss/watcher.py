"""
File system watcher that triggers node processing.
Uses watchdog for change detection across the whole tree.

Events are delivered on the observer thread; each one runs the node
pipeline synchronously, and the pipeline's lock serializes them.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .core.node import NodeProcessor, handle_pdf

logger = logging.getLogger("aidss.watcher")


class NodeEventHandler(FileSystemEventHandler):
    """Dispatches prompt-document and PDF changes to the pipeline."""

    def __init__(
        self,
        processor: NodeProcessor,
        debounce: float = 0.5,
        pdf_handler: Optional[Callable[[Path], object]] = handle_pdf,
    ):
        """
        Args:
            processor: Pipeline to run when a prompt document changes
            debounce: Seconds to ignore repeat events for the same file
                (editors often write a file several times per save)
            pdf_handler: Called with the path of a changed PDF, or None to ignore PDFs
        """
        self.processor = processor
        self.debounce = debounce
        self.pdf_handler = pdf_handler
        self.last_event_times: dict[str, float] = {}

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            logger.info(f"New node directory: {event.src_path}")
            return
        self.dispatch_path(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self.dispatch_path(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # editors that save via rename produce a move onto the real name
        if not event.is_directory:
            self.dispatch_path(event.dest_path)

    def _debounced(self, path: Path) -> bool:
        now = time.monotonic()
        last = self.last_event_times.get(str(path))
        if last is not None and now - last < self.debounce:
            logger.debug(f"Debounced event for {path.name} ({now - last:.3f}s since last)")
            return True
        # drop paths whose window has passed
        self.last_event_times = {
            p: t for p, t in self.last_event_times.items() if now - t < self.debounce
        }
        self.last_event_times[str(path)] = now
        return False

    def dispatch_path(self, path: Union[str, bytes, Path]) -> None:
        """Route a changed file to the matching handler."""
        if isinstance(path, bytes):
            path = path.decode()
        path = Path(path)

        if path.name == self.processor.prompt_name:
            if self._debounced(path):
                return
            logger.info(f"Detected change in: {path}")
            self.processor.handle(path.parent)
        elif path.suffix.lower() == ".pdf" and self.pdf_handler is not None:
            if self._debounced(path):
                return
            logger.info(f"Detected PDF attachment: {path}")
            self.pdf_handler(path)


def start_watching(
    root: Union[str, Path],
    handler: FileSystemEventHandler,
    polling: bool = False,
) -> Observer:
    """Watch ``root`` recursively and return the started observer.

    New subdirectories are picked up automatically by the recursive watch.
    """
    observer = PollingObserver() if polling else Observer()
    observer.schedule(handler, str(root), recursive=True)
    observer.start()
    logger.info(f"Started watching: {root}")
    return observer
