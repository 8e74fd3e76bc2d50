"""
Logging configuration for aidss.

Provides centralized logging setup with verbosity levels:
- 0 (default): WARNING - errors and extraction warnings only
- 1 (-v):      INFO - nodes processed, files written
- 2 (-vv):     DEBUG - context sizes, attachments, scanner decisions
- 3+ (-vvv):   TRACE - full outgoing messages and raw replies

NodeLoggerAdapter prefixes messages with the node being processed so
interleaved watcher output stays readable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

# Custom TRACE level (more verbose than DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self, message, *args, **kwargs):
    """Log at TRACE level."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


# Add trace method to Logger class
logging.Logger.trace = trace


def node_label(node: Union[str, Path], root: Optional[Union[str, Path]] = None) -> str:
    """Short display name for a node: its path relative to the tree root.

    Examples:
        root/           -> .
        root/a_1/b_2    -> a_1/b_2
        /elsewhere/x    -> /elsewhere/x
    """
    node = Path(node)
    if root is not None:
        try:
            rel = node.resolve().relative_to(Path(root).resolve())
            return rel.as_posix() or "."
        except ValueError:
            pass
    return str(node)


class NodeLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that includes the node label in messages.

    Usage:
        logger = NodeLoggerAdapter(get_logger("aidss.core.node"), "a_1/b_2")
        logger.info("Reply written")  # Logs: [a_1/b_2] Reply written
    """

    def __init__(self, logger: logging.Logger, node: str):
        super().__init__(logger, {})
        self.node = node

    def process(self, msg, kwargs):
        if self.node:
            return f"[{self.node}] {msg}", kwargs
        return msg, kwargs

    def trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self.log(TRACE, msg, *args, **kwargs)


def setup_logging(verbosity: int = 0, quiet: bool = False) -> logging.Logger:
    """Configure logging based on verbosity level.

    Args:
        verbosity: Number of -v flags (0=WARNING, 1=INFO, 2=DEBUG, 3+=TRACE)
        quiet: If True, suppress all output except errors

    Returns:
        The configured root logger for aidss
    """
    if quiet:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    elif verbosity == 2:
        level = logging.DEBUG
    else:  # verbosity >= 3
        level = TRACE

    logger = logging.getLogger("aidss")
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if verbosity >= 2:
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        datefmt = "%H:%M:%S"
    elif verbosity == 1:
        fmt = "%(asctime)s [%(levelname)s] %(message)s"
        datefmt = "%H:%M:%S"
    else:
        fmt = "%(message)s"
        datefmt = None

    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    logger.addHandler(handler)

    # At TRACE level, also enable debug for external libs (watchdog, openai)
    if verbosity >= 3:
        logging.getLogger().setLevel(logging.DEBUG)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (e.g., "aidss.core.node").
              If None, returns the root aidss logger.
    """
    if name is None:
        return logging.getLogger("aidss")
    return logging.getLogger(name)


def get_node_logger(
    name: str,
    node: Union[str, Path],
    root: Optional[Union[str, Path]] = None,
) -> NodeLoggerAdapter:
    """Get a logger whose messages are prefixed with the node label."""
    return NodeLoggerAdapter(get_logger(name), node_label(node, root))
