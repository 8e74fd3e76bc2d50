"""Utilities for aidss."""

from .output import console, handle_error, print_error, print_success, print_warning

__all__ = ["console", "handle_error", "print_error", "print_success", "print_warning"]
