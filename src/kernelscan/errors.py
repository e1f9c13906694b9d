"""
kernelscan Error Hierarchy
==========================

This module defines the exception hierarchy for kernelscan.
All exceptions inherit from KernelScanError, allowing callers to catch
every scanner-related error with a single except clause.

Exception Hierarchy
-------------------
KernelScanError (base)
├── HashTableError - no collision-free function-name table width exists
├── SourceAccessError - a path cannot be stat'ed, listed or opened
└── UnexpectedEndOfInput - input ended in the middle of a statement

Severity
--------
HashTableError is fatal: nothing can be scanned without the name table.
SourceAccessError only skips the offending path, and UnexpectedEndOfInput
only ends the scan of the current file. Counters accumulated before either
of them remain valid.
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in a scanned source file.

    Attributes:
        filename: Path of the source file (or "<stdin>")
        line: Physical line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Base Exception Class
# =============================================================================

class KernelScanError(Exception):
    """
    Base exception for all kernelscan errors.

        try:
            scanner.scan_paths(["drivers/"])
        except KernelScanError as e:
            print(f"Error: {e}")
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


# =============================================================================
# Specific Errors
# =============================================================================

class HashTableError(KernelScanError):
    """
    No table width in the search range maps the function names without
    a collision.

    Raised once at startup while building the FunctionNameTable. The only
    fix is a larger ceiling or a different name list.
    """

    def __init__(self, floor: int, ceiling: int, count: int):
        self.floor = floor
        self.ceiling = ceiling
        self.count = count
        super().__init__(
            f"no collision-free hash table width for {count} names "
            f"in range [{floor}, {ceiling}); increase the table ceiling"
        )


class SourceAccessError(KernelScanError):
    """
    A path could not be stat'ed, listed or opened.

    The message mirrors the classic errno report, for example:

        Cannot stat missing.c, errno=2 (No such file or directory)
    """

    def __init__(self, action: str, path: str, error: OSError):
        self.action = action
        self.path = path
        self.errno = error.errno
        self.strerror = error.strerror
        super().__init__(
            f"Cannot {action} {path}, errno={error.errno} ({error.strerror})"
        )


class UnexpectedEndOfInput(KernelScanError):
    """
    The input ended while a statement was still being reconstructed.

    This is not a user-facing failure: the scanner catches it and simply
    stops scanning the current file.
    """

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__("unexpected end of input inside statement", location)
