"""
kernelscan - Kernel Log Statement Scanner
=========================================

This package scans C source trees for calls to kernel logging and
diagnostic functions (printk, pr_err, dev_warn, ACPI_ERROR, ...) and
prints each call on a single line with its split string literals glued
back together. The output feeds tools that match kernel log messages
against a database of known messages.

Main Components
---------------
- **stream**: character stream with unbounded pushback
- **lexer**: a small C tokenizer that never loses its place
- **funcnames**: collision-free hash table of recognized function names
- **reconstructor**: rebuilds one logging call into one line
- **scanner**: per-file scanning, directory traversal and totals

Quick Start
-----------
Scan a string:
    >>> from kernelscan import scan_source
    >>> for finding in scan_source('dev_err(dev, "bad " "thing\\n");'):
    ...     print(finding)
    dev_err(dev, "bad thing\\n")

Scan a tree:
    >>> from kernelscan import Scanner, ScanOptions
    >>> scanner = Scanner(ScanOptions(recursive=True))
    >>> findings = scanner.scan_paths(["drivers/acpi"])
    >>> print(scanner.summary())

Or use the command-line tool:
    $ kernelscan -r drivers/acpi
    $ cat drivers/pnp/pnpacpi/rsparser.c | kernelscan -e
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from kernelscan.errors import (
    KernelScanError,
    HashTableError,
    SourceAccessError,
    UnexpectedEndOfInput,
    SourceLocation,
)
from kernelscan.stream import EOF, PushbackStream
from kernelscan.lexer import Lexer, Token, TokenKind
from kernelscan.funcnames import (
    KERNEL_LOG_FUNCTIONS,
    FunctionNameTable,
    default_table,
    djb2a,
)
from kernelscan.reconstructor import Finding, StatementReconstructor
from kernelscan.scanner import (
    DEFAULT_EXTENSIONS,
    ScanCounters,
    ScanOptions,
    Scanner,
    scan_source,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "KernelScanError",
    "HashTableError",
    "SourceAccessError",
    "UnexpectedEndOfInput",
    "SourceLocation",
    # Stream and lexer
    "EOF",
    "PushbackStream",
    "Lexer",
    "Token",
    "TokenKind",
    # Function names
    "KERNEL_LOG_FUNCTIONS",
    "FunctionNameTable",
    "default_table",
    "djb2a",
    # Reconstruction and scanning
    "Finding",
    "StatementReconstructor",
    "DEFAULT_EXTENSIONS",
    "ScanCounters",
    "ScanOptions",
    "Scanner",
    "scan_source",
]
