"""
Source Scanner
==============

Drives the lexer and the statement reconstructor over source files and
reports every logging call that carries a string literal.

Pipeline
--------
    file bytes → PushbackStream → Lexer → FunctionNameTable (gate)
               → StatementReconstructor → Finding → output

Output Format
-------------
Each file with at least one finding produces a block:

    Source: drivers/acpi/osl.c
    printk(KERN_ERR PREFIX "Cannot map %s\\n", name)
    pr_warn("Unable to map memory")
    <blank line>

Files without findings produce no output. After all paths have been
scanned, summary() gives the totals:

    <blank line>
    12 files scanned
    8190 lines scanned
    97 statements found

Scan State
----------
All counters live on the Scanner instance, so independent scans never
share state. The FunctionNameTable is immutable and shared freely.
"""

import io
import logging
import os
import stat
import sys
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Optional, TextIO, Union

from kernelscan.errors import SourceAccessError, UnexpectedEndOfInput
from kernelscan.funcnames import FunctionNameTable, default_table
from kernelscan.lexer import Lexer
from kernelscan.reconstructor import Finding, StatementReconstructor
from kernelscan.stream import DECODE_ERRORS, PushbackStream


logger = logging.getLogger(__name__)


# File name suffixes scanned by default (case-sensitive)
DEFAULT_EXTENSIONS: tuple[str, ...] = (".c", ".h", ".cpp")

# Path reported for standard input
STDIN_PATH = "<stdin>"


# =============================================================================
# Options and Counters
# =============================================================================

@dataclass
class ScanOptions:
    """
    Scanner configuration options.

    Attributes:
        escape_strip: Strip C escape sequences from string literals
        recursive: Descend into subdirectories of directory arguments
        extensions: File name suffixes that are scanned
        encoding: Encoding used to decode source files and to encode
                  findings; undecodable bytes pass through unchanged
    """
    escape_strip: bool = False
    recursive: bool = False
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    encoding: str = "utf-8"


@dataclass
class ScanCounters:
    """Totals accumulated over a run."""
    files: int = 0
    lines: int = 0
    finds: int = 0


# =============================================================================
# Scanner
# =============================================================================

class Scanner:
    """
    Scans C sources for kernel logging statements.

    Usage:
        scanner = Scanner(ScanOptions(recursive=True))
        scanner.scan_paths(["drivers/acpi"])
        print(scanner.summary())

    Attributes:
        options: The ScanOptions in effect
        table: Function names that trigger reconstruction
        out: Where findings are written
        counters: Running totals for this scanner
    """

    def __init__(
        self,
        options: Optional[ScanOptions] = None,
        table: Optional[FunctionNameTable] = None,
        out: Optional[TextIO] = None,
    ):
        self.options = options if options is not None else ScanOptions()
        self.table = table if table is not None else default_table()
        self.out = out if out is not None else sys.stdout
        self.counters = ScanCounters()

    # =========================================================================
    # Per-File Scanning
    # =========================================================================

    def scan(self, path: str, stream: Union[PushbackStream, BinaryIO, TextIO]) -> list[Finding]:
        """
        Scan one source stream to completion, printing its findings.

        Args:
            path: Name reported in the "Source:" header and in findings
            stream: A PushbackStream, or a raw stream to wrap in one

        Returns:
            The findings of this stream, in source order
        """
        if not isinstance(stream, PushbackStream):
            stream = PushbackStream(stream, self.options.encoding)

        lexer = Lexer(stream, escape_strip=self.options.escape_strip)
        reconstructor = StatementReconstructor(lexer, self.table)
        findings: list[Finding] = []

        try:
            for token in lexer.tokens():
                if not reconstructor.is_recognized(token):
                    continue

                finding = reconstructor.reconstruct(token, path)
                if finding is None:
                    continue

                if not findings:
                    self._write(f"Source: {path}")
                self._write(finding.text)
                findings.append(finding)
                self.counters.finds += 1
        except UnexpectedEndOfInput as e:
            logger.debug(f"{e}, stopping scan of {path}")
        finally:
            self.counters.lines += lexer.lines

        if findings:
            self._write("")

        logger.debug(f"Scanned {path}: {lexer.lines} lines, {len(findings)} statements")
        return findings

    def scan_file(self, path: Union[str, os.PathLike]) -> list[Finding]:
        """
        Open and scan a single file, regardless of its extension.

        Raises:
            SourceAccessError: If the file cannot be opened
        """
        path = os.fspath(path)
        try:
            handle = open(path, "rb")
        except OSError as e:
            raise SourceAccessError("open", path, e) from e

        with handle:
            findings = self.scan(path, PushbackStream(handle, self.options.encoding))

        self.counters.files += 1
        return findings

    def scan_stdin(self, source: Optional[BinaryIO] = None) -> list[Finding]:
        """Scan standard input (or the given binary stream) as '<stdin>'."""
        if source is None:
            source = sys.stdin.buffer

        findings = self.scan(STDIN_PATH, PushbackStream(source, self.options.encoding))
        self.counters.files += 1
        return findings

    # =========================================================================
    # Path Traversal
    # =========================================================================

    def scan_paths(self, paths: Iterable[Union[str, os.PathLike]]) -> list[Finding]:
        """Scan each path in turn; see scan_path()."""
        findings: list[Finding] = []
        for path in paths:
            findings += self.scan_path(path)
        return findings

    def scan_path(self, path: Union[str, os.PathLike]) -> list[Finding]:
        """
        Scan a file or a directory.

        Regular files are scanned when their name ends in one of the
        configured extensions. A directory is always listed; its own
        subdirectories are only entered in recursive mode.

        Paths that cannot be accessed are reported through the log and
        skipped, so one bad path never stops the run.
        """
        return self._visit(os.fspath(path), list_directory=True)

    def _visit(self, path: str, list_directory: bool) -> list[Finding]:
        try:
            try:
                st = os.stat(path)
            except OSError as e:
                raise SourceAccessError("stat", path, e) from e

            if stat.S_ISREG(st.st_mode):
                if path.endswith(self.options.extensions):
                    return self.scan_file(path)
                return []

            if stat.S_ISDIR(st.st_mode) and list_directory:
                return self._scan_directory(path)

            logger.debug(f"Skipping {path}")
            return []
        except SourceAccessError as e:
            logger.error(str(e))
            return []

    def _scan_directory(self, path: str) -> list[Finding]:
        try:
            names = sorted(os.listdir(path))
        except OSError as e:
            raise SourceAccessError("open directory", path, e) from e

        findings: list[Finding] = []
        for name in names:
            findings += self._visit(os.path.join(path, name), self.options.recursive)
        return findings

    # =========================================================================
    # Reporting
    # =========================================================================

    def summary(self) -> str:
        """Return the end-of-run report (starts with a blank line)."""
        return (
            f"\n{self.counters.files} files scanned\n"
            f"{self.counters.lines} lines scanned\n"
            f"{self.counters.finds} statements found"
        )

    def _write(self, text: str) -> None:
        """
        Write one output line.

        A text stream backed by a byte buffer (like sys.stdout) receives
        the encoded bytes directly, so source bytes that did not decode
        are written back exactly as they were read.
        """
        buffer = getattr(self.out, "buffer", None)
        if buffer is None:
            self.out.write(text + "\n")
            return

        self.out.flush()
        buffer.write((text + "\n").encode(self.options.encoding, DECODE_ERRORS))


# =============================================================================
# Convenience Functions
# =============================================================================

def scan_source(
    source: str,
    path: str = "<input>",
    escape_strip: bool = False,
) -> list[Finding]:
    """
    Scan C source held in a string and return its findings.

    Nothing is printed; this is the entry point for library use and tests.

    Example:
        >>> [f.text for f in scan_source('pr_err("a" "b");')]
        ['pr_err("ab")']
    """
    scanner = Scanner(ScanOptions(escape_strip=escape_strip), out=io.StringIO())
    return scanner.scan(path, PushbackStream.from_string(source))
