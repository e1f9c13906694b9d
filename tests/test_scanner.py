"""
Tests for the Scanner
=====================

These tests verify per-file scanning output, the run counters, path
traversal and the handling of inaccessible paths.
"""

import io
import logging
from pathlib import Path

import pytest

from kernelscan.scanner import (
    DEFAULT_EXTENSIONS,
    STDIN_PATH,
    ScanCounters,
    ScanOptions,
    Scanner,
)
from kernelscan.stream import PushbackStream


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def scanner(out):
    return Scanner(out=out)


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """
    A small source tree:

        top.c        1 finding, 2 lines
        notes.txt    ignored (extension)
        sub/deep.h   1 finding, 1 line
        sub/x.cpp    no findings, 3 lines
    """
    (tmp_path / "top.c").write_text('pr_err("top");\nint x;\n')
    (tmp_path / "notes.txt").write_text('pr_err("ignored");\n')
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "deep.h").write_text('dev_warn(dev, "deep");\n')
    (sub / "x.cpp").write_text("int a;\n\nint b;\n")
    return tmp_path


# =============================================================================
# Per-File Scanning
# =============================================================================

class TestScan:
    """Tests for Scanner.scan()."""

    def test_output_block(self, scanner, out):
        source = 'pr_err("a");\nint x;\ndev_err(dev, "b" "c");\n'
        findings = scanner.scan("foo.c", PushbackStream.from_string(source))
        assert [f.text for f in findings] == ['pr_err("a")', 'dev_err(dev, "bc")']
        assert out.getvalue() == (
            "Source: foo.c\n"
            'pr_err("a")\n'
            'dev_err(dev, "bc")\n'
            "\n"
        )

    def test_no_findings_no_output(self, scanner, out):
        scanner.scan("empty.c", PushbackStream.from_string("int main(void) { return 0; }\n"))
        assert out.getvalue() == ""

    def test_counters(self, scanner):
        source = 'pr_err("a");\n/* x\n */\nprintk(y);\npr_info("z");\n'
        scanner.scan("foo.c", PushbackStream.from_string(source))
        assert scanner.counters == ScanCounters(files=0, lines=4, finds=2)

    def test_raw_stream_is_wrapped(self, scanner):
        findings = scanner.scan("b.c", io.BytesIO(b'pr_info("bytes");'))
        assert findings[0].text == 'pr_info("bytes")'

    def test_utf8_literal(self, scanner):
        data = 'pr_info("café");\n'.encode("utf-8")
        findings = scanner.scan("u.c", io.BytesIO(data))
        assert findings[0].text == 'pr_info("café")'

    def test_end_of_input_mid_statement(self, scanner, out):
        """The file ends cleanly; counted lines and findings remain."""
        source = 'pr_err("a");\n\npr_err("b",\n'
        findings = scanner.scan("cut.c", PushbackStream.from_string(source))
        assert len(findings) == 1
        assert scanner.counters.lines == 3
        assert scanner.counters.finds == 1
        assert out.getvalue().endswith('pr_err("a")\n\n')

    def test_escape_strip_option(self, out):
        scanner = Scanner(ScanOptions(escape_strip=True), out=out)
        findings = scanner.scan("e.c", PushbackStream.from_string('pr_err("x\\ny\\n");'))
        assert findings[0].text == 'pr_err("x y")'

    def test_state_per_scanner(self, out):
        """Two scanners never share counters."""
        first = Scanner(out=out)
        second = Scanner(out=out)
        first.scan("a.c", PushbackStream.from_string('pr_err("a");\n'))
        assert second.counters == ScanCounters()


# =============================================================================
# Files and Directories
# =============================================================================

class TestPaths:
    """Tests for scan_file(), scan_path() and scan_paths()."""

    def test_scan_file(self, scanner, tree, out):
        findings = scanner.scan_file(tree / "top.c")
        assert len(findings) == 1
        assert scanner.counters == ScanCounters(files=1, lines=2, finds=1)
        assert out.getvalue().startswith(f"Source: {tree / 'top.c'}\n")

    def test_scan_path_filters_extension(self, scanner, tree):
        assert scanner.scan_path(tree / "notes.txt") == []
        assert scanner.counters.files == 0

    def test_directory_not_recursive(self, scanner, tree):
        findings = scanner.scan_path(tree)
        assert [f.text for f in findings] == ['pr_err("top")']
        assert scanner.counters == ScanCounters(files=1, lines=2, finds=1)

    def test_directory_recursive(self, tree, out):
        scanner = Scanner(ScanOptions(recursive=True), out=out)
        findings = scanner.scan_path(tree)
        assert [f.text for f in findings] == ['dev_warn(dev, "deep")', 'pr_err("top")']
        assert scanner.counters == ScanCounters(files=3, lines=6, finds=2)

    def test_sorted_traversal(self, tree, out):
        scanner = Scanner(ScanOptions(recursive=True), out=out)
        scanner.scan_path(tree)
        sources = [line for line in out.getvalue().splitlines() if line.startswith("Source:")]
        assert sources == [
            f"Source: {tree / 'sub' / 'deep.h'}",
            f"Source: {tree / 'top.c'}",
        ]

    def test_scan_paths(self, scanner, tree):
        findings = scanner.scan_paths([tree / "top.c", tree / "sub" / "deep.h"])
        assert len(findings) == 2
        assert scanner.counters.files == 2

    def test_custom_extensions(self, tree, out):
        scanner = Scanner(ScanOptions(extensions=(".txt",)), out=out)
        findings = scanner.scan_path(tree)
        assert [f.text for f in findings] == ['pr_err("ignored")']

    def test_default_extensions(self):
        assert DEFAULT_EXTENSIONS == (".c", ".h", ".cpp")

    def test_missing_path_reported(self, scanner, tmp_path, caplog):
        """A path that cannot be stat'ed is logged and skipped."""
        missing = tmp_path / "missing.c"
        with caplog.at_level(logging.ERROR):
            findings = scanner.scan_path(missing)
        assert findings == []
        assert f"Cannot stat {missing}, errno=2" in caplog.text
        assert scanner.counters == ScanCounters()

    def test_missing_path_does_not_stop_run(self, scanner, tree, caplog):
        with caplog.at_level(logging.ERROR):
            findings = scanner.scan_paths([tree / "nope.c", tree / "top.c"])
        assert len(findings) == 1
        assert "Cannot stat" in caplog.text

    def test_counter_accuracy(self, tmp_path, out):
        """N files with L newlines and F calls give exactly N, L, F."""
        for i in range(5):
            (tmp_path / f"f{i}.c").write_text(f'pr_info("{i}");\n' * (i + 1))
        scanner = Scanner(out=out)
        scanner.scan_path(tmp_path)
        assert scanner.counters == ScanCounters(files=5, lines=15, finds=15)


# =============================================================================
# Standard Input and Summary
# =============================================================================

class TestStdinAndSummary:
    """Tests for scan_stdin() and summary()."""

    def test_scan_stdin(self, scanner, out):
        findings = scanner.scan_stdin(io.BytesIO(b'printk("in");\n'))
        assert findings[0].path == STDIN_PATH
        assert out.getvalue().startswith("Source: <stdin>\n")
        assert scanner.counters == ScanCounters(files=1, lines=1, finds=1)

    def test_summary_format(self, scanner):
        scanner.counters = ScanCounters(files=3, lines=120, finds=7)
        assert scanner.summary() == (
            "\n3 files scanned\n"
            "120 lines scanned\n"
            "7 statements found"
        )

    def test_undecodable_bytes_written_back(self):
        """Bytes that are not valid UTF-8 reach a byte-backed output unchanged."""
        out = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        scanner = Scanner(out=out)
        scanner.scan_stdin(io.BytesIO(b'pr_info("caf\xe9");'))
        out.flush()
        assert out.buffer.getvalue() == (
            b'Source: <stdin>\npr_info("caf\xe9")\n\n'
        )

    def test_other_encoding_round_trip(self):
        out = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
        scanner = Scanner(ScanOptions(encoding="latin-1"), out=out)
        findings = scanner.scan_stdin(io.BytesIO(b'pr_info("caf\xe9");'))
        out.flush()
        assert findings[0].text == 'pr_info("café")'
        assert b'pr_info("caf\xe9")\n' in out.buffer.getvalue()
