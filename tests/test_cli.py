"""
Tests for the kernelscan command line
=====================================

These tests run the click command through CliRunner.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from kernelscan import __version__
from kernelscan.cli import kernelscan as cli_module
from kernelscan.cli.errors import ExitCode
from kernelscan.cli.kernelscan import main
from kernelscan.errors import HashTableError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "drv.c"
    path.write_text(
        "static void setup(struct device *dev)\n"
        "{\n"
        '\tdev_err(dev, "setup " "failed\\n");\n'
        "}\n"
    )
    return path


class TestCLI:
    """Tests for options, output and exit codes."""

    def test_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "--escape-strip" in result.output
        assert "--recursive" in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_scan_file(self, runner, source):
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == 0
        assert f"Source: {source}\n" in result.output
        assert 'dev_err(dev, "setup failed\\n")\n' in result.output
        assert result.output.endswith(
            "\n1 files scanned\n4 lines scanned\n1 statements found\n"
        )

    def test_escape_strip(self, runner, source):
        result = runner.invoke(main, ["-e", str(source)])
        assert result.exit_code == 0
        assert 'dev_err(dev, "setup failed")\n' in result.output

    def test_recursive(self, runner, tmp_path, source):
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "more.h").write_text('pr_warn("nested");\n')

        flat = runner.invoke(main, [str(tmp_path)])
        assert "1 statements found" in flat.output
        assert "nested" not in flat.output

        deep = runner.invoke(main, ["-r", str(tmp_path)])
        assert deep.exit_code == 0
        assert 'pr_warn("nested")' in deep.output
        assert "2 files scanned" in deep.output
        assert "2 statements found" in deep.output

    def test_stdin(self, runner):
        result = runner.invoke(main, [], input='printk(KERN_INFO "hi");\n')
        assert result.exit_code == 0
        assert "Source: <stdin>\n" in result.output
        assert 'printk(KERN_INFO"hi")\n' in result.output
        assert "1 files scanned" in result.output
        assert "1 lines scanned" in result.output

    def test_undecodable_stdin_bytes_pass_through(self, runner):
        result = runner.invoke(main, [], input=b'printk("caf\xe9");\n')
        assert result.exit_code == 0
        assert b'printk("caf\xe9")\n' in result.stdout_bytes

    def test_encoding_option(self, runner, tmp_path):
        path = tmp_path / "l1.c"
        path.write_bytes(b'pr_err("na\xefve");\n')
        result = runner.invoke(main, ["--encoding", "latin-1", str(path)])
        assert result.exit_code == 0
        assert b'pr_err("na\xefve")\n' in result.stdout_bytes

    def test_unknown_encoding(self, runner):
        result = runner.invoke(main, ["--encoding", "no-such-codec"])
        assert result.exit_code == ExitCode.INVALID_ARGS
        assert "unknown encoding" in result.output

    def test_missing_path_is_not_fatal(self, runner, tmp_path):
        result = runner.invoke(main, [str(tmp_path / "missing.c")])
        assert result.exit_code == ExitCode.SUCCESS
        assert "0 files scanned" in result.output

    def test_unknown_option(self, runner):
        result = runner.invoke(main, ["-x"])
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_fatal_scanner_error(self, runner, source, monkeypatch):
        def broken(*args, **kwargs):
            raise HashTableError(458, 5000, 70)

        monkeypatch.setattr(cli_module, "Scanner", broken)
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == ExitCode.SCAN_ERROR
        assert "no collision-free hash table width" in result.output

    def test_internal_error(self, runner, source, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(cli_module, "Scanner", broken)
        result = runner.invoke(main, [str(source)])
        assert result.exit_code == ExitCode.INTERNAL_ERROR
        assert "Internal error: boom" in result.output
