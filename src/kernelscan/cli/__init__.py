"""
kernelscan Command-Line Interface
=================================

- **kernelscan**: scan C sources for kernel logging statements

The tool is implemented as a Click-based CLI application.
"""

__all__ = ["kernelscan"]
