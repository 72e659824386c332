"""
BSA Tools Command-Line Interface
================================

This package provides command-line tools for BSA Tools:

- **bsacheck**: Syntax and cross-reference checker for BSA source files

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["bsacheck"]
