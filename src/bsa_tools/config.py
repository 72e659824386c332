"""
Analyzer Configuration
======================

Settings that control how analysis results are reported. Configuration
can come from:
- Default values (defined here)
- Environment variables (AnalyzerConfig.from_env)
- Command-line options, which override both

Environment Variables
---------------------
| Variable               | Setting           | Example |
|------------------------|-------------------|---------|
| BSA_MAX_PROBLEMS       | max_problems      | 200     |
| BSA_REPORT_DUPLICATES  | report_duplicates | false   |
| BSA_SOURCE_ENCODING    | source_encoding   | latin-1 |
"""

from dataclasses import dataclass
import codecs
import logging
import os

from bsa_tools.analyzer.diagnostics import Diagnostic

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass
class AnalyzerConfig:
    """
    Configuration for document analysis.

    Attributes:
        max_problems: Most diagnostics reported per document (0 = unlimited)
        report_duplicates: Warn when a symbol or macro is defined twice
        source_encoding: Encoding used to read source files
    """

    max_problems: int = 1000
    report_duplicates: bool = True
    source_encoding: str = "utf-8"

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """
        Create AnalyzerConfig from environment variables.

        Unset variables keep their defaults. Invalid values are ignored
        with a warning.

        Returns:
            AnalyzerConfig with values from environment variables
        """
        config = cls()

        if max_problems := os.environ.get("BSA_MAX_PROBLEMS"):
            try:
                value = int(max_problems)
            except ValueError:
                value = -1
            if value >= 0:
                config.max_problems = value
            else:
                logger.warning(f"Ignoring invalid BSA_MAX_PROBLEMS={max_problems!r}")

        if duplicates := os.environ.get("BSA_REPORT_DUPLICATES"):
            flag = duplicates.strip().lower()
            if flag in _TRUE_VALUES:
                config.report_duplicates = True
            elif flag in _FALSE_VALUES:
                config.report_duplicates = False
            else:
                logger.warning(f"Ignoring invalid BSA_REPORT_DUPLICATES={duplicates!r}")

        if encoding := os.environ.get("BSA_SOURCE_ENCODING"):
            try:
                config.source_encoding = codecs.lookup(encoding).name
            except LookupError:
                logger.warning(f"Ignoring unknown BSA_SOURCE_ENCODING={encoding!r}")

        return config

    def limit(self, diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        """Apply max_problems to a diagnostic list."""
        if self.max_problems == 0:
            return list(diagnostics)
        return list(diagnostics[:self.max_problems])
