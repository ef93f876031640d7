# File: laragen/errors.py
"""
Laragen - Exception Hierarchy
=============================

Every failure the generation pipeline reports deliberately derives from
``LaragenError`` so callers can separate "the job is wrong" from genuine
programming errors:

- ``ConfigurationError``   -- a stub is missing or a stub directory is unusable.
- ``InputValidationError`` -- the job description is malformed or fails
                              semantic validation.
- ``IntrospectionError``   -- a live table could not be read.

The orchestrator isolates ``ConfigurationError`` / ``InputValidationError``
per artifact; anything else aborts the run.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.errors")


class LaragenError(Exception):
    """Base class for every error raised by laragen."""


class ConfigurationError(LaragenError):
    """A stub file or stub directory could not be resolved."""

    def __init__(self, message: str, *, stub: Optional[str] = None) -> None:
        super().__init__(message)
        self.stub: Optional[str] = stub


class InputValidationError(LaragenError):
    """
    The job description is malformed.

    ``problems`` carries one human-readable line per issue so the CLI can
    print them individually.
    """

    def __init__(self, message: str, problems: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.problems: List[str] = list(problems or [])

    def __str__(self) -> str:
        base: str = super().__str__()
        if not self.problems:
            return base
        return base + "\n" + "\n".join(f"  - {p}" for p in self.problems)


class IntrospectionError(LaragenError):
    """The table does not exist or its columns could not be listed."""

    def __init__(self, message: str, *, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.table: Optional[str] = table


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "LaragenError",
    "ConfigurationError",
    "InputValidationError",
    "IntrospectionError",
]

logger.debug("laragen.errors loaded.")
