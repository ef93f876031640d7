# File: laragen/utils.py
"""
Laragen - Utility Functions & Helpers
=====================================
String-case conversion, English pluralisation, atomic file I/O, checksums
and a small timing context manager shared by the generation pipeline.

- The string conversions are pure and decorated with ``lru_cache``: the same
  entity and column names are converted many times per run.
- ``write_file`` writes to a temporary file in the target directory and
  renames it into place so a crash never leaves half a PHP class behind.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_CAMEL_TO_SNAKE_RE1: re.Pattern[str] = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_TO_SNAKE_RE2: re.Pattern[str] = re.compile(r"([a-z0-9])([A-Z])")
_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_MULTI_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"_{2,}")
_LEADING_TRAILING_UNDERSCORE_RE: re.Pattern[str] = re.compile(r"^_+|_+$")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)
_TRAILING_WORD_RE: re.Pattern[str] = re.compile(r"([A-Z]?[a-z0-9]*)$")

_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "ox": "oxen",
    "datum": "data",
    "criterion": "criteria",
    "matrix": "matrices",
    "index": "indices",
    "vertex": "vertices",
    "axis": "axes",
    "crisis": "crises",
    "analysis": "analyses",
}

_UNCOUNTABLE: FrozenSet[str] = frozenset({
    "audio", "data", "equipment", "feedback", "information", "media",
    "metadata", "money", "news", "series", "sheep", "species", "staff",
})


# ---------------------------------------------------------------------------
# Cached string transformation functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert any string to snake_case.

    Examples:
        >>> to_snake_case("BlogPost")
        'blog_post'
        >>> to_snake_case("HTTPRequestLog")
        'http_request_log'
    """
    if not name:
        return ""
    s: str = _CAMEL_TO_SNAKE_RE1.sub(r"\1_\2", name)
    s = _CAMEL_TO_SNAKE_RE2.sub(r"\1_\2", s)
    s = _NON_ALPHANUM_RE.sub("_", s)
    s = _MULTI_UNDERSCORE_RE.sub("_", s)
    s = _LEADING_TRAILING_UNDERSCORE_RE.sub("", s)
    return s.lower()


@functools.lru_cache(maxsize=None)
def _extract_words(name: str) -> Tuple[str, ...]:
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    return tuple(w.lower() for w in _SPLIT_WORDS_RE.findall(cleaned) if w)


@functools.lru_cache(maxsize=None)
def to_studly_case(name: str) -> str:
    """
    Convert any string to StudlyCase (Laravel's name for PascalCase).

    Examples:
        >>> to_studly_case("blog_post")
        'BlogPost'
    """
    if not name:
        return ""
    return "".join(word.capitalize() for word in _extract_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """
    Convert any string to camelCase.

    Examples:
        >>> to_camel_case("BlogPost")
        'blogPost'
    """
    words: Tuple[str, ...] = _extract_words(name) if name else ()
    if not words:
        return ""
    return words[0] + "".join(w.capitalize() for w in words[1:])


def _match_case(source: str, target: str) -> str:
    if source.isupper() and len(source) > 1:
        return target.upper()
    if source[:1].isupper():
        return target[:1].upper() + target[1:]
    return target


@functools.lru_cache(maxsize=None)
def pluralize_word(word: str) -> str:
    """
    English pluralisation of a single word, good enough for table names.

    Examples:
        >>> pluralize_word("Category")
        'Categories'
        >>> pluralize_word("status")
        'statuses'
    """
    if not word:
        return ""

    lower: str = word.lower()

    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        return _match_case(word, _IRREGULAR_PLURALS[lower])

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in "aeiou":
        return word[:-1] + "ies"
    if lower.endswith("fe"):
        return word[:-2] + "ves"
    if lower.endswith("f") and not lower.endswith(("ff", "oof", "ief")):
        return word[:-1] + "ves"
    if lower.endswith("o") and len(word) > 1 and lower[-2] not in "aeiou":
        return word + "es"

    return word + "s"


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Pluralise the last word of a compound name.

    Examples:
        >>> to_plural("BlogCategory")
        'BlogCategories'
        >>> to_plural("order_item")
        'order_items'
    """
    if not name:
        return ""
    match: Optional[re.Match[str]] = _TRAILING_WORD_RE.search(name)
    if match is None or not match.group(1):
        return name
    head: str = name[: match.start(1)]
    return head + pluralize_word(match.group(1))


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """
    Reverse the common plural endings on the last word of *name*.

    Examples:
        >>> to_singular("blog_categories")
        'blog_category'
        >>> to_singular("people")
        'person'
    """
    if not name:
        return ""
    match: Optional[re.Match[str]] = _TRAILING_WORD_RE.search(name)
    if match is None or not match.group(1):
        return name
    head: str = name[: match.start(1)]
    word: str = match.group(1)
    lower: str = word.lower()

    for singular, plural in _IRREGULAR_PLURALS.items():
        if lower == plural:
            return head + _match_case(word, singular)
    if lower in _UNCOUNTABLE:
        return name
    if lower.endswith("ies") and len(word) > 3:
        return head + word[:-3] + "y"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes", "uses")):
        return head + word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return head + word[:-1]
    return name


# ---------------------------------------------------------------------------
# PHP literal helpers
# ---------------------------------------------------------------------------


def php_single_quote(value: str) -> str:
    """Return *value* as a single-quoted PHP string literal."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def indent_lines(lines: List[str], spaces: int) -> List[str]:
    """Prefix each non-empty line with *spaces* spaces."""
    prefix: str = " " * spaces
    return [prefix + line if line.strip() else line for line in lines]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path* as UTF-8 and return the number of bytes.

    With *atomic* the data goes to a sibling temporary file that is then
    renamed over the target; a failed write removes the temporary file and
    re-raises.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.replace(tmp_path, str(path))
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Checksum & metrics
# ---------------------------------------------------------------------------


def sha256_hex(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Number of lines, counting a final unterminated line."""
    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Context-manager timer for pipeline steps.

    Usage:
        with Timer("render model") as t:
            ...
        t.elapsed
    """

    __slots__ = ("label", "start_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.elapsed = time.perf_counter() - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "to_snake_case",
    "to_studly_case",
    "to_camel_case",
    "pluralize_word",
    "to_plural",
    "to_singular",
    "php_single_quote",
    "indent_lines",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("laragen.utils loaded - %d public symbols.", len(__all__))
