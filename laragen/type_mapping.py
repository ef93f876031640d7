# File: laragen/type_mapping.py
"""
Laragen - Database Type Mapping
===============================

Translates native database column types (as reported by a live schema or
typed by a user) into the small set of logical types the generators
understand, and logical types into Eloquent casts and Blueprint methods.

``map_native_type`` is a total function: anything it does not recognise
becomes ``LogicalType.STRING``.  An unknown type is never an error.
"""

from __future__ import annotations

import functools
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.type_mapping")


# ---------------------------------------------------------------------------
# Logical types
# ---------------------------------------------------------------------------


class LogicalType(str, Enum):
    """Canonical column types after mapping from a native database type."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    BIG_INTEGER = "big_integer"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    DECIMAL = "decimal"
    FLOAT = "float"
    JSON = "json"


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

_PARENTHESIZED_RE: re.Pattern[str] = re.compile(r"\([^)]*\)")

# Modifiers some dialects append to the type name, e.g. MySQL "BIGINT UNSIGNED"
# or PostgreSQL "TIMESTAMP WITHOUT TIME ZONE"
_TYPE_MODIFIERS_RE: re.Pattern[str] = re.compile(
    r"\b(?:unsigned|signed|zerofill|with(?:out)? time zone)\b"
)

# Multi-word type names and their single-word equivalent
_MULTI_WORD_TYPES: Dict[str, str] = {
    "double precision": "double",
    "character varying": "varchar",
    "character": "char",
}

_NATIVE_TYPE_MAP: Dict[str, LogicalType] = {
    "varchar": LogicalType.STRING,
    "char": LogicalType.STRING,
    "text": LogicalType.TEXT,
    "longtext": LogicalType.TEXT,
    "mediumtext": LogicalType.TEXT,
    "tinytext": LogicalType.TEXT,
    "int": LogicalType.INTEGER,
    "integer": LogicalType.INTEGER,
    "smallint": LogicalType.INTEGER,
    "mediumint": LogicalType.INTEGER,
    "year": LogicalType.INTEGER,
    "tinyint": LogicalType.BOOLEAN,
    "boolean": LogicalType.BOOLEAN,
    "bool": LogicalType.BOOLEAN,
    "bigint": LogicalType.BIG_INTEGER,
    "decimal": LogicalType.DECIMAL,
    "numeric": LogicalType.DECIMAL,
    "float": LogicalType.FLOAT,
    "double": LogicalType.FLOAT,
    "real": LogicalType.FLOAT,
    "date": LogicalType.DATE,
    "datetime": LogicalType.DATETIME,
    "timestamp": LogicalType.TIMESTAMP,
    "timestamptz": LogicalType.TIMESTAMP,
    "json": LogicalType.JSON,
    "jsonb": LogicalType.JSON,
}

_CAST_MAP: Dict[LogicalType, str] = {
    LogicalType.STRING: "string",
    LogicalType.TEXT: "string",
    LogicalType.INTEGER: "integer",
    LogicalType.BIG_INTEGER: "integer",
    LogicalType.BOOLEAN: "boolean",
    LogicalType.DATE: "date",
    LogicalType.DATETIME: "datetime",
    LogicalType.TIMESTAMP: "datetime",
    LogicalType.DECIMAL: "decimal:2",
    LogicalType.FLOAT: "decimal:2",
    LogicalType.JSON: "array",
}

# Blueprint method names where they differ from the logical type value
_MIGRATION_METHODS: Dict[LogicalType, str] = {
    LogicalType.BIG_INTEGER: "bigInteger",
    LogicalType.DATETIME: "dateTime",
}

# Laravel method names accepted as input and their logical type
_LARAVEL_ALIASES: Dict[str, LogicalType] = {
    "biginteger": LogicalType.BIG_INTEGER,
    "datetime": LogicalType.DATETIME,
}

#: Choices offered to users building a definition by hand.
DATA_TYPE_OPTIONS: Dict[str, str] = {
    LogicalType.STRING.value: "String (VARCHAR)",
    LogicalType.TEXT.value: "Text",
    LogicalType.INTEGER.value: "Integer",
    LogicalType.BIG_INTEGER.value: "Big Integer",
    LogicalType.BOOLEAN.value: "Boolean",
    LogicalType.DATE.value: "Date",
    LogicalType.DATETIME.value: "DateTime",
    LogicalType.TIMESTAMP.value: "Timestamp",
    LogicalType.DECIMAL.value: "Decimal",
    LogicalType.FLOAT.value: "Float",
    LogicalType.JSON.value: "JSON",
}


# ---------------------------------------------------------------------------
# Public mapping functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def native_type_name(native: str) -> str:
    """
    Bare lower-case type name: size suffixes and dialect modifiers removed.

    Examples:
        >>> native_type_name("BIGINT UNSIGNED")
        'bigint'
        >>> native_type_name("TIMESTAMP WITHOUT TIME ZONE")
        'timestamp'
        >>> native_type_name("DOUBLE PRECISION")
        'double'
    """
    name: str = _PARENTHESIZED_RE.sub(" ", native).lower()
    name = " ".join(_TYPE_MODIFIERS_RE.sub(" ", name).split())
    return _MULTI_WORD_TYPES.get(name, name)


def map_native_type(native: Any) -> LogicalType:
    """
    Map a native database type to a ``LogicalType``.

    Examples:
        >>> map_native_type("VARCHAR(255)")
        <LogicalType.STRING: 'string'>
        >>> map_native_type("bigint unsigned")
        <LogicalType.BIG_INTEGER: 'big_integer'>
        >>> map_native_type("tinyint(1)")
        <LogicalType.BOOLEAN: 'boolean'>
    """
    if not isinstance(native, str):
        return LogicalType.STRING
    key: str = native_type_name(native)
    mapped: Optional[LogicalType] = _NATIVE_TYPE_MAP.get(key)
    if mapped is None:
        logger.debug("Unrecognised native type %r, defaulting to string.", native)
        return LogicalType.STRING
    return mapped


def cast_for(logical_type: LogicalType) -> Optional[str]:
    """Eloquent cast for *logical_type*, or ``None`` when no cast applies."""
    try:
        return _CAST_MAP.get(LogicalType(logical_type))
    except ValueError:
        return None


def migration_method(logical_type: LogicalType) -> str:
    """Blueprint column method, e.g. ``bigInteger`` for ``big_integer``."""
    lt: LogicalType = LogicalType(logical_type)
    return _MIGRATION_METHODS.get(lt, lt.value)


def coerce_logical_type(value: Any) -> LogicalType:
    """
    Accept a logical type, a Laravel method name (``bigInteger``,
    ``dateTime``) or a native database type and return a ``LogicalType``.
    """
    if isinstance(value, LogicalType):
        return value
    if isinstance(value, str):
        stripped: str = value.strip()
        try:
            return LogicalType(stripped)
        except ValueError:
            pass
        alias: Optional[LogicalType] = _LARAVEL_ALIASES.get(stripped.lower())
        if alias is not None:
            return alias
    return map_native_type(value)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "LogicalType",
    "DATA_TYPE_OPTIONS",
    "native_type_name",
    "map_native_type",
    "cast_for",
    "migration_method",
    "coerce_logical_type",
]

logger.debug("laragen.type_mapping loaded - %d native types.", len(_NATIVE_TYPE_MAP))
