# File: laragen/introspection.py
"""
Laragen - Live Table Introspection
==================================
Reads column metadata from an existing database table so a ``TableSpec``
can be built without typing the columns by hand.

``SchemaReader`` is the narrow contract the rest of laragen depends on;
``SqlAlchemySchemaReader`` implements it on top of SQLAlchemy's runtime
inspector, which covers SQLite, MySQL/MariaDB, PostgreSQL and SQL Server
without any vendor-specific SQL.

Error policy:
    - A missing table, or a table whose columns cannot be listed, raises
      ``IntrospectionError``.  Nothing is generated from a table we cannot
      see.
    - Per-column detail lookups (nullability, uniqueness, default) degrade
      to ``{"nullable": False, "unique": False, "default": None}`` and log
      a warning instead of raising.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, FrozenSet, List, Optional, Protocol, Set, Union, runtime_checkable

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import CompileError, SQLAlchemyError

from laragen.errors import IntrospectionError
from laragen.type_mapping import map_native_type, native_type_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.introspection")

#: Columns Laravel manages itself; never turned into ColumnSpecs.
SKIPPED_COLUMNS: FrozenSet[str] = frozenset({"id", "created_at", "updated_at", "deleted_at"})

_DEFAULT_DETAILS: Dict[str, Any] = {"nullable": False, "unique": False, "default": None}

_PG_CAST_RE: re.Pattern[str] = re.compile(r"::[\w\s\[\]\"]+$")


# ---------------------------------------------------------------------------
# Reader contract
# ---------------------------------------------------------------------------


@runtime_checkable
class SchemaReader(Protocol):
    """What laragen needs to know about a live table."""

    def table_exists(self, table: str) -> bool: ...

    def get_column_listing(self, table: str) -> List[str]: ...

    def get_column_type(self, table: str, column: str) -> str: ...

    def get_column_details(self, table: str, column: str) -> Dict[str, Any]: ...


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------


def _clean_default(raw: Any) -> Optional[str]:
    """
    Turn a reflected server default into the literal a migration would use.

    ``'draft'`` -> ``draft``; ``'draft'::character varying`` -> ``draft``;
    ``0`` -> ``0``.  Expressions such as ``CURRENT_TIMESTAMP`` are kept as
    written.
    """
    if raw is None:
        return None
    text: str = str(raw).strip()
    text = _PG_CAST_RE.sub("", text).strip()
    while len(text) >= 2 and text[0] == "(" and text[-1] == ")":
        text = text[1:-1].strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        text = text[1:-1].replace("''", "'")
    if text.upper() == "NULL":
        return None
    return text


class SqlAlchemySchemaReader:
    """
    ``SchemaReader`` backed by ``sqlalchemy.inspect``.

    Usage::

        reader = SqlAlchemySchemaReader("mysql+pymysql://app:secret@db/app")
        spec = TableSpec.from_introspection("blog_posts", reader)
    """

    def __init__(self, engine_or_url: Union[str, Engine]) -> None:
        if isinstance(engine_or_url, str):
            try:
                self._engine: Engine = create_engine(engine_or_url)
            except (SQLAlchemyError, ImportError, ValueError) as exc:
                raise IntrospectionError(
                    f"Cannot open database '{engine_or_url}': {exc}"
                ) from exc
        else:
            self._engine = engine_or_url
        self._columns: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._unique: Dict[str, Set[str]] = {}
        logger.debug("SqlAlchemySchemaReader bound to dialect %s.", self._engine.dialect.name)

    @property
    def engine(self) -> Engine:
        return self._engine

    # -- Table level (hard failures) -----------------------------------------

    def table_exists(self, table: str) -> bool:
        try:
            return inspect(self._engine).has_table(table)
        except SQLAlchemyError as exc:
            raise IntrospectionError(
                f"Could not check for table '{table}': {exc}", table=table
            ) from exc

    def _reflect_columns(self, table: str) -> Dict[str, Dict[str, Any]]:
        if table not in self._columns:
            try:
                reflected: List[Dict[str, Any]] = inspect(self._engine).get_columns(table)
            except SQLAlchemyError as exc:
                raise IntrospectionError(
                    f"Could not list columns of '{table}': {exc}", table=table
                ) from exc
            self._columns[table] = {col["name"]: col for col in reflected}
        return self._columns[table]

    def get_column_listing(self, table: str) -> List[str]:
        return list(self._reflect_columns(table))

    # -- Column level (degrade gracefully) -----------------------------------

    def get_column_type(self, table: str, column: str) -> str:
        """Bare native type name, e.g. ``varchar`` for ``VARCHAR(255)``."""
        col: Optional[Dict[str, Any]] = self._reflect_columns(table).get(column)
        if col is None:
            logger.warning("Column %s.%s not found; assuming varchar.", table, column)
            return "varchar"
        col_type: Any = col["type"]
        try:
            compiled: str = str(col_type.compile(dialect=self._engine.dialect))
        except CompileError:
            compiled = type(col_type).__name__
        return native_type_name(compiled)

    def _unique_columns(self, table: str) -> Set[str]:
        if table not in self._unique:
            insp = inspect(self._engine)
            found: Set[str] = set()
            for uc in insp.get_unique_constraints(table):
                names: List[str] = list(uc.get("column_names") or [])
                if len(names) == 1:
                    found.add(names[0])
            for idx in insp.get_indexes(table):
                names = list(idx.get("column_names") or [])
                if idx.get("unique") and len(names) == 1 and names[0]:
                    found.add(names[0])
            self._unique[table] = found
        return self._unique[table]

    def get_column_details(self, table: str, column: str) -> Dict[str, Any]:
        try:
            col: Optional[Dict[str, Any]] = self._reflect_columns(table).get(column)
            if col is None:
                return dict(_DEFAULT_DETAILS)
            return {
                "nullable": bool(col.get("nullable", False)),
                "unique": column in self._unique_columns(table),
                "default": _clean_default(col.get("default")),
            }
        except (SQLAlchemyError, IntrospectionError, NotImplementedError) as exc:
            logger.warning(
                "Could not read details of %s.%s (%s); using defaults.",
                table,
                column,
                exc,
            )
            return dict(_DEFAULT_DETAILS)


# ---------------------------------------------------------------------------
# Column rows in payload shape
# ---------------------------------------------------------------------------


def get_table_columns(reader: SchemaReader, table: str) -> List[Dict[str, Any]]:
    """
    Read *table* through *reader* and return payload-shaped column rows::

        {"column_name": "title", "data_type": "string", "nullable": False,
         "unique": False, "is_fillable": True, "default_value": None}

    Laravel-managed columns (``SKIPPED_COLUMNS``) are left out.  Raises
    ``IntrospectionError`` when the table does not exist.
    """
    if not reader.table_exists(table):
        raise IntrospectionError(f"Table '{table}' does not exist.", table=table)

    rows: List[Dict[str, Any]] = []
    for column in reader.get_column_listing(table):
        if column.lower() in SKIPPED_COLUMNS:
            continue
        native: str = reader.get_column_type(table, column)
        details: Dict[str, Any] = reader.get_column_details(table, column)
        rows.append({
            "column_name": column,
            "data_type": map_native_type(native).value,
            "nullable": bool(details.get("nullable", False)),
            "unique": bool(details.get("unique", False)),
            "is_fillable": True,
            "default_value": details.get("default"),
        })
        logger.debug("Column %s.%s: %s -> %s", table, column, native, rows[-1]["data_type"])

    logger.info("Read %d column(s) from table '%s'.", len(rows), table)
    return rows


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SchemaReader",
    "SqlAlchemySchemaReader",
    "SKIPPED_COLUMNS",
    "get_table_columns",
]

logger.debug("laragen.introspection loaded.")
