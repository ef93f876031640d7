# File: laragen/rules.py
"""
Laragen - Validation Rule Derivation
====================================
Builds the Laravel validation rules for a column.  Rules are emitted in a
fixed order: presence, type, uniqueness.

    >>> derive_rules(ColumnSpec(name="slug", unique=True), "posts")
    ['required', 'string', 'max:255', 'unique:posts,slug']

``derive_rules`` does not look at ``fillable``; request generators pass
only mass-assignable columns.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from laragen.models import ColumnSpec
from laragen.type_mapping import LogicalType

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.rules")

_TYPE_RULES: Dict[LogicalType, Tuple[str, ...]] = {
    LogicalType.STRING: ("string", "max:255"),
    LogicalType.TEXT: ("string",),
    LogicalType.INTEGER: ("integer",),
    LogicalType.BIG_INTEGER: ("integer",),
    LogicalType.BOOLEAN: ("boolean",),
    LogicalType.DATE: ("date",),
    LogicalType.DATETIME: ("date",),
    LogicalType.TIMESTAMP: ("date",),
    LogicalType.DECIMAL: ("numeric",),
    LogicalType.FLOAT: ("numeric",),
    LogicalType.JSON: ("array",),
}


def derive_rules(column: ColumnSpec, table_name: str) -> List[str]:
    """Ordered rule tokens for *column*; never empty."""
    rules: List[str] = ["nullable" if column.nullable else "required"]
    rules.extend(_TYPE_RULES.get(column.logical_type, ()))
    if column.unique:
        rules.append(f"unique:{table_name},{column.name}")
    return rules


def format_rule_line(column: ColumnSpec, table_name: str) -> str:
    """``'title' => 'required|string|max:255',``"""
    return f"'{column.name}' => '{'|'.join(derive_rules(column, table_name))}',"


def format_update_rule_line(column: ColumnSpec, table_name: str, route_parameter: str) -> str:
    """
    Rule line for an update request.  A unique column ignores the record
    bound to *route_parameter*, so saving it with an unchanged value passes::

        'slug' => ['required', 'string', 'max:255',
            \\Illuminate\\Validation\\Rule::unique('posts', 'slug')->ignore($this->route('post'))],
    """
    if not column.unique:
        return format_rule_line(column, table_name)
    tokens: List[str] = [
        f"'{rule}'" for rule in derive_rules(column, table_name) if not rule.startswith("unique:")
    ]
    tokens.append(
        f"\\Illuminate\\Validation\\Rule::unique('{table_name}', '{column.name}')"
        f"->ignore($this->route('{route_parameter}'))"
    )
    return f"'{column.name}' => [{', '.join(tokens)}],"


def fillable_rule_lines(
    columns: Sequence[ColumnSpec],
    table_name: str,
    route_parameter: Optional[str] = None,
) -> List[str]:
    """
    One rule line per mass-assignable column, ``id`` excluded.  With
    *route_parameter* the lines are update rules.
    """
    lines: List[str] = [
        format_rule_line(col, table_name)
        if route_parameter is None
        else format_update_rule_line(col, table_name, route_parameter)
        for col in columns
        if col.fillable and not col.is_primary_key_name
    ]
    logger.debug("Derived %d rule line(s) for table %s.", len(lines), table_name)
    return lines


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "derive_rules",
    "format_rule_line",
    "format_update_rule_line",
    "fillable_rule_lines",
]

logger.debug("laragen.rules loaded.")
