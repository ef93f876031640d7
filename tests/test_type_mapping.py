"""
tests/test_type_mapping.py
Unit tests for laragen.type_mapping and the string helpers in laragen.utils.

Tests cover:
- Native type -> logical type mapping (size suffixes, case, unknown types)
- Eloquent casts per logical type
- Blueprint method names and accepted input spellings
- Case conversion and pluralisation used for table and class names
"""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.types import TypeEngine

from laragen.type_mapping import (
    DATA_TYPE_OPTIONS,
    LogicalType,
    cast_for,
    coerce_logical_type,
    map_native_type,
    migration_method,
    native_type_name,
)
from laragen.utils import (
    php_single_quote,
    to_camel_case,
    to_plural,
    to_singular,
    to_snake_case,
    to_studly_case,
)


# ===========================================================================
# map_native_type
# ===========================================================================


class TestMapNativeType:
    """Native database types are always mapped, never rejected."""

    @pytest.mark.parametrize(
        "native, expected",
        [
            ("varchar", LogicalType.STRING),
            ("char", LogicalType.STRING),
            ("longtext", LogicalType.TEXT),
            ("tinytext", LogicalType.TEXT),
            ("int", LogicalType.INTEGER),
            ("smallint", LogicalType.INTEGER),
            ("year", LogicalType.INTEGER),
            ("tinyint", LogicalType.BOOLEAN),
            ("bool", LogicalType.BOOLEAN),
            ("bigint", LogicalType.BIG_INTEGER),
            ("numeric", LogicalType.DECIMAL),
            ("double", LogicalType.FLOAT),
            ("real", LogicalType.FLOAT),
            ("date", LogicalType.DATE),
            ("datetime", LogicalType.DATETIME),
            ("timestamp", LogicalType.TIMESTAMP),
            ("json", LogicalType.JSON),
        ],
    )
    def test_known_types(self, native: str, expected: LogicalType) -> None:
        assert map_native_type(native) is expected

    def test_size_suffix_and_case_are_ignored(self) -> None:
        assert map_native_type("VARCHAR(255)") == map_native_type("varchar")
        assert map_native_type("decimal(8, 2)") is LogicalType.DECIMAL
        assert map_native_type("TINYINT(1)") is LogicalType.BOOLEAN

    @pytest.mark.parametrize(
        "native, expected",
        [
            ("bigint unsigned", LogicalType.BIG_INTEGER),
            ("INT(10) UNSIGNED ZEROFILL", LogicalType.INTEGER),
            ("decimal(8, 2) unsigned", LogicalType.DECIMAL),
            ("timestamp(0) without time zone", LogicalType.TIMESTAMP),
            ("TIMESTAMP WITH TIME ZONE", LogicalType.TIMESTAMP),
            ("double precision", LogicalType.FLOAT),
            ("character varying(255)", LogicalType.STRING),
            ("jsonb", LogicalType.JSON),
        ],
    )
    def test_dialect_modifiers_are_ignored(self, native: str, expected: LogicalType) -> None:
        assert map_native_type(native) is expected

    @pytest.mark.parametrize("native", ["geometry", "point", "uuid", "", "   "])
    def test_unknown_types_fall_back_to_string(self, native: str) -> None:
        assert map_native_type(native) is LogicalType.STRING

    @pytest.mark.parametrize("value", [None, 42, 3.5, b"varchar"])
    def test_non_string_input_never_raises(self, value: object) -> None:
        assert map_native_type(value) is LogicalType.STRING


class TestNativeTypeName:
    """Types as SQLAlchemy compiles them for each dialect reduce to bare names."""

    @pytest.mark.parametrize(
        "type_, dialect, expected",
        [
            (mysql.BIGINT(unsigned=True), mysql.dialect(), "bigint"),
            (mysql.TINYINT(1), mysql.dialect(), "tinyint"),
            (mysql.VARCHAR(100), mysql.dialect(), "varchar"),
            (postgresql.TIMESTAMP(), postgresql.dialect(), "timestamp"),
            (postgresql.TIMESTAMP(timezone=True), postgresql.dialect(), "timestamp"),
            (postgresql.DOUBLE_PRECISION(), postgresql.dialect(), "double"),
            (postgresql.JSONB(), postgresql.dialect(), "jsonb"),
            (sqlite.DECIMAL(8, 2), sqlite.dialect(), "decimal"),
        ],
    )
    def test_compiled_types(self, type_: TypeEngine, dialect: object, expected: str) -> None:
        assert native_type_name(str(type_.compile(dialect=dialect))) == expected

    def test_mysql_foreign_id_is_big_integer(self) -> None:
        compiled = str(mysql.BIGINT(unsigned=True).compile(dialect=mysql.dialect()))
        assert map_native_type(compiled) is LogicalType.BIG_INTEGER

    def test_postgres_types(self) -> None:
        pg = postgresql.dialect()
        assert map_native_type(str(postgresql.TIMESTAMP().compile(dialect=pg))) is LogicalType.TIMESTAMP
        assert map_native_type(str(postgresql.DOUBLE_PRECISION().compile(dialect=pg))) is LogicalType.FLOAT


# ===========================================================================
# Casts & Blueprint methods
# ===========================================================================


class TestCastFor:

    @pytest.mark.parametrize(
        "logical, expected",
        [
            (LogicalType.STRING, "string"),
            (LogicalType.TEXT, "string"),
            (LogicalType.INTEGER, "integer"),
            (LogicalType.BIG_INTEGER, "integer"),
            (LogicalType.BOOLEAN, "boolean"),
            (LogicalType.DATE, "date"),
            (LogicalType.DATETIME, "datetime"),
            (LogicalType.TIMESTAMP, "datetime"),
            (LogicalType.DECIMAL, "decimal:2"),
            (LogicalType.FLOAT, "decimal:2"),
            (LogicalType.JSON, "array"),
        ],
    )
    def test_every_logical_type_has_a_cast(self, logical: LogicalType, expected: str) -> None:
        assert cast_for(logical) == expected

    def test_unknown_value_has_no_cast(self) -> None:
        assert cast_for("geometry") is None  # type: ignore[arg-type]


class TestMigrationMethod:

    def test_camel_case_methods(self) -> None:
        assert migration_method(LogicalType.BIG_INTEGER) == "bigInteger"
        assert migration_method(LogicalType.DATETIME) == "dateTime"

    def test_other_methods_match_type_value(self) -> None:
        assert migration_method(LogicalType.STRING) == "string"
        assert migration_method(LogicalType.TIMESTAMP) == "timestamp"
        assert migration_method(LogicalType.JSON) == "json"


class TestCoerceLogicalType:

    def test_accepts_logical_values(self) -> None:
        assert coerce_logical_type("big_integer") is LogicalType.BIG_INTEGER

    def test_accepts_blueprint_method_names(self) -> None:
        assert coerce_logical_type("bigInteger") is LogicalType.BIG_INTEGER
        assert coerce_logical_type("dateTime") is LogicalType.DATETIME

    def test_accepts_native_types(self) -> None:
        assert coerce_logical_type("VARCHAR(100)") is LogicalType.STRING
        assert coerce_logical_type("double") is LogicalType.FLOAT

    def test_data_type_options_cover_every_type(self) -> None:
        assert set(DATA_TYPE_OPTIONS) == {lt.value for lt in LogicalType}


# ===========================================================================
# Naming helpers
# ===========================================================================


class TestCaseConversion:

    def test_snake_case(self) -> None:
        assert to_snake_case("BlogPost") == "blog_post"
        assert to_snake_case("HTTPRequestLog") == "http_request_log"
        assert to_snake_case("already_snake") == "already_snake"
        assert to_snake_case("") == ""

    def test_studly_case(self) -> None:
        assert to_studly_case("blog_post") == "BlogPost"
        assert to_studly_case("BlogPost") == "BlogPost"
        assert to_studly_case("id") == "Id"

    def test_camel_case(self) -> None:
        assert to_camel_case("BlogPost") == "blogPost"
        assert to_camel_case("order_item") == "orderItem"


class TestPluralisation:

    @pytest.mark.parametrize(
        "singular, plural",
        [
            ("Post", "Posts"),
            ("Category", "Categories"),
            ("Status", "Statuses"),
            ("Box", "Boxes"),
            ("Person", "People"),
            ("BlogCategory", "BlogCategories"),
            ("order_item", "order_items"),
            ("Key", "Keys"),
        ],
    )
    def test_plural(self, singular: str, plural: str) -> None:
        assert to_plural(singular) == plural

    def test_uncountable_words_are_unchanged(self) -> None:
        assert to_plural("Equipment") == "Equipment"
        assert to_singular("news") == "news"

    @pytest.mark.parametrize(
        "plural, singular",
        [
            ("blog_posts", "blog_post"),
            ("categories", "category"),
            ("statuses", "status"),
            ("people", "person"),
            ("boxes", "box"),
        ],
    )
    def test_singular(self, plural: str, singular: str) -> None:
        assert to_singular(plural) == singular


class TestPhpSingleQuote:

    def test_plain(self) -> None:
        assert php_single_quote("draft") == "'draft'"

    def test_escapes_quote_and_backslash(self) -> None:
        assert php_single_quote("it's") == "'it\\'s'"
        assert php_single_quote("C:\\tmp") == "'C:\\\\tmp'"
