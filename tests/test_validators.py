"""
tests/test_validators.py
Unit tests for laragen.validators.

Tests cover:
- ValidationResult accumulation, truthiness and report formatting
- Entity and table naming rules (errors vs. warnings)
- Column checks: identifiers, duplicates, Laravel-managed columns, id
- Artifact option combinations (cache, form request, overrides)
- GeneratorConfig namespace / user model / stub path checks
"""

from __future__ import annotations

import pathlib

import pytest

from laragen.models import ColumnSpec, GeneratorConfig, TableSpec
from laragen.validators import (
    ValidationResult,
    validate_artifact_options,
    validate_columns,
    validate_entity_name,
    validate_full,
    validate_generator_config,
    validate_table_name,
    validate_table_spec,
)


# ===========================================================================
# ValidationResult
# ===========================================================================


class TestValidationResult:

    def test_empty_result_is_valid(self) -> None:
        result = ValidationResult()
        assert result
        assert result.is_valid
        assert len(result) == 0

    def test_error_makes_result_falsy(self) -> None:
        result = ValidationResult()
        result.add_warning("W", "warn")
        assert result
        result.add_error("E", "boom", {"column": "x"})
        assert not result
        assert result.error_count == 1
        assert result.warning_count == 1
        assert result.codes == ["W", "E"]
        assert result.error_messages() == ["boom"]

    def test_merge(self) -> None:
        first, second = ValidationResult(), ValidationResult()
        first.add_info("I", "note")
        second.add_error("E", "boom")
        first.merge(second)
        assert first.codes == ["I", "E"]

    def test_report_hides_info_by_default(self) -> None:
        result = ValidationResult()
        result.add_info("NOTE", "just so you know")
        result.add_error("BAD", "broken", {"column": "title"})
        report = result.format_report()
        assert "[BAD] broken" in report
        assert "column: title" in report
        assert "NOTE" not in report
        assert "NOTE" in result.format_report(include_info=True)


# ===========================================================================
# Names
# ===========================================================================


class TestEntityName:

    def test_studly_name_passes(self) -> None:
        assert len(validate_entity_name(TableSpec(entity_name="BlogPost"))) == 0

    def test_lowercase_name_warns(self) -> None:
        result = validate_entity_name(TableSpec(entity_name="blog_post"))
        assert result.is_valid
        assert result.codes == ["ENTITY_NAME_NOT_STUDLY_CASE"]

    @pytest.mark.parametrize("name", ["Class", "List", "Function", "Match"])
    def test_reserved_word_is_error(self, name: str) -> None:
        result = validate_entity_name(TableSpec(entity_name=name))
        assert "ENTITY_NAME_PHP_RESERVED" in result.codes
        assert not result.is_valid


class TestTableName:

    def test_snake_case_passes(self) -> None:
        assert len(validate_table_name(TableSpec(entity_name="Post", table_name="blog_posts"))) == 0

    def test_camel_case_warns(self) -> None:
        result = validate_table_name(TableSpec(entity_name="Post", table_name="BlogPosts"))
        assert result.codes == ["TABLE_NAME_NOT_SNAKE_CASE"]
        assert result.is_valid

    def test_invalid_identifier_is_error(self) -> None:
        result = validate_table_name(TableSpec(entity_name="Post", table_name="blog-posts"))
        assert result.codes == ["INVALID_TABLE_NAME"]


# ===========================================================================
# Columns
# ===========================================================================


class TestColumns:

    def test_clean_columns(self, basic_spec: TableSpec) -> None:
        assert len(validate_columns(basic_spec)) == 0

    def test_invalid_column_name(self) -> None:
        spec = TableSpec(entity_name="Post", columns=[{"name": "first name"}])
        assert validate_columns(spec).codes == ["INVALID_COLUMN_NAME"]

    def test_duplicate_column_name(self) -> None:
        col = ColumnSpec(name="title")
        spec = TableSpec.model_construct(entity_name="Post", table_name="posts", columns=(col, col))
        assert "DUPLICATE_COLUMN_NAME" in validate_columns(spec).codes

    def test_timestamp_columns_warn(self) -> None:
        spec = TableSpec(
            entity_name="Post",
            has_soft_deletes=True,
            columns=[{"name": "created_at", "logical_type": "timestamp"},
                     {"name": "deleted_at", "logical_type": "timestamp"}],
        )
        assert validate_columns(spec).codes == [
            "TIMESTAMP_COLUMN_REDEFINED",
            "SOFT_DELETE_COLUMN_REDEFINED",
        ]

    def test_timestamp_columns_allowed_without_timestamps(self) -> None:
        spec = TableSpec(
            entity_name="Post",
            has_timestamps=False,
            columns=[{"name": "created_at", "logical_type": "timestamp"}],
        )
        assert len(validate_columns(spec)) == 0

    def test_id_column_is_info(self) -> None:
        spec = TableSpec(entity_name="Post", columns=[{"name": "id", "logical_type": "big_integer"}])
        result = validate_columns(spec)
        assert result.codes == ["ID_COLUMN_IGNORED"]
        assert result.is_valid
        assert not result.has_warnings


# ===========================================================================
# Artifact options
# ===========================================================================


class TestArtifactOptions:

    def test_invalid_override(self) -> None:
        spec = TableSpec(entity_name="Post", policy_name="Post Policy")
        assert validate_artifact_options(spec).codes == ["INVALID_OVERRIDE_NAME"]

    def test_blank_override_ignored(self) -> None:
        spec = TableSpec(entity_name="Post", policy_name="  ")
        assert len(validate_artifact_options(spec)) == 0

    def test_form_request_without_fillable_columns(self) -> None:
        spec = TableSpec(entity_name="Post", generate_form_request=True)
        assert validate_artifact_options(spec).codes == ["FORM_REQUEST_WITHOUT_RULES"]

    def test_cache_without_repository_warns(self) -> None:
        spec = TableSpec(entity_name="Post", generate_cache=True)
        result = validate_artifact_options(spec)
        assert result.codes == ["CACHE_WITHOUT_REPOSITORY"]
        assert result.is_valid

    def test_cache_key_checks(self) -> None:
        spec = TableSpec(
            entity_name="Post",
            generate_cache=True,
            generate_repository=True,
            cache_key_type="uuid",
            cache_primary_key="post-id",
        )
        assert validate_artifact_options(spec).codes == [
            "INVALID_CACHE_KEY_TYPE",
            "INVALID_CACHE_PRIMARY_KEY",
        ]

    def test_cache_key_ignored_without_cache(self) -> None:
        spec = TableSpec(entity_name="Post", cache_key_type="uuid")
        assert len(validate_artifact_options(spec)) == 0


# ===========================================================================
# Configuration & composites
# ===========================================================================


class TestGeneratorConfigChecks:

    def test_defaults_pass(self) -> None:
        assert len(validate_generator_config(GeneratorConfig())) == 0

    def test_invalid_namespace(self) -> None:
        config = GeneratorConfig(model_namespace="App\\Bad Name")
        result = validate_generator_config(config)
        assert result.codes == ["INVALID_NAMESPACE"]

    def test_invalid_user_model(self) -> None:
        result = validate_generator_config(GeneratorConfig(user_model="App\\Models\\"))
        assert result.is_valid
        result = validate_generator_config(GeneratorConfig(user_model="App\\\\User"))
        assert result.codes == ["INVALID_USER_MODEL"]

    def test_missing_stub_path(self, tmp_path: pathlib.Path) -> None:
        config = GeneratorConfig(stub_paths=[tmp_path / "nope"])
        assert validate_generator_config(config).codes == ["STUB_PATH_MISSING"]


class TestComposite:

    def test_reference_job_is_valid(self, post_spec: TableSpec) -> None:
        result = validate_table_spec(post_spec)
        assert result.is_valid
        assert not result.has_warnings

    def test_full_includes_config(self, post_spec: TableSpec) -> None:
        config = GeneratorConfig(cache_namespace="App\\Cache Layer")
        assert validate_table_spec(post_spec).is_valid
        assert "INVALID_NAMESPACE" in validate_full(post_spec, config).codes

    def test_full_without_config(self) -> None:
        result = validate_full(TableSpec(entity_name="Class"))
        assert not result
