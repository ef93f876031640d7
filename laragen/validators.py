# File: laragen/validators.py
"""
Laragen - Table Spec & Configuration Validators
===============================================
Pydantic already guarantees the structural shape of a ``TableSpec`` (types,
required fields, unique column names).  This module adds the **semantic**
checks that decide whether a TableSpec will produce sensible PHP: naming
conventions, PHP reserved words, columns Laravel manages itself, and
artifact option combinations that cannot work together.

Each check is a pure function returning a ``ValidationResult``; the
orchestrator runs ``validate_table_spec`` before rendering anything and
refuses to generate when the result carries errors.

Usage:
    from laragen.validators import validate_full
    result = validate_full(spec, config)
    if not result:
        print(result.format_report())
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

from laragen.models import GeneratorConfig, TableSpec

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight issue descriptor."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(self, code: str, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def error_messages(self) -> List[str]:
        return [e.message for e in self._items if e.is_error]

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            lines.append(f"  {item.level.upper():<7} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"          {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns & word lists
# ---------------------------------------------------------------------------

_STUDLY_CASE_RE: re.Pattern[str] = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_SNAKE_CASE_RE: re.Pattern[str] = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")
_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_NAMESPACE_RE: re.Pattern[str] = re.compile(
    r"^[A-Za-z_][A-Za-z0-9_]*(\\[A-Za-z_][A-Za-z0-9_]*)*$"
)

# Words PHP refuses as class names (case-insensitive)
_PHP_RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "abstract", "and", "array", "as", "bool", "break", "callable", "case",
        "catch", "class", "clone", "const", "continue", "declare", "default",
        "do", "echo", "else", "elseif", "empty", "enddeclare", "endfor",
        "endforeach", "endif", "endswitch", "endwhile", "enum", "eval",
        "exit", "extends", "false", "final", "finally", "float", "fn", "for",
        "foreach", "function", "global", "goto", "if", "implements",
        "include", "instanceof", "insteadof", "int", "interface", "isset",
        "iterable", "list", "match", "mixed", "namespace", "never", "new",
        "null", "object", "or", "parent", "print", "private", "protected",
        "public", "readonly", "require", "return", "self", "static",
        "string", "switch", "throw", "trait", "true", "try", "unset", "use",
        "var", "void", "while", "xor", "yield",
    }
)

_TIMESTAMP_COLUMNS: FrozenSet[str] = frozenset({"created_at", "updated_at"})
_SOFT_DELETE_COLUMN: str = "deleted_at"

_CACHE_KEY_TYPES: FrozenSet[str] = frozenset({"int", "string"})

_OVERRIDE_FIELDS: List[str] = [
    "factory_name",
    "policy_name",
    "resource_controller_name",
    "json_resource_name",
    "api_controller_name",
    "form_request_name",
    "repository_name",
    "cache_name",
]

_NAMESPACE_FIELDS: List[str] = [
    "model_namespace",
    "factory_namespace",
    "policy_namespace",
    "controller_namespace",
    "api_controller_namespace",
    "request_namespace",
    "resource_namespace",
    "repository_namespace",
    "contract_namespace",
    "cache_namespace",
]


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_entity_name(spec: TableSpec) -> ValidationResult:
    """
    - StudlyCase convention (warning when only the identifier rule holds)
    - Not a PHP reserved word
    """
    result: ValidationResult = ValidationResult()
    name: str = spec.entity_name
    ctx: Dict[str, Any] = {"entity": name}

    if not _IDENTIFIER_RE.match(name):
        result.add_error(
            "INVALID_ENTITY_NAME",
            f"Entity name '{name}' is not a valid class identifier.",
            ctx,
        )
        return result

    if not _STUDLY_CASE_RE.match(name):
        result.add_warning(
            "ENTITY_NAME_NOT_STUDLY_CASE",
            f"Entity name '{name}' is not StudlyCase. Laravel expects e.g. 'BlogPost'.",
            ctx,
        )

    if name.lower() in _PHP_RESERVED_WORDS:
        result.add_error(
            "ENTITY_NAME_PHP_RESERVED",
            f"Entity name '{name}' is a PHP reserved word.",
            ctx,
        )
    return result


def validate_table_name(spec: TableSpec) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    name: str = spec.table_name
    ctx: Dict[str, Any] = {"table": name}

    if not _IDENTIFIER_RE.match(name):
        result.add_error(
            "INVALID_TABLE_NAME",
            f"Table name '{name}' is not a valid identifier.",
            ctx,
        )
    elif not _SNAKE_CASE_RE.match(name):
        result.add_warning(
            "TABLE_NAME_NOT_SNAKE_CASE",
            f"Table name '{name}' is not snake_case.",
            ctx,
        )
    return result


def validate_columns(spec: TableSpec) -> ValidationResult:
    """
    Per-column checks:
    - valid identifier
    - no duplicates (pydantic enforces this too)
    - no timestamp / soft-delete columns Laravel already adds
    """
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()

    for column in spec.columns:
        name: str = column.name
        ctx: Dict[str, Any] = {"table": spec.table_name, "column": name}

        if name in seen:
            result.add_error(
                "DUPLICATE_COLUMN_NAME",
                f"Column '{name}' is defined more than once.",
                ctx,
            )
        seen.add(name)

        if not _IDENTIFIER_RE.match(name):
            result.add_error(
                "INVALID_COLUMN_NAME",
                f"Column name '{name}' is not a valid identifier.",
                ctx,
            )
            continue

        lowered: str = name.lower()
        if spec.has_timestamps and lowered in _TIMESTAMP_COLUMNS:
            result.add_warning(
                "TIMESTAMP_COLUMN_REDEFINED",
                f"Column '{name}' is already created by $table->timestamps().",
                ctx,
            )
        if spec.has_soft_deletes and lowered == _SOFT_DELETE_COLUMN:
            result.add_warning(
                "SOFT_DELETE_COLUMN_REDEFINED",
                f"Column '{name}' is already created by $table->softDeletes().",
                ctx,
            )
        if column.is_primary_key_name:
            result.add_info(
                "ID_COLUMN_IGNORED",
                f"Column '{name}' is provided by $table->id() and left out of "
                f"fillable, casts, rules and the migration body.",
                ctx,
            )

    logger.debug(
        "validate_columns: checked %d column(s), %d issue(s).",
        len(spec.columns),
        len(result),
    )
    return result


def validate_artifact_options(spec: TableSpec) -> ValidationResult:
    """Override names and artifact flag combinations."""
    result: ValidationResult = ValidationResult()

    for field_name in _OVERRIDE_FIELDS:
        value: Optional[str] = getattr(spec, field_name)
        if value is None or not value.strip():
            continue
        if not _IDENTIFIER_RE.match(value.strip()):
            result.add_error(
                "INVALID_OVERRIDE_NAME",
                f"{field_name} '{value}' is not a valid class identifier.",
                {"field": field_name, "value": value},
            )

    if spec.generate_form_request and not spec.fillable_columns:
        result.add_warning(
            "FORM_REQUEST_WITHOUT_RULES",
            "A form request was requested but no column is fillable; "
            "its rules() will be empty.",
            {"entity": spec.entity_name},
        )

    if spec.generate_cache:
        if not spec.generate_repository:
            result.add_warning(
                "CACHE_WITHOUT_REPOSITORY",
                f"The cache class resolves {spec.entity_name}RepositoryInterface "
                f"from the container; generate the repository too or bind it yourself.",
                {"entity": spec.entity_name},
            )
        if spec.cache_key_type not in _CACHE_KEY_TYPES:
            result.add_error(
                "INVALID_CACHE_KEY_TYPE",
                f"cache_key_type '{spec.cache_key_type}' must be one of "
                f"{sorted(_CACHE_KEY_TYPES)}.",
                {"value": spec.cache_key_type},
            )
        if not _IDENTIFIER_RE.match(spec.cache_primary_key):
            result.add_error(
                "INVALID_CACHE_PRIMARY_KEY",
                f"cache_primary_key '{spec.cache_primary_key}' is not a valid identifier.",
                {"value": spec.cache_primary_key},
            )

    return result


def validate_generator_config(config: GeneratorConfig) -> ValidationResult:
    result: ValidationResult = ValidationResult()

    for field_name in _NAMESPACE_FIELDS:
        value: str = getattr(config, field_name)
        if not _NAMESPACE_RE.match(value):
            result.add_error(
                "INVALID_NAMESPACE",
                f"{field_name} '{value}' is not a valid PHP namespace.",
                {"field": field_name, "value": value},
            )

    user_model: str = config.user_model.strip("\\")
    if not _NAMESPACE_RE.match(user_model):
        result.add_error(
            "INVALID_USER_MODEL",
            f"user_model '{config.user_model}' is not a valid class name.",
            {"value": config.user_model},
        )

    for path in config.stub_paths:
        if not path.is_dir():
            result.add_warning(
                "STUB_PATH_MISSING",
                f"Stub directory '{path}' does not exist; bundled stubs will be used.",
                {"path": str(path)},
            )
    return result


# ---------------------------------------------------------------------------
# Composite validators
# ---------------------------------------------------------------------------


def validate_table_spec(spec: TableSpec) -> ValidationResult:
    """Run every spec-level validator and merge the results."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[TableSpec], ValidationResult]] = [
        validate_entity_name,
        validate_table_name,
        validate_columns,
        validate_artifact_options,
    ]
    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(spec))

    logger.info("Spec validation for %s complete: %s", spec.entity_name, result.summary())
    return result


def validate_full(spec: TableSpec, config: Optional[GeneratorConfig] = None) -> ValidationResult:
    """
    **Master validation entry point.**  Spec checks plus, when *config* is
    given, the configuration checks.
    """
    result: ValidationResult = validate_table_spec(spec)
    if config is not None:
        result.merge(validate_generator_config(config))

    if result.has_errors:
        logger.error(
            "Validation FAILED with %d error(s). %s",
            result.error_count,
            result.summary(),
        )
    else:
        logger.info("Validation PASSED. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_entity_name",
    "validate_table_name",
    "validate_columns",
    "validate_artifact_options",
    "validate_generator_config",
    "validate_table_spec",
    "validate_full",
]

logger.debug("laragen.validators loaded.")
