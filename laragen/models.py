# File: laragen/models.py
"""
Laragen - Core Data Models
==========================
Pydantic V2 models describing one generation job and the generator's
configuration.  These are the single source of truth for the pipeline:

    Job input -> TableSpec -> validation -> stub rendering -> export

``TableSpec`` and ``ColumnSpec`` are frozen: defaults (table name, flags)
are resolved exactly once at construction and no generator can mutate a
spec mid-run, so the same spec can be previewed, generated and retried.

Three constructors cover the ways a job arrives:

- ``TableSpec.from_payload``       -- a JSON object (string or mapping).
- ``TableSpec.from_introspection`` -- an existing database table.
- ``TableSpec.from_definition``    -- a previously stored definition.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from laragen.errors import InputValidationError
from laragen.introspection import SchemaReader, get_table_columns
from laragen.type_mapping import LogicalType, cast_for, coerce_logical_type
from laragen.utils import to_plural, to_singular, to_snake_case, to_studly_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_SPEC_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    extra="forbid",
)

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DefaultValue = Union[str, int, float, None]


def _default_when_none(model: type, value: Any, info: ValidationInfo) -> Any:
    """A JSON ``null`` for an optional field means "use the field default"."""
    if value is None:
        return model.model_fields[info.field_name].get_default(call_default_factory=True)
    return value


# ---------------------------------------------------------------------------
# Column
# ---------------------------------------------------------------------------


class ColumnSpec(BaseModel):
    """
    One column of the job.

    Accepts the payload spelling (``column_name``, ``data_type``,
    ``is_fillable``) as well as the field names.  ``data_type`` may be a
    logical type, a Blueprint method name or a native database type;
    unknown types quietly become ``string``.
    """

    model_config = _SPEC_CONFIG

    name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("name", "column_name"),
        description="Column name.",
    )
    logical_type: LogicalType = Field(
        default=LogicalType.STRING,
        validation_alias=AliasChoices("logical_type", "data_type", "type"),
        description="Logical type after native-type mapping.",
    )
    nullable: bool = Field(default=False, description="Column accepts NULL.")
    unique: bool = Field(default=False, description="Column has a unique index.")
    fillable: bool = Field(
        default=True,
        validation_alias=AliasChoices("fillable", "is_fillable"),
        description="Eligible for mass assignment on the model.",
    )
    default_value: DefaultValue = Field(
        default=None,
        validation_alias=AliasChoices("default_value", "default"),
        description="Column default as written in the migration.",
    )

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("logical_type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> LogicalType:
        return coerce_logical_type(v)

    @field_validator("nullable", "unique", "fillable", mode="before")
    @classmethod
    def _null_flags(cls, v: Any, info: ValidationInfo) -> Any:
        return _default_when_none(cls, v, info)

    @property
    def is_primary_key_name(self) -> bool:
        """True for the implicit ``id`` primary key (case-insensitive)."""
        return self.name.lower() == "id"

    @property
    def cast(self) -> Optional[str]:
        return cast_for(self.logical_type)

    def __repr__(self) -> str:
        flags: List[str] = [
            label
            for label, on in (
                ("nullable", self.nullable),
                ("unique", self.unique),
                ("guarded", not self.fillable),
            )
            if on
        ]
        suffix: str = f" [{', '.join(flags)}]" if flags else ""
        return f"<Column {self.name}: {self.logical_type.value}{suffix}>"


# ---------------------------------------------------------------------------
# Table / generation job
# ---------------------------------------------------------------------------


class TableSpec(BaseModel):
    """
    Normalised description of one generation job.

    ``table_name`` is resolved at construction to
    ``snake_case(plural(entity_name))`` when not given.
    """

    model_config = _SPEC_CONFIG

    entity_name: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("entity_name", "model_name"),
        description="Eloquent model class name.",
    )
    table_name: str = Field(default="", description="Database table name.")
    columns: Tuple[ColumnSpec, ...] = Field(
        default=(), description="Columns in declaration order."
    )

    # -- Table behaviour ----------------------------------------------------
    has_timestamps: bool = Field(default=True)
    has_soft_deletes: bool = Field(default=False)

    # -- Artifact flags -----------------------------------------------------
    generate_migration: bool = Field(default=True)
    generate_factory: bool = Field(default=True)
    generate_policy: bool = Field(default=True)
    generate_resource_controller: bool = Field(default=True)
    generate_json_resource: bool = Field(default=False)
    generate_api_controller: bool = Field(default=False)
    generate_form_request: bool = Field(default=False)
    generate_repository: bool = Field(default=False)
    generate_cache: bool = Field(default=False)
    split_form_requests: bool = Field(
        default=False,
        description="Emit Store/Update request classes instead of one request.",
    )

    # -- Cache accessor -----------------------------------------------------
    cache_primary_key: str = Field(default="Id", min_length=1)
    cache_key_type: str = Field(default="int", min_length=1)

    # -- Name overrides -----------------------------------------------------
    factory_name: Optional[str] = None
    policy_name: Optional[str] = None
    resource_controller_name: Optional[str] = None
    json_resource_name: Optional[str] = None
    api_controller_name: Optional[str] = None
    form_request_name: Optional[str] = None
    repository_name: Optional[str] = None
    cache_name: Optional[str] = None

    @field_validator("entity_name", mode="before")
    @classmethod
    def _strip_entity(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator(
        "has_timestamps",
        "has_soft_deletes",
        "generate_migration",
        "generate_factory",
        "generate_policy",
        "generate_resource_controller",
        "generate_json_resource",
        "generate_api_controller",
        "generate_form_request",
        "generate_repository",
        "generate_cache",
        "split_form_requests",
        "cache_primary_key",
        "cache_key_type",
        mode="before",
    )
    @classmethod
    def _null_options(cls, v: Any, info: ValidationInfo) -> Any:
        return _default_when_none(cls, v, info)

    @field_validator("entity_name")
    @classmethod
    def _entity_is_identifier(cls, v: str) -> str:
        if not _IDENTIFIER_RE.match(v):
            raise ValueError(f"Entity name '{v}' is not a valid class identifier.")
        return v

    @model_validator(mode="before")
    @classmethod
    def _resolve_table_name(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        table: Any = data.get("table_name")
        if isinstance(table, str) and table.strip():
            return {**data, "table_name": table.strip()}
        entity: Any = data.get("entity_name", data.get("model_name"))
        if isinstance(entity, str) and entity.strip():
            resolved: str = to_snake_case(to_plural(entity.strip()))
            return {**data, "table_name": resolved}
        return data

    @model_validator(mode="after")
    def _unique_column_names(self) -> "TableSpec":
        seen: Dict[str, int] = {}
        for col in self.columns:
            seen[col.name] = seen.get(col.name, 0) + 1
        dupes: List[str] = sorted(name for name, count in seen.items() if count > 1)
        if dupes:
            raise ValueError(f"Duplicate column names: {', '.join(dupes)}")
        return self

    # -- Derived views --------------------------------------------------------

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def non_id_columns(self) -> List[ColumnSpec]:
        """Every column except the implicit ``id`` primary key."""
        return [c for c in self.columns if not c.is_primary_key_name]

    @property
    def fillable_columns(self) -> List[ColumnSpec]:
        """Mass-assignable columns, ``id`` excluded."""
        return [c for c in self.non_id_columns if c.fillable]

    def get_column(self, name: str) -> Optional[ColumnSpec]:
        for col in self.columns:
            if col.name == name:
                return col
        return None

    # -- Constructors ---------------------------------------------------------

    @classmethod
    def from_payload(cls, payload: Union[str, bytes, Mapping[str, Any]]) -> "TableSpec":
        """
        Build a spec from a JSON payload::

            {"model_name": "Post", "table_name": "posts",
             "columns": [{"column_name": "title", "data_type": "string",
                          "nullable": false, "unique": false,
                          "is_fillable": true, "default_value": null}],
             "generate_repository": true}

        ``columns`` may itself be a JSON-encoded string.  Any problem raises
        ``InputValidationError`` before anything is generated.
        """
        data: Dict[str, Any] = _decode_object(payload, "payload")

        if not str(data.get("model_name") or data.get("entity_name") or "").strip():
            raise InputValidationError("Model name is required.")

        raw_columns: Any = data.get("columns")
        if raw_columns is None:
            raw_columns = []
        if isinstance(raw_columns, (str, bytes)):
            raw_columns = _decode_json(raw_columns, "columns")
        if not isinstance(raw_columns, list):
            raise InputValidationError(
                f"Columns must be a list, got {type(raw_columns).__name__}."
            )
        data["columns"] = raw_columns

        return _validate_spec(data)

    @classmethod
    def from_definition(cls, definition: Mapping[str, Any]) -> "TableSpec":
        """
        Build a spec from a stored definition.

        Keys that are not spec fields (row ids, audit timestamps) are
        ignored; ``columns`` may hold ``ColumnSpec`` objects or mappings.
        """
        known: Dict[str, Any] = {}
        accepted = set(cls.model_fields) | {"model_name"}
        for key, value in definition.items():
            if key in accepted:
                known[key] = value
        columns: List[Any] = []
        for col in known.get("columns") or []:
            if isinstance(col, ColumnSpec):
                columns.append(col)
            elif isinstance(col, Mapping):
                columns.append({k: v for k, v in col.items() if k in _COLUMN_KEYS})
            else:
                columns.append(col)
        known["columns"] = columns
        return _validate_spec(known)

    @classmethod
    def from_introspection(
        cls,
        table_name: str,
        reader: SchemaReader,
        entity_name: Optional[str] = None,
        **flags: Any,
    ) -> "TableSpec":
        """
        Build a spec from an existing table.

        ``id``, ``created_at``, ``updated_at`` and ``deleted_at`` are dropped
        by the reader helper; the entity name defaults to the singular
        StudlyCase of the table.  Raises ``IntrospectionError`` if the table
        does not exist.
        """
        rows: List[Dict[str, Any]] = get_table_columns(reader, table_name)
        if entity_name is None:
            entity_name = to_studly_case(to_singular(table_name))
        data: Dict[str, Any] = {
            "entity_name": entity_name,
            "table_name": table_name,
            "columns": rows,
            **flags,
        }
        logger.info(
            "Introspected table '%s': %d column(s) -> entity %s.",
            table_name,
            len(rows),
            entity_name,
        )
        return _validate_spec(data)

    def __repr__(self) -> str:
        return (
            f"<TableSpec {self.entity_name} ({self.table_name}, "
            f"{len(self.columns)} cols)>"
        )


_COLUMN_KEYS = frozenset({
    "name", "column_name", "logical_type", "data_type", "type", "nullable",
    "unique", "fillable", "is_fillable", "default_value", "default",
})


def _decode_json(raw: Union[str, bytes], what: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise InputValidationError(f"Malformed {what} JSON: {exc}") from exc


def _decode_object(payload: Any, what: str) -> Dict[str, Any]:
    data: Any = payload
    if isinstance(payload, (str, bytes)):
        data = _decode_json(payload, what)
    if not isinstance(data, Mapping):
        raise InputValidationError(
            f"Expected a JSON object for the {what}, got {type(data).__name__}."
        )
    return dict(data)


def _validate_spec(data: Dict[str, Any]) -> TableSpec:
    try:
        return TableSpec.model_validate(data)
    except ValidationError as exc:
        problems: List[str] = []
        for err in exc.errors():
            loc: str = ".".join(str(part) for part in err.get("loc", ()))
            problems.append(f"{loc}: {err.get('msg', '')}" if loc else err.get("msg", ""))
        raise InputValidationError("Invalid table specification.", problems) from exc


# ---------------------------------------------------------------------------
# Derived artifact names
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ArtifactNames:
    """Resolved class names for every artifact of one spec."""

    entity_name: str
    table_name: str
    model_variable: str
    factory_name: str
    policy_name: str
    resource_controller_name: str
    json_resource_name: str
    api_controller_name: str
    form_request_name: str
    store_request_name: str
    update_request_name: str
    repository_name: str
    repository_interface_name: str
    cache_name: str


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------


class GeneratorConfig(BaseModel):
    """
    Where generated files go, which stubs are used and which namespaces the
    generated PHP lives in.
    """

    model_config = _SETTINGS_CONFIG

    base_path: Path = Field(
        default=Path("."), description="Root of the Laravel application."
    )
    stub_paths: List[Path] = Field(
        default_factory=list,
        description="Custom stub directories searched before the bundled stubs.",
    )
    use_default_stubs: bool = Field(
        default=True, description="Fall back to the stubs shipped with laragen."
    )
    atomic_writes: bool = Field(default=True)
    migration_timestamp_format: str = Field(default="%Y_%m_%d_%H%M%S")

    # -- Namespaces -----------------------------------------------------------
    model_namespace: str = Field(default="App\\Models")
    factory_namespace: str = Field(default="Database\\Factories")
    policy_namespace: str = Field(default="App\\Policies")
    controller_namespace: str = Field(default="App\\Http\\Controllers")
    api_controller_namespace: str = Field(default="App\\Http\\Controllers\\Api")
    request_namespace: str = Field(default="App\\Http\\Requests")
    resource_namespace: str = Field(default="App\\Http\\Resources")
    repository_namespace: str = Field(default="App\\Repositories")
    contract_namespace: str = Field(default="App\\Repositories\\Contracts")
    cache_namespace: str = Field(default="App\\Cache")

    user_model: str = Field(default="App\\Models\\User")
    cache_ttl: str = Field(
        default="now()->addHour()", description="PHP expression for the cache TTL."
    )

    @field_validator("base_path", mode="before")
    @classmethod
    def _expand_base(cls, v: Any) -> Any:
        return Path(v).expanduser() if isinstance(v, (str, Path)) else v

    @field_validator(
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
    )
    @classmethod
    def _trim_namespace(cls, v: str) -> str:
        trimmed: str = v.strip().strip("\\")
        if not trimmed:
            raise ValueError("Namespace must not be empty.")
        return trimmed


# ---------------------------------------------------------------------------
# Generation result
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GenerationResult:
    """
    Outcome of one orchestrator run.

    ``results`` maps artifact keys (``model``, ``model_file``, ...) to class
    names and written paths; ``errors`` maps artifact keys to the message of
    the error that stopped that artifact.
    """

    success: bool = False
    message: str = ""
    results: Dict[str, str] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "results": dict(self.results),
            "errors": dict(self.errors),
        }

    def summary(self) -> str:
        """Human-readable report for the CLI."""
        lines: List[str] = [self.message]
        for key, value in self.results.items():
            if key.endswith("_file"):
                lines.append(f"  + {value}")
        for key, message in self.errors.items():
            lines.append(f"  ! {key}: {message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ColumnSpec",
    "TableSpec",
    "ArtifactNames",
    "GeneratorConfig",
    "GenerationResult",
    "DefaultValue",
]

logger.debug("laragen.models loaded - %d public symbols.", len(__all__))
