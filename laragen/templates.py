# File: laragen/templates.py
"""
Laragen - Artifact Template Engine
==================================
``TemplateGenerator`` turns a ``TableSpec`` and its ``ArtifactNames`` into
the source text of every Laravel artifact.  Each ``generate_*`` method is a
pure function of its arguments: it builds the placeholder values, then
hands them to ``StubLoader.render`` which owns all substitution and blank
line collapsing.

Generated layout (PSR-12, four-space indentation)::

    model           -> app/Models/{Entity}.php
    migration       -> database/migrations/..._create_{table}_table.php
    factory         -> database/factories/{Factory}.php
    policy          -> app/Policies/{Policy}.php
    controller      -> app/Http/Controllers/{Controller}.php
    controller.api  -> app/Http/Controllers/Api/{ApiController}.php
    resource        -> app/Http/Resources/{Resource}.php
    request         -> app/Http/Requests/{Request}.php
    repository      -> app/Repositories/{Repository}.php
    interface       -> app/Repositories/Contracts/{Interface}.php
    cache           -> app/Cache/{Entity}/{CacheName}.php

The generator never writes files; see ``laragen.exporters``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from laragen.models import ArtifactNames, ColumnSpec, GeneratorConfig, TableSpec
from laragen.rules import fillable_rule_lines
from laragen.stubs import StubLoader
from laragen.type_mapping import LogicalType, migration_method
from laragen.utils import (
    indent_lines,
    php_single_quote,
    to_camel_case,
    to_plural,
    to_snake_case,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: Indentation of lines inside ``Schema::create`` / ``return [...]`` blocks.
BODY_INDENT: int = 12
#: Indentation of class members.
MEMBER_INDENT: int = 4

# No leading zeros: PHP reads 007 as an octal literal
_NUMERIC_RE: re.Pattern[str] = re.compile(
    r"^\s*[+-]?((0|[1-9]\d*)(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$"
)

_FAKER_BY_TYPE: Dict[LogicalType, str] = {
    LogicalType.STRING: "fake()->sentence(3)",
    LogicalType.TEXT: "fake()->paragraph()",
    LogicalType.INTEGER: "fake()->numberBetween(1, 1000)",
    LogicalType.BIG_INTEGER: "fake()->numberBetween(1, 100000)",
    LogicalType.BOOLEAN: "fake()->boolean()",
    LogicalType.DATE: "fake()->date()",
    LogicalType.DATETIME: "fake()->dateTime()",
    LogicalType.TIMESTAMP: "fake()->dateTime()",
    LogicalType.DECIMAL: "fake()->randomFloat(2, 0, 1000)",
    LogicalType.FLOAT: "fake()->randomFloat(2, 0, 1000)",
    LogicalType.JSON: "[]",
}

# Column-name hints for string columns in factories
_FAKER_BY_NAME: Dict[str, str] = {
    "email": "safeEmail()",
    "name": "name()",
    "first_name": "firstName()",
    "last_name": "lastName()",
    "username": "userName()",
    "phone": "phoneNumber()",
    "url": "url()",
    "website": "url()",
    "slug": "slug()",
    "title": "sentence(4)",
    "address": "address()",
    "city": "city()",
    "country": "country()",
    "uuid": "uuid()",
}


# ---------------------------------------------------------------------------
# Column helpers (pure functions)
# ---------------------------------------------------------------------------


def is_numeric_default(value: Any) -> bool:
    """True when *value* is written unquoted in a migration."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    return isinstance(value, str) and bool(_NUMERIC_RE.match(value))


def format_default(value: Any) -> Optional[str]:
    """
    PHP literal for a column default, or ``None`` when there is no default.

        >>> format_default("42"), format_default("abc"), format_default("")
        ('42', "'abc'", None)
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str) and value == "":
        return None
    if is_numeric_default(value):
        return str(value).strip()
    return php_single_quote(str(value))


def render_column_definition(column: ColumnSpec) -> str:
    """``$table->string('title')->nullable()->unique()->default('x');``"""
    parts: List[str] = [f"$table->{migration_method(column.logical_type)}('{column.name}')"]
    if column.nullable:
        parts.append("->nullable()")
    if column.unique:
        parts.append("->unique()")
    default: Optional[str] = format_default(column.default_value)
    if default is not None:
        parts.append(f"->default({default})")
    return "".join(parts) + ";"


def render_column_definitions(
    columns: Sequence[ColumnSpec],
    has_timestamps: bool = True,
    has_soft_deletes: bool = False,
    indent: int = BODY_INDENT,
) -> str:
    """
    One definition line per column *as given*, in order, followed by the
    timestamps and soft-deletes lines.  Does not drop ``id``; callers that
    want the implicit primary key excluded filter before calling.
    """
    lines: List[str] = [render_column_definition(col) for col in columns]
    if has_timestamps:
        lines.append("$table->timestamps();")
    if has_soft_deletes:
        lines.append("$table->softDeletes();")
    return "\n".join(indent_lines(lines, indent))


def _php_list_block(property_decl: str, entries: List[str]) -> str:
    """Member block with a leading blank line, or ``""`` when *entries* is empty."""
    if not entries:
        return ""
    body: str = "\n".join(indent_lines(entries, MEMBER_INDENT * 2))
    return f"\n    {property_decl} = [\n{body}\n    ];"


def _class_basename(fqcn: str) -> str:
    return fqcn.rsplit("\\", 1)[-1]


# ---------------------------------------------------------------------------
# Template generator
# ---------------------------------------------------------------------------


class TemplateGenerator:
    """
    Renders every artifact from stubs.

    Usage::

        gen = TemplateGenerator(GeneratorConfig())
        names = derive_names(spec)
        php = gen.generate_model(spec, names)
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        loader: Optional[StubLoader] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._loader: StubLoader = loader or StubLoader(
            self._config.stub_paths,
            use_default_stubs=self._config.use_default_stubs,
        )
        logger.debug("TemplateGenerator initialised with %r.", self._loader)

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def loader(self) -> StubLoader:
        return self._loader

    # -----------------------------------------------------------------
    # Entity (Eloquent model)
    # -----------------------------------------------------------------

    def generate_model(self, spec: TableSpec, names: ArtifactNames) -> str:
        """Eloquent model with fillable, casts, traits and timestamps flag."""
        imports: List[str] = ["Illuminate\\Database\\Eloquent\\Model"]
        traits: List[str] = []
        if spec.generate_factory:
            imports.append("Illuminate\\Database\\Eloquent\\Factories\\HasFactory")
            traits.append("HasFactory")
        if spec.has_soft_deletes:
            imports.append("Illuminate\\Database\\Eloquent\\SoftDeletes")
            traits.append("SoftDeletes")

        fillable: List[str] = [f"'{col.name}'," for col in spec.fillable_columns]
        casts: List[str] = [
            f"'{col.name}' => '{col.cast}',"
            for col in spec.non_id_columns
            if col.cast is not None
        ]

        replacements: Dict[str, str] = {
            "namespace": self._config.model_namespace,
            "class": names.entity_name,
            "table": names.table_name,
            "imports": "\n".join(f"use {imp};" for imp in sorted(imports)),
            "traits": f"    use {', '.join(traits)};\n" if traits else "",
            "fillableArray": _php_list_block("protected $fillable", fillable),
            "castsArray": _php_list_block("protected $casts", casts),
            "timestampsProperty": (
                "" if spec.has_timestamps else "\n    public $timestamps = false;"
            ),
        }
        return self._loader.render(
            "model",
            replacements,
            collapsible=("traits", "fillableArray", "castsArray", "timestampsProperty"),
        )

    # -----------------------------------------------------------------
    # Schema (migration)
    # -----------------------------------------------------------------

    def generate_migration(self, spec: TableSpec, names: ArtifactNames) -> str:
        """Create-table migration; the implicit ``id`` comes from ``$table->id()``."""
        columns: str = render_column_definitions(
            spec.non_id_columns,
            has_timestamps=spec.has_timestamps,
            has_soft_deletes=spec.has_soft_deletes,
        )
        return self._loader.render(
            "migration",
            {"table": names.table_name, "columns": columns},
            collapsible=("columns",),
        )

    # -----------------------------------------------------------------
    # Validators (form requests)
    # -----------------------------------------------------------------

    def generate_form_request(
        self,
        spec: TableSpec,
        names: ArtifactNames,
        class_name: Optional[str] = None,
        for_update: bool = False,
    ) -> str:
        """
        Form request with one rule line per fillable column.  *for_update*
        lets unique columns ignore the record being updated.
        """
        route_parameter: Optional[str] = to_snake_case(spec.entity_name) if for_update else None
        rules: List[str] = fillable_rule_lines(spec.columns, names.table_name, route_parameter)
        replacements: Dict[str, str] = {
            "namespace": self._config.request_namespace,
            "class": class_name or names.form_request_name,
            "rules": "\n".join(indent_lines(rules, BODY_INDENT)),
        }
        return self._loader.render("request", replacements, collapsible=("rules",))

    def generate_form_requests(self, spec: TableSpec, names: ArtifactNames) -> Dict[str, str]:
        """
        ``{class_name: text}``: the Store/Update pair when
        ``split_form_requests`` is set, else the single request.
        """
        if spec.split_form_requests:
            return {
                names.store_request_name: self.generate_form_request(
                    spec, names, names.store_request_name
                ),
                names.update_request_name: self.generate_form_request(
                    spec, names, names.update_request_name, for_update=True
                ),
            }
        return {names.form_request_name: self.generate_form_request(spec, names)}

    # -----------------------------------------------------------------
    # Serializer (JSON resource)
    # -----------------------------------------------------------------

    def generate_json_resource(self, spec: TableSpec, names: ArtifactNames) -> str:
        fields: List[str] = ["'id' => $this->id,"]
        fields.extend(f"'{col.name}' => $this->{col.name}," for col in spec.non_id_columns)
        if spec.has_timestamps:
            fields.append("'created_at' => $this->created_at,")
            fields.append("'updated_at' => $this->updated_at,")
        if spec.has_soft_deletes:
            fields.append("'deleted_at' => $this->deleted_at,")

        return self._loader.render(
            "resource",
            {
                "namespace": self._config.resource_namespace,
                "class": names.json_resource_name,
                "fields": "\n".join(indent_lines(fields, BODY_INDENT)),
            },
        )

    # -----------------------------------------------------------------
    # Repository pair and shared base files
    # -----------------------------------------------------------------

    def generate_repository(self, spec: TableSpec, names: ArtifactNames) -> str:
        return self._loader.render(
            "repository",
            {
                "namespace": self._config.repository_namespace,
                "class": names.repository_name,
                "interface": names.repository_interface_name,
                "model": names.entity_name,
                "modelNamespace": self._config.model_namespace,
                "contractNamespace": self._config.contract_namespace,
            },
        )

    def generate_repository_interface(self, spec: TableSpec, names: ArtifactNames) -> str:
        return self._loader.render(
            "repository_interface",
            {
                "namespace": self._config.contract_namespace,
                "class": names.repository_interface_name,
                "model": names.entity_name,
                "modelNamespace": self._config.model_namespace,
            },
        )

    def generate_repository_base(self) -> Dict[str, str]:
        """``BaseRepository`` and the ``RepositoryInterface`` contract."""
        return {
            "BaseRepository": self._loader.render(
                "base_repository",
                {
                    "namespace": self._config.repository_namespace,
                    "contractNamespace": self._config.contract_namespace,
                },
            ),
            "RepositoryInterface": self._loader.render(
                "repository_contract",
                {"namespace": self._config.contract_namespace},
            ),
        }

    # -----------------------------------------------------------------
    # Factory / policy / controllers
    # -----------------------------------------------------------------

    def _faker_expression(self, column: ColumnSpec) -> str:
        expr: str = _FAKER_BY_TYPE.get(column.logical_type, "fake()->word()")
        if column.logical_type is LogicalType.STRING:
            hint: Optional[str] = _FAKER_BY_NAME.get(column.name.lower())
            if hint is not None:
                expr = f"fake()->{hint}"
        if column.unique and expr.startswith("fake()->"):
            expr = "fake()->unique()->" + expr[len("fake()->"):]
        return expr

    def generate_factory(self, spec: TableSpec, names: ArtifactNames) -> str:
        definitions: List[str] = [
            f"'{col.name}' => {self._faker_expression(col)},"
            for col in spec.fillable_columns
        ]
        return self._loader.render(
            "factory",
            {
                "namespace": self._config.factory_namespace,
                "class": names.factory_name,
                "model": names.entity_name,
                "modelNamespace": self._config.model_namespace,
                "definitions": "\n".join(indent_lines(definitions, BODY_INDENT)),
            },
            collapsible=("definitions",),
        )

    def generate_policy(self, spec: TableSpec, names: ArtifactNames) -> str:
        user_fqcn: str = self._config.user_model.strip("\\")
        model_fqcn: str = f"{self._config.model_namespace}\\{names.entity_name}"
        return self._loader.render(
            "policy",
            {
                "namespace": self._config.policy_namespace,
                "class": names.policy_name,
                "model": names.entity_name,
                "modelNamespace": self._config.model_namespace,
                "modelVariable": names.model_variable,
                "user": _class_basename(user_fqcn),
                "userImport": "" if user_fqcn == model_fqcn else f"use {user_fqcn};",
            },
            collapsible=("userImport",),
        )

    def _controller_replacements(self, names: ArtifactNames, namespace: str, cls: str) -> Dict[str, str]:
        return {
            "namespace": namespace,
            "class": cls,
            "model": names.entity_name,
            "modelNamespace": self._config.model_namespace,
            "modelVariable": names.model_variable,
            "controllerNamespace": self._config.controller_namespace,
        }

    def generate_resource_controller(self, spec: TableSpec, names: ArtifactNames) -> str:
        return self._loader.render(
            "controller",
            self._controller_replacements(
                names, self._config.controller_namespace, names.resource_controller_name
            ),
        )

    def generate_api_controller(self, spec: TableSpec, names: ArtifactNames) -> str:
        return self._loader.render(
            "controller.api",
            self._controller_replacements(
                names, self._config.api_controller_namespace, names.api_controller_name
            ),
        )

    # -----------------------------------------------------------------
    # Cache accessor and shared base files
    # -----------------------------------------------------------------

    def cache_key_prefix(self, names: ArtifactNames) -> str:
        """``posts`` for ``Post``: the prefix of ``"posts.{$id}"``."""
        return to_plural(names.entity_name.lower())

    def generate_cache(self, spec: TableSpec, names: ArtifactNames) -> str:
        key_variable: str = to_camel_case(spec.cache_primary_key) or "id"
        return self._loader.render(
            "cache",
            {
                "namespace": f"{self._config.cache_namespace}\\{names.entity_name}",
                "cacheNamespace": self._config.cache_namespace,
                "class": names.cache_name,
                "model": names.entity_name,
                "modelNamespace": self._config.model_namespace,
                "contractNamespace": self._config.contract_namespace,
                "repositoryInterface": names.repository_interface_name,
                "keyType": spec.cache_key_type,
                "keyVariable": key_variable,
                "cacheKeyPrefix": self.cache_key_prefix(names),
                "ttl": self._config.cache_ttl,
            },
        )

    def generate_cache_base(self) -> Dict[str, str]:
        """``CacheBase`` and its ``WithHelpers`` trait."""
        replacements: Dict[str, str] = {"namespace": self._config.cache_namespace}
        return {
            "CacheBase": self._loader.render("cache_base", replacements),
            "WithHelpers": self._loader.render("cache_helpers", replacements),
        }


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "TemplateGenerator",
    "BODY_INDENT",
    "is_numeric_default",
    "format_default",
    "render_column_definition",
    "render_column_definitions",
]

logger.debug("laragen.templates loaded.")
