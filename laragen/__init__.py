# File: laragen/__init__.py
"""
Laragen - Laravel Scaffolding Generator
=======================================

Turns a table description (a JSON/YAML job, an inline column list or an
existing database table) into the Laravel files that usually accompany an
Eloquent model: migration, factory, policy, controllers, JSON resource,
form requests, repository class/interface and a cache accessor.

Architecture overview::

    ┌──────────────┐     ┌────────────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ GenerationOrchestrator │────▶│ TemplateGenerator│
    │   (cli.py)   │     │     (generator.py)     │     │  (templates.py)  │
    └──────┬───────┘     └───────────┬────────────┘     └────────┬─────────┘
           │                         │                           │
           ▼              ┌──────────┼──────────┐                ▼
    ┌─────────────┐       ▼          ▼          ▼         ┌────────────┐
    │introspection│ ┌──────────┐ ┌────────┐ ┌─────────┐   │ stubs/rules│
    │   (.py)     │ │validators│ │ models │ │exporters│   │  naming    │
    └─────────────┘ └──────────┘ └────────┘ └─────────┘   └────────────┘

Usage::

    # As a library
    from laragen import GenerationOrchestrator, GeneratorConfig, TableSpec
    spec = TableSpec.from_payload({"model_name": "Post", "columns": [...]})
    result = GenerationOrchestrator(GeneratorConfig(base_path=root)).generate(spec)

    # From the command line
    laragen Post --all --columns '[{"column_name": "title"}]'

Public API:
    - GenerationOrchestrator -- generate / preview entry point
    - TableSpec, ColumnSpec  -- job description models
    - GeneratorConfig        -- paths, stubs and namespaces
    - TemplateGenerator      -- per-artifact renderers
    - ProjectExporter        -- file-system writer
    - validate_full          -- semantic validation entry point
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from laragen.errors import (
    ConfigurationError,
    InputValidationError,
    IntrospectionError,
    LaragenError,
)
from laragen.type_mapping import LogicalType, cast_for, map_native_type
from laragen.models import (
    ArtifactNames,
    ColumnSpec,
    GenerationResult,
    GeneratorConfig,
    TableSpec,
)
from laragen.introspection import SchemaReader, SqlAlchemySchemaReader, get_table_columns
from laragen.rules import derive_rules
from laragen.naming import derive_names
from laragen.stubs import StubLoader, render_stub
from laragen.templates import TemplateGenerator, render_column_definitions
from laragen.validators import ValidationResult, validate_full, validate_table_spec
from laragen.exporters import ExportManifest, FileRecord, ProjectExporter
from laragen.generator import GenerationOrchestrator, load_config_file, load_spec_file
from laragen.registry import Registry, build_registry

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Errors
    "LaragenError",
    "ConfigurationError",
    "InputValidationError",
    "IntrospectionError",
    # Type mapping
    "LogicalType",
    "map_native_type",
    "cast_for",
    # Models
    "ColumnSpec",
    "TableSpec",
    "ArtifactNames",
    "GeneratorConfig",
    "GenerationResult",
    # Introspection
    "SchemaReader",
    "SqlAlchemySchemaReader",
    "get_table_columns",
    # Derivation
    "derive_rules",
    "derive_names",
    # Templates
    "StubLoader",
    "render_stub",
    "TemplateGenerator",
    "render_column_definitions",
    # Validation
    "validate_full",
    "validate_table_spec",
    "ValidationResult",
    # Export & orchestration
    "ProjectExporter",
    "ExportManifest",
    "FileRecord",
    "GenerationOrchestrator",
    "load_spec_file",
    "load_config_file",
    "Registry",
    "build_registry",
]
