# File: laragen/cli.py
"""
Laragen - Command-Line Interface
================================

Built with the standard-library ``argparse`` module.

Usage examples::

    # Model, migration and JSON resource from an inline column list
    laragen Post -g -j --columns '[{"column_name": "title", "data_type": "string"}]'

    # Everything, from a job file, into a Laravel checkout
    laragen --spec post.yaml --all --base-path ~/code/blog

    # Read the columns from an existing table
    laragen --from-table blog_posts --database-url sqlite:///db.sqlite -a

    # Show the generated text without writing anything
    laragen Post --spec post.json --preview

    # Write a manifest of the generated files
    laragen --spec post.yaml --manifest manifest.json

Exit codes:
    0 - success
    1 - validation error
    2 - generation error
    4 - input/argument error
    5 - introspection error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence, Tuple

from laragen.errors import ConfigurationError, InputValidationError, IntrospectionError
from laragen.exporters import ExportManifest
from laragen.generator import (
    ARTIFACT_ORDER,
    VALIDATION_FAILED_PREFIX,
    GenerationOrchestrator,
    accept_overwrite,
    build_config,
    decline_overwrite,
    load_structured_file,
    parse_job,
)
from laragen.models import GenerationResult, GeneratorConfig, TableSpec
from laragen.registry import Registry, build_registry
from laragen.type_mapping import DATA_TYPE_OPTIONS
from laragen.utils import Timer, to_plural, to_snake_case, write_file
from laragen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_INPUT_ERROR: int = 4
EXIT_INTROSPECTION_ERROR: int = 5

# CLI flag dest -> TableSpec flag
_ARTIFACT_FLAGS: Dict[str, str] = {key: f"generate_{key}" for key in ARTIFACT_ORDER}


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``laragen`` logger.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("laragen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    from laragen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="laragen",
        description=(
            "Laragen - Laravel scaffolding generator.\n\n"
            "Builds an Eloquent model and, on request, its migration, factory, "
            "policy, controllers, JSON resource, form requests, repository pair "
            "and cache accessor from a column list or an existing table."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s Post -g -j --columns '[{\"column_name\": \"title\"}]'\n"
            "  %(prog)s --spec post.yaml --all --base-path ~/code/blog\n"
            "  %(prog)s --from-table blog_posts --database-url sqlite:///db.sqlite -a\n"
            "\nColumn data types:\n"
            + "".join(f"  {key:<12} {label}\n" for key, label in DATA_TYPE_OPTIONS.items())
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "model",
        nargs="?",
        default=None,
        help="Model (entity) class name, e.g. Post. Optional with --spec or --from-table.",
    )

    # --- Input ---
    input_group = parser.add_argument_group("input")
    input_group.add_argument(
        "--spec",
        metavar="PATH",
        default=None,
        help="JSON/YAML job file holding the model definition (and optional config).",
    )
    input_group.add_argument(
        "--columns",
        metavar="JSON",
        default=None,
        help="JSON array of column definitions.",
    )
    input_group.add_argument(
        "--from-table",
        metavar="TABLE",
        nargs="?",
        const="",
        default=None,
        help="Read columns from an existing table (defaults to the model's table).",
    )
    input_group.add_argument(
        "--database-url",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL used by --from-table.",
    )

    # --- Artifacts ---
    artifact_group = parser.add_argument_group(
        "artifacts",
        "When none of these is given, the flags from --spec (or the defaults) apply.",
    )
    artifact_group.add_argument("-a", "--all", action="store_true", help="Generate every artifact.")
    artifact_group.add_argument("-g", "--migration", action="store_true", help="Create-table migration.")
    artifact_group.add_argument("-f", "--factory", action="store_true", help="Model factory.")
    artifact_group.add_argument("-p", "--policy", action="store_true", help="Authorization policy.")
    artifact_group.add_argument(
        "-r", "--resource-controller", dest="resource_controller", action="store_true",
        help="Resource controller.",
    )
    artifact_group.add_argument(
        "-j", "--json-resource", dest="json_resource", action="store_true",
        help="JSON API resource.",
    )
    artifact_group.add_argument(
        "-c", "--api-controller", dest="api_controller", action="store_true",
        help="API controller.",
    )
    artifact_group.add_argument(
        "-x", "--form-request", dest="form_request", action="store_true",
        help="Form request with validation rules.",
    )
    artifact_group.add_argument(
        "-e", "--repository", action="store_true", help="Repository class and interface."
    )
    artifact_group.add_argument("-k", "--cache", action="store_true", help="Cache accessor class.")
    artifact_group.add_argument(
        "--split-requests",
        action="store_true",
        help="Generate Store/Update form requests instead of a single one.",
    )

    # --- Model options ---
    model_group = parser.add_argument_group("model options")
    model_group.add_argument(
        "--no-timestamps", action="store_true", help="Model has no created_at/updated_at."
    )
    model_group.add_argument(
        "-s", "--soft-deletes", dest="soft_deletes", action="store_true", help="Use SoftDeletes."
    )

    # --- Configuration ---
    config_group = parser.add_argument_group("configuration")
    config_group.add_argument(
        "--base-path", metavar="DIR", default=None, help="Laravel project root (default: .)."
    )
    config_group.add_argument(
        "--config", metavar="PATH", default=None, help="JSON/YAML generator configuration."
    )
    config_group.add_argument(
        "--stubs",
        metavar="DIR",
        action="append",
        default=[],
        help="Custom stub directory searched before the bundled stubs (repeatable).",
    )

    # --- Behaviour ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--preview", action="store_true", help="Print generated text instead of writing files."
    )
    behaviour_group.add_argument(
        "--validate-only", action="store_true", help="Validate the model definition and exit."
    )
    behaviour_group.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing repository interface.",
    )
    behaviour_group.add_argument(
        "--manifest",
        metavar="PATH",
        default=None,
        help="Write a JSON manifest (sizes and checksums) of the generated files.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Argument -> data helpers
# ---------------------------------------------------------------------------


def _artifact_flags(args: argparse.Namespace) -> Dict[str, bool]:
    """
    ``generate_*`` values chosen on the command line.

    ``--all`` turns everything on.  Any individual flag makes the selection
    explicit, so unselected artifacts are turned off.  With no flags the
    result is empty.
    """
    if args.all:
        return {flag: True for flag in _ARTIFACT_FLAGS.values()}
    chosen: Dict[str, bool] = {flag: bool(getattr(args, dest)) for dest, flag in _ARTIFACT_FLAGS.items()}
    if args.split_requests:
        chosen["generate_form_request"] = True
    if any(chosen.values()):
        return chosen
    return {}


def _spec_options(args: argparse.Namespace) -> Dict[str, Any]:
    options: Dict[str, Any] = dict(_artifact_flags(args))
    if args.split_requests:
        options["split_form_requests"] = True
    if args.no_timestamps:
        options["has_timestamps"] = False
    if args.soft_deletes:
        options["has_soft_deletes"] = True
    return options


def _config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.base_path is not None:
        overrides["base_path"] = args.base_path
    if args.stubs:
        overrides["stub_paths"] = [Path(p) for p in args.stubs]
    return overrides


def _load_job(args: argparse.Namespace) -> Tuple[Dict[str, Any], GeneratorConfig]:
    """``(spec_data, config)`` from --spec, --config and the CLI overrides."""
    spec_data: Dict[str, Any] = {}
    config_data: Dict[str, Any] = {}

    if args.config:
        raw_config: Dict[str, Any] = load_structured_file(Path(args.config))
        section: Any = raw_config.get("config", raw_config)
        if not isinstance(section, dict):
            raise InputValidationError(f"The 'config' section of {args.config} must be a mapping.")
        config_data.update(section)

    if args.spec:
        spec_data, job_config = parse_job(load_structured_file(Path(args.spec)))
        config_data.update(job_config)

    config_data.update(_config_overrides(args))
    return spec_data, build_config(config_data)


def _build_spec(args: argparse.Namespace, spec_data: Dict[str, Any], registry: Registry) -> TableSpec:
    options: Dict[str, Any] = _spec_options(args)

    if args.from_table is not None:
        table: str = args.from_table
        if not table:
            if not args.model:
                raise InputValidationError("--from-table needs a table name or a MODEL argument.")
            table = to_snake_case(to_plural(args.model))
        return TableSpec.from_introspection(
            table,
            registry.resolve("schema_reader"),
            entity_name=args.model,
            **options,
        )

    data: Dict[str, Any] = dict(spec_data)
    if args.model:
        data.pop("entity_name", None)
        data["model_name"] = args.model
    if args.columns is not None:
        data["columns"] = args.columns
    data.update(options)
    return TableSpec.from_payload(data)


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


def _run_validate_only(spec: TableSpec, config: GeneratorConfig) -> int:
    with Timer("validation") as t:
        result: ValidationResult = validate_full(spec, config)

    print(f"\n{'=' * 50}")
    print("  Model Validation Report")
    print(f"{'=' * 50}")
    print(f"  Model:    {spec.entity_name} ({spec.table_name})")
    print(f"  Columns:  {len(spec.columns)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")
    print()
    print(result.format_report())
    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


def _run_preview(orchestrator: GenerationOrchestrator, spec: TableSpec) -> int:
    previews: Dict[str, str] = orchestrator.preview(spec)
    for key, text in previews.items():
        print(f"// ===== {key} =====")
        print(text)
    if previews.get("model_preview", "").startswith(f"// {VALIDATION_FAILED_PREFIX}"):
        return EXIT_VALIDATION_ERROR
    return EXIT_SUCCESS


def _run_generation(
    orchestrator: GenerationOrchestrator,
    spec: TableSpec,
    manifest_path: Optional[str] = None,
) -> int:
    result: GenerationResult = orchestrator.generate(spec)
    print(result.summary())

    if "input" in result.errors:
        return EXIT_INPUT_ERROR
    if "validation" in result.errors:
        return EXIT_VALIDATION_ERROR

    manifest: ExportManifest = orchestrator.exporter.build_manifest()
    logger.info(
        "Wrote %d file(s), %d line(s); kept %d existing file(s).",
        manifest.total_files,
        manifest.total_lines,
        len(manifest.skipped),
    )
    if manifest_path:
        try:
            write_file(Path(manifest_path), manifest.to_json())
        except OSError as exc:
            logger.error("Could not write manifest %s: %s", manifest_path, exc)
            return EXIT_GENERATION_ERROR
        logger.info("Manifest written to %s.", manifest_path)

    return EXIT_SUCCESS if result.success else EXIT_GENERATION_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    _setup_logging(-1 if args.quiet else args.verbose)

    if not args.model and not args.spec and args.from_table is None:
        logger.error("A MODEL name, --spec or --from-table is required.")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    try:
        spec_data, config = _load_job(args)
        registry: Registry = build_registry(
            config,
            database_url=args.database_url,
            confirm_overwrite=accept_overwrite if args.force else decline_overwrite,
        )
        spec: TableSpec = _build_spec(args, spec_data, registry)
    except IntrospectionError as exc:
        logger.error("Introspection failed: %s", exc)
        sys.exit(EXIT_INTROSPECTION_ERROR)
    except (InputValidationError, ConfigurationError) as exc:
        logger.error("%s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    logger.info("Model:   %s (%s)", spec.entity_name, spec.table_name)
    logger.info("Output:  %s", config.base_path)

    if args.validate_only:
        sys.exit(_run_validate_only(spec, config))

    orchestrator: GenerationOrchestrator = registry.resolve("orchestrator")
    if args.preview:
        exit_code: int = _run_preview(orchestrator, spec)
    else:
        exit_code = _run_generation(orchestrator, spec, args.manifest)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_INPUT_ERROR",
    "EXIT_INTROSPECTION_ERROR",
]
