# File: laragen/generator.py
"""
Laragen - Generation Pipeline (Orchestrator)
============================================

Connects every phase together:

    Job input -> TableSpec -> Validation -> Stub rendering -> File export

Workflow::

    1. Normalise the input (TableSpec, mapping or JSON text).
    2. Run the semantic validation pipeline (validators.py).
    3. Resolve artifact names (naming.py).
    4. Render the model, then every requested artifact in a fixed order.
    5. Write each artifact through ``ProjectExporter`` (generate) or return
       its text (preview).

Error handling strategy:
    - Bad input and validation errors stop the run before anything is
      written.
    - A missing stub (``ConfigurationError``) or bad artifact input
      (``InputValidationError``) only fails that artifact; the others are
      still generated and ``success`` is False.
    - Anything else aborts the run with the results gathered so far.
      Files already written stay on disk.

``generate`` and ``preview`` share ``_render_artifacts``, so the text a
preview shows is byte-for-byte the text ``generate`` writes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from laragen.errors import ConfigurationError, InputValidationError
from laragen.exporters import BASE_FILE_PATHS, ProjectExporter, artifact_path, migration_path
from laragen.models import ArtifactNames, GenerationResult, GeneratorConfig, TableSpec
from laragen.naming import derive_names
from laragen.templates import TemplateGenerator
from laragen.utils import Timer
from laragen.validators import ValidationResult, validate_table_spec

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.generator")

SpecInput = Union[TableSpec, Mapping[str, Any], str, bytes, None]
Clock = Callable[[], datetime]
OverwriteDecision = Callable[[Path], bool]

#: Order in which optional artifacts are produced after the model.
ARTIFACT_ORDER: Tuple[str, ...] = (
    "migration",
    "factory",
    "policy",
    "resource_controller",
    "json_resource",
    "api_controller",
    "form_request",
    "repository",
    "cache",
)

SUCCESS_MESSAGE: str = "Model generated successfully!"
NO_INPUT_MESSAGE: str = "No model data provided for generation"
VALIDATION_FAILED_PREFIX: str = "Validation failed: "


def decline_overwrite(path: Path) -> bool:
    """Default overwrite decision: keep the existing file."""
    logger.debug("Declining to overwrite %s.", path)
    return False


def accept_overwrite(path: Path) -> bool:
    logger.debug("Overwriting %s.", path)
    return True


# ---------------------------------------------------------------------------
# Rendered artifact
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RenderedArtifact:
    """
    One generated file.

    ``key`` is the result key (``model``, ``store_request``, ...); it is
    ``None`` for shared base files, which are written only when missing and
    never previewed.
    """

    key: Optional[str]
    class_name: str
    relative_path: str
    text: str
    confirm_existing: bool = False

    @property
    def is_base_file(self) -> bool:
        return self.key is None


# ---------------------------------------------------------------------------
# Job & config file loaders
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InputValidationError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InputValidationError(
            f"Expected a JSON object at top level of {path}, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InputValidationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InputValidationError(
            f"Expected a YAML mapping at top level of {path}, got {type(data).__name__}."
        )
    return data


def load_structured_file(path: Path) -> Dict[str, Any]:
    """
    Load a JSON or YAML mapping, dispatching on the file extension.

    Raises:
        InputValidationError: missing file or unparsable content.
    """
    if not path.is_file():
        raise InputValidationError(f"File not found: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s'; trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except InputValidationError:
        return _load_yaml_file(path)


def parse_job(raw: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Split a job document into ``(spec_data, config_data)``.

    The spec lives under ``spec``, ``model`` or ``table``, or is the whole
    document; the optional configuration lives under ``config``.
    """
    config_data: Any = raw.get("config") or {}
    if not isinstance(config_data, Mapping):
        raise InputValidationError("The 'config' section must be a mapping.")

    for key in ("spec", "model", "table"):
        section: Any = raw.get(key)
        if isinstance(section, Mapping):
            return dict(section), dict(config_data)

    spec_data: Dict[str, Any] = {k: v for k, v in raw.items() if k != "config"}
    return spec_data, dict(config_data)


def load_spec_file(path: Path) -> TableSpec:
    """Load a JSON/YAML job file into a ``TableSpec``."""
    spec_data, _ = parse_job(load_structured_file(path))
    return TableSpec.from_payload(spec_data)


def load_config_file(path: Path, **overrides: Any) -> GeneratorConfig:
    """Load a ``GeneratorConfig`` from JSON/YAML; *overrides* win."""
    raw: Dict[str, Any] = load_structured_file(path)
    data: Any = raw.get("config", raw)
    if not isinstance(data, Mapping):
        raise InputValidationError(f"The 'config' section of {path} must be a mapping.")
    return build_config({**dict(data), **overrides})


def build_config(data: Mapping[str, Any]) -> GeneratorConfig:
    try:
        return GeneratorConfig.model_validate(dict(data))
    except ValidationError as exc:
        problems: List[str] = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        raise InputValidationError("Invalid generator configuration.", problems) from exc


# ---------------------------------------------------------------------------
# GenerationOrchestrator
# ---------------------------------------------------------------------------


class GenerationOrchestrator:
    """
    Runs one generation job.

    Usage::

        orchestrator = GenerationOrchestrator(GeneratorConfig(base_path=root))
        result = orchestrator.generate(spec)
        previews = orchestrator.preview(spec)

    The orchestrator holds no per-run state and can be reused.
    """

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        templates: Optional[TemplateGenerator] = None,
        exporter: Optional[ProjectExporter] = None,
        *,
        clock: Optional[Clock] = None,
        confirm_overwrite: Optional[OverwriteDecision] = None,
    ) -> None:
        self._config: GeneratorConfig = config or GeneratorConfig()
        self._templates: TemplateGenerator = templates or TemplateGenerator(self._config)
        self._exporter: ProjectExporter = exporter or ProjectExporter(
            self._config.base_path, atomic_writes=self._config.atomic_writes
        )
        self._clock: Clock = clock or datetime.now
        self._confirm_overwrite: OverwriteDecision = confirm_overwrite or decline_overwrite

        self._steps: Dict[str, Callable[[TableSpec, ArtifactNames, datetime], List[RenderedArtifact]]] = {
            "migration": self._render_migration,
            "factory": self._render_factory,
            "policy": self._render_policy,
            "resource_controller": self._render_resource_controller,
            "json_resource": self._render_json_resource,
            "api_controller": self._render_api_controller,
            "form_request": self._render_form_requests,
            "repository": self._render_repository,
            "cache": self._render_cache,
        }
        logger.debug("GenerationOrchestrator initialised: base_path=%s.", self._exporter.base_path)

    @property
    def exporter(self) -> ProjectExporter:
        return self._exporter

    @property
    def templates(self) -> TemplateGenerator:
        return self._templates

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    @staticmethod
    def normalize(spec_input: SpecInput) -> TableSpec:
        """``TableSpec`` from any accepted input; raises ``InputValidationError``."""
        if isinstance(spec_input, TableSpec):
            return spec_input
        if spec_input is None:
            raise InputValidationError(NO_INPUT_MESSAGE)
        return TableSpec.from_payload(spec_input)

    @staticmethod
    def requested_steps(spec: TableSpec) -> List[str]:
        """Optional artifact keys requested by *spec*, in generation order."""
        return [key for key in ARTIFACT_ORDER if getattr(spec, f"generate_{key}")]

    def generate(self, spec_input: SpecInput) -> GenerationResult:
        """Validate, render and write every requested artifact."""
        if spec_input is None:
            return GenerationResult(success=False, message=NO_INPUT_MESSAGE)

        try:
            spec: TableSpec = self.normalize(spec_input)
        except InputValidationError as exc:
            logger.error("Rejected input: %s", exc)
            return GenerationResult(success=False, message=str(exc), errors={"input": str(exc)})

        failure: Optional[str] = self._validation_failure(spec)
        if failure is not None:
            return GenerationResult(
                success=False,
                message=VALIDATION_FAILED_PREFIX + failure,
                errors={"validation": failure},
            )

        result: GenerationResult = GenerationResult()
        with Timer(f"generate {spec.entity_name}"):
            try:
                for _, artifacts in self._render_artifacts(spec, result.errors):
                    for artifact in artifacts:
                        self._write(artifact, result)
            except Exception as exc:
                logger.error("Generation of %s aborted: %s", spec.entity_name, exc, exc_info=True)
                result.success = False
                result.message = f"Error generating model: {exc}"
                return result

        result.success = not result.errors
        if result.success:
            result.message = SUCCESS_MESSAGE
        else:
            result.message = (
                f"Model generated with errors; failed artifact(s): {', '.join(result.errors)}."
            )
        logger.info("%s", result.message)
        return result

    def preview(self, spec_input: SpecInput) -> Dict[str, str]:
        """
        Text of every requested artifact keyed ``<key>_preview``; nothing is
        written.  An artifact that cannot be rendered is shown as a PHP
        comment carrying the error.  A spec that ``generate`` would refuse
        yields only a ``model_preview`` comment with the validation errors.
        """
        if spec_input is None:
            return {
                "model_preview": "// No model data provided",
                "migration_preview": "// No migration data provided",
            }

        spec: TableSpec = self.normalize(spec_input)
        failure: Optional[str] = self._validation_failure(spec)
        if failure is not None:
            return {"model_preview": f"// {VALIDATION_FAILED_PREFIX}{failure}"}

        errors: Dict[str, str] = {}
        previews: Dict[str, str] = {}
        for _, artifacts in self._render_artifacts(spec, errors):
            for artifact in artifacts:
                if not artifact.is_base_file:
                    previews[f"{artifact.key}_preview"] = artifact.text
        for key, message in errors.items():
            previews[f"{key}_preview"] = f"// Could not render {key}: {message}"
        return previews

    # -----------------------------------------------------------------
    # Shared rendering
    # -----------------------------------------------------------------

    @staticmethod
    def _validation_failure(spec: TableSpec) -> Optional[str]:
        """Joined error messages when *spec* fails validation, else ``None``."""
        validation: ValidationResult = validate_table_spec(spec)
        for warning in validation.warnings:
            logger.warning("%s", warning)
        if not validation.has_errors:
            return None
        return "; ".join(validation.error_messages())

    def _render_artifacts(
        self, spec: TableSpec, errors: Dict[str, str]
    ) -> Iterator[Tuple[str, List[RenderedArtifact]]]:
        """
        Yield ``(key, artifacts)`` for the model and each requested step.

        Per-artifact ``ConfigurationError``/``InputValidationError`` is
        recorded in *errors* and the step is skipped.
        """
        names: ArtifactNames = derive_names(spec)
        moment: datetime = self._clock()

        steps: List[Tuple[str, Callable[[TableSpec, ArtifactNames, datetime], List[RenderedArtifact]]]] = [
            ("model", self._render_model)
        ]
        steps.extend((key, self._steps[key]) for key in self.requested_steps(spec))

        for key, step in steps:
            try:
                artifacts: List[RenderedArtifact] = step(spec, names, moment)
            except (ConfigurationError, InputValidationError) as exc:
                logger.error("Could not render %s for %s: %s", key, spec.entity_name, exc)
                errors[key] = str(exc)
                continue
            yield key, artifacts

    def _render_model(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        return [RenderedArtifact(
            "model",
            names.entity_name,
            artifact_path("model", names.entity_name),
            self._templates.generate_model(spec, names),
        )]

    def _render_migration(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        path: str = migration_path(names.table_name, moment, self._config.migration_timestamp_format)
        return [RenderedArtifact(
            "migration",
            Path(path).stem,
            path,
            self._templates.generate_migration(spec, names),
        )]

    def _render_factory(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        return [RenderedArtifact(
            "factory",
            names.factory_name,
            artifact_path("factory", names.factory_name),
            self._templates.generate_factory(spec, names),
        )]

    def _render_policy(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        return [RenderedArtifact(
            "policy",
            names.policy_name,
            artifact_path("policy", names.policy_name),
            self._templates.generate_policy(spec, names),
        )]

    def _render_resource_controller(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        return [RenderedArtifact(
            "resource_controller",
            names.resource_controller_name,
            artifact_path("resource_controller", names.resource_controller_name),
            self._templates.generate_resource_controller(spec, names),
        )]

    def _render_json_resource(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        return [RenderedArtifact(
            "json_resource",
            names.json_resource_name,
            artifact_path("json_resource", names.json_resource_name),
            self._templates.generate_json_resource(spec, names),
        )]

    def _render_api_controller(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        return [RenderedArtifact(
            "api_controller",
            names.api_controller_name,
            artifact_path("api_controller", names.api_controller_name),
            self._templates.generate_api_controller(spec, names),
        )]

    def _render_form_requests(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        texts: Dict[str, str] = self._templates.generate_form_requests(spec, names)
        if spec.split_form_requests:
            keys: Dict[str, str] = {
                names.store_request_name: "store_request",
                names.update_request_name: "update_request",
            }
        else:
            keys = {names.form_request_name: "form_request"}
        return [
            RenderedArtifact(keys[class_name], class_name, artifact_path("form_request", class_name), text)
            for class_name, text in texts.items()
        ]

    def _render_repository(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        artifacts: List[RenderedArtifact] = [
            RenderedArtifact(
                "repository",
                names.repository_name,
                artifact_path("repository", names.repository_name),
                self._templates.generate_repository(spec, names),
            ),
            RenderedArtifact(
                "repository_interface",
                names.repository_interface_name,
                artifact_path("repository_interface", names.repository_interface_name),
                self._templates.generate_repository_interface(spec, names),
                confirm_existing=True,
            ),
        ]
        for class_name, text in self._templates.generate_repository_base().items():
            artifacts.append(RenderedArtifact(None, class_name, BASE_FILE_PATHS[class_name], text))
        return artifacts

    def _render_cache(self, spec: TableSpec, names: ArtifactNames, moment: datetime) -> List[RenderedArtifact]:
        artifacts: List[RenderedArtifact] = [RenderedArtifact(
            "cache",
            names.cache_name,
            artifact_path("cache", names.cache_name, subdirectory=names.entity_name),
            self._templates.generate_cache(spec, names),
        )]
        for class_name, text in self._templates.generate_cache_base().items():
            artifacts.append(RenderedArtifact(None, class_name, BASE_FILE_PATHS[class_name], text))
        return artifacts

    # -----------------------------------------------------------------
    # Writing
    # -----------------------------------------------------------------

    def _write(self, artifact: RenderedArtifact, result: GenerationResult) -> None:
        if artifact.is_base_file:
            self._exporter.write_if_missing(artifact.relative_path, artifact.text)
            return

        target: Path = self._exporter.resolve(artifact.relative_path)
        if (
            artifact.confirm_existing
            and self._exporter.exists(artifact.relative_path)
            and not self._confirm_overwrite(target)
        ):
            logger.info("Keeping existing %s.", artifact.relative_path)
        else:
            self._exporter.write(artifact.relative_path, artifact.text)

        result.results[artifact.key] = artifact.class_name
        result.results[f"{artifact.key}_file"] = str(target)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ARTIFACT_ORDER",
    "VALIDATION_FAILED_PREFIX",
    "GenerationOrchestrator",
    "RenderedArtifact",
    "accept_overwrite",
    "decline_overwrite",
    "load_structured_file",
    "parse_job",
    "load_spec_file",
    "load_config_file",
    "build_config",
]

logger.debug("laragen.generator loaded.")
