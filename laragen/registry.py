# File: laragen/registry.py
"""
Laragen - Service Registry
==========================
A small container mapping contract names to factory functions.  The
composition root (``build_registry``) registers a fixed list of known
services; nothing is discovered by scanning modules or directories.

    registry = build_registry(GeneratorConfig(base_path=root))
    orchestrator = registry.resolve("orchestrator")

Factories receive the registry so they can resolve their own
dependencies.  Singletons are built on first resolution and cached.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Set

from laragen.errors import ConfigurationError
from laragen.exporters import ProjectExporter
from laragen.generator import Clock, GenerationOrchestrator, OverwriteDecision
from laragen.introspection import SchemaReader, SqlAlchemySchemaReader
from laragen.models import GeneratorConfig
from laragen.stubs import StubLoader
from laragen.templates import TemplateGenerator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.registry")

Factory = Callable[["Registry"], Any]


class Registry:
    """Explicit contract -> factory table."""

    __slots__ = ("_factories", "_shared", "_instances")

    def __init__(self) -> None:
        self._factories: Dict[str, Factory] = {}
        self._shared: Set[str] = set()
        self._instances: Dict[str, Any] = {}

    def bind(self, name: str, factory: Factory, *, shared: bool = False) -> None:
        """Register *factory* under *name*, replacing any earlier binding."""
        self._factories[name] = factory
        self._instances.pop(name, None)
        if shared:
            self._shared.add(name)
        else:
            self._shared.discard(name)
        logger.debug("Bound %s (shared=%s).", name, shared)

    def singleton(self, name: str, factory: Factory) -> None:
        self.bind(name, factory, shared=True)

    def instance(self, name: str, value: Any) -> None:
        """Register an already-built object."""
        self.singleton(name, lambda _registry: value)
        self._instances[name] = value

    def has(self, name: str) -> bool:
        return name in self._factories

    def resolve(self, name: str) -> Any:
        if name in self._instances:
            return self._instances[name]
        try:
            factory: Factory = self._factories[name]
        except KeyError:
            raise ConfigurationError(f"No service bound for '{name}'.") from None

        value: Any = factory(self)
        if name in self._shared:
            self._instances[name] = value
        return value

    @property
    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __repr__(self) -> str:
        return f"<Registry {len(self._factories)} binding(s)>"


# ---------------------------------------------------------------------------
# Composition root
# ---------------------------------------------------------------------------


def build_registry(
    config: Optional[GeneratorConfig] = None,
    *,
    database_url: Optional[str] = None,
    schema_reader: Optional[SchemaReader] = None,
    clock: Optional[Clock] = None,
    confirm_overwrite: Optional[OverwriteDecision] = None,
) -> Registry:
    """
    Registry seeded with every laragen service:

    ``config``, ``stub_loader``, ``template_generator``, ``exporter``,
    ``schema_reader`` and ``orchestrator``.
    """
    registry: Registry = Registry()
    registry.instance("config", config or GeneratorConfig())

    registry.singleton(
        "stub_loader",
        lambda r: StubLoader(
            r.resolve("config").stub_paths,
            use_default_stubs=r.resolve("config").use_default_stubs,
        ),
    )
    registry.singleton(
        "template_generator",
        lambda r: TemplateGenerator(r.resolve("config"), r.resolve("stub_loader")),
    )
    registry.singleton(
        "exporter",
        lambda r: ProjectExporter(
            r.resolve("config").base_path,
            atomic_writes=r.resolve("config").atomic_writes,
        ),
    )

    if schema_reader is not None:
        registry.instance("schema_reader", schema_reader)
    else:
        def _make_reader(_registry: Registry) -> SchemaReader:
            if not database_url:
                raise ConfigurationError(
                    "No database URL configured; pass --database-url to read a table."
                )
            return SqlAlchemySchemaReader(database_url)

        registry.singleton("schema_reader", _make_reader)

    registry.singleton(
        "orchestrator",
        lambda r: GenerationOrchestrator(
            r.resolve("config"),
            r.resolve("template_generator"),
            r.resolve("exporter"),
            clock=clock,
            confirm_overwrite=confirm_overwrite,
        ),
    )

    logger.debug("Registry built: %s", ", ".join(registry.names))
    return registry


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = ["Registry", "build_registry"]

logger.debug("laragen.registry loaded.")
