# File: laragen/naming.py
"""
Laragen - Artifact Name Derivation
==================================
Resolves the class name of every artifact for a spec: the override when
one is set and non-blank, otherwise ``entity_name`` plus the Laravel
suffix.  Pure and total.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from laragen.models import ArtifactNames, TableSpec
from laragen.utils import to_camel_case, to_studly_case

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.naming")


def _pick(override: Optional[str], fallback: str) -> str:
    if override is not None and override.strip():
        return override.strip()
    return fallback


def derive_names(spec: TableSpec) -> ArtifactNames:
    """
    Resolve every artifact name for *spec*.

    Examples:
        >>> derive_names(TableSpec(entity_name="Order")).factory_name
        'OrderFactory'
        >>> derive_names(TableSpec(entity_name="Order", factory_name="CustomFactory")).factory_name
        'CustomFactory'
    """
    entity: str = spec.entity_name
    repository: str = _pick(spec.repository_name, f"{entity}Repository")
    pk_suffix: str = to_studly_case(spec.cache_primary_key) or "Id"

    names: ArtifactNames = ArtifactNames(
        entity_name=entity,
        table_name=spec.table_name,
        model_variable=to_camel_case(entity) or entity.lower(),
        factory_name=_pick(spec.factory_name, f"{entity}Factory"),
        policy_name=_pick(spec.policy_name, f"{entity}Policy"),
        resource_controller_name=_pick(spec.resource_controller_name, f"{entity}Controller"),
        json_resource_name=_pick(spec.json_resource_name, f"{entity}Resource"),
        api_controller_name=_pick(spec.api_controller_name, f"{entity}ApiController"),
        form_request_name=_pick(spec.form_request_name, f"{entity}Request"),
        store_request_name=f"Store{entity}Request",
        update_request_name=f"Update{entity}Request",
        repository_name=repository,
        repository_interface_name=f"{repository}Interface",
        cache_name=_pick(spec.cache_name, f"{entity}By{pk_suffix}"),
    )
    logger.debug("Derived names for %s: %s", entity, names)
    return names


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = ["derive_names"]

logger.debug("laragen.naming loaded.")
