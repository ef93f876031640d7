# File: laragen/stubs.py
"""
Laragen - Stub Loading & Placeholder Substitution
=================================================
Stubs are plain PHP files with ``{{ name }}`` placeholders.  They are
looked up in the user's stub directories first (so a project can
customise any of them) and then in the ``resources/stubs/`` directory shipped
inside this package.

``render_stub`` is the only place placeholders are replaced.  A
*collapsible* placeholder whose value is empty is removed together with
the line terminator that follows it (``\\r\\n``, ``\\n`` or none), so an
empty block never leaves a blank line behind.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from laragen.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.stubs")

#: Directory holding the stubs bundled with the package.
DEFAULT_STUB_DIR: Path = Path(__file__).resolve().parent / "resources" / "stubs"

_PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"\{\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}\}")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _token_variants(name: str) -> Sequence[str]:
    return (f"{{{{ {name} }}}}", f"{{{{{name}}}}}")


def collapse_placeholder(text: str, name: str) -> str:
    """Remove every ``{{ name }}`` together with its trailing line break."""
    for token in _token_variants(name):
        text = text.replace(token + "\r\n", "")
        text = text.replace(token + "\n", "")
        text = text.replace(token, "")
    return text


def render_stub(
    stub: str,
    replacements: Mapping[str, str],
    collapsible: Iterable[str] = (),
    *,
    stub_name: str = "<stub>",
) -> str:
    """
    Substitute *replacements* into *stub*.

    Names in *collapsible* whose replacement is empty are collapsed with
    ``collapse_placeholder`` first.  Placeholders still present afterwards
    are logged as warnings and left in the output untouched.
    """
    collapse: FrozenSet[str] = frozenset(collapsible)
    text: str = stub

    for name in collapse:
        if not replacements.get(name, ""):
            text = collapse_placeholder(text, name)

    for name, value in replacements.items():
        for token in _token_variants(name):
            text = text.replace(token, value)

    leftovers: List[str] = sorted(set(_PLACEHOLDER_RE.findall(text)))
    if leftovers:
        logger.warning(
            "Stub %s has unresolved placeholder(s): %s",
            stub_name,
            ", ".join(leftovers),
        )
    return text


def find_placeholders(stub: str) -> List[str]:
    """Placeholder names used in *stub*, in order of first appearance."""
    seen: Dict[str, None] = {}
    for name in _PLACEHOLDER_RE.findall(stub):
        seen.setdefault(name, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class StubLoader:
    """
    Resolves stub names (``model``, ``controller.api``, ...) to file text.

    Contents are cached per loader; create a new loader to pick up edits.
    """

    def __init__(
        self,
        stub_paths: Optional[Sequence[Path]] = None,
        *,
        use_default_stubs: bool = True,
    ) -> None:
        self._search_paths: List[Path] = [Path(p) for p in (stub_paths or [])]
        if use_default_stubs:
            self._search_paths.append(DEFAULT_STUB_DIR)
        self._cache: Dict[str, str] = {}

        for path in self._search_paths:
            if not path.is_dir():
                logger.warning("Stub directory does not exist: %s", path)

        logger.debug(
            "StubLoader search path: %s",
            ", ".join(str(p) for p in self._search_paths),
        )

    @property
    def search_paths(self) -> List[Path]:
        return list(self._search_paths)

    def locate(self, name: str) -> Path:
        """Path of the first ``<name>.stub`` on the search path."""
        filename: str = f"{name}.stub"
        for directory in self._search_paths:
            candidate: Path = directory / filename
            if candidate.is_file():
                return candidate
        raise ConfigurationError(
            f"Stub '{filename}' not found in: "
            + ", ".join(str(p) for p in self._search_paths),
            stub=name,
        )

    def load(self, name: str) -> str:
        if name in self._cache:
            return self._cache[name]
        path: Path = self.locate(name)
        try:
            content: str = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read stub {path}: {exc}", stub=name) from exc
        self._cache[name] = content
        logger.debug("Loaded stub %s from %s", name, path)
        return content

    def render(
        self,
        name: str,
        replacements: Mapping[str, str],
        collapsible: Iterable[str] = (),
    ) -> str:
        return render_stub(self.load(name), replacements, collapsible, stub_name=name)

    def __repr__(self) -> str:
        return f"<StubLoader {len(self._search_paths)} path(s), {len(self._cache)} cached>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_STUB_DIR",
    "StubLoader",
    "collapse_placeholder",
    "render_stub",
    "find_placeholders",
]

logger.debug("laragen.stubs loaded.")
