# File: laragen/exporters.py
"""
Laragen - Project Exporter (File-System Manager)
================================================

Responsible for:
    1. Mapping artifact kinds to their conventional Laravel paths.
    2. Writing generated files under the project root atomically
       (write-to-temp then rename).
    3. Writing shared base files only when they are not there yet.
    4. Recording a manifest with checksums of everything written.

There is no cross-file transaction: if a write fails mid-run, files
already written stay on disk.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from laragen.utils import count_lines, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("laragen.exporters")


# ---------------------------------------------------------------------------
# Laravel layout
# ---------------------------------------------------------------------------

#: Directory (relative to the project root) of each artifact kind.
ARTIFACT_DIRECTORIES: Dict[str, str] = {
    "model": "app/Models",
    "migration": "database/migrations",
    "factory": "database/factories",
    "policy": "app/Policies",
    "resource_controller": "app/Http/Controllers",
    "api_controller": "app/Http/Controllers/Api",
    "json_resource": "app/Http/Resources",
    "form_request": "app/Http/Requests",
    "repository": "app/Repositories",
    "repository_interface": "app/Repositories/Contracts",
    "cache": "app/Cache",
}

#: Shared files written once per project, keyed by their class name.
BASE_FILE_PATHS: Dict[str, str] = {
    "BaseRepository": "app/Repositories/BaseRepository.php",
    "RepositoryInterface": "app/Repositories/Contracts/RepositoryInterface.php",
    "CacheBase": "app/Cache/CacheBase.php",
    "WithHelpers": "app/Cache/Traits/WithHelpers.php",
}


def artifact_path(kind: str, class_name: str, subdirectory: Optional[str] = None) -> str:
    """
    Relative POSIX path of a class file.

        >>> artifact_path("model", "Post")
        'app/Models/Post.php'
        >>> artifact_path("cache", "PostById", subdirectory="Post")
        'app/Cache/Post/PostById.php'
    """
    try:
        directory: str = ARTIFACT_DIRECTORIES[kind]
    except KeyError:
        raise ValueError(f"Unknown artifact kind: {kind!r}") from None
    if subdirectory:
        directory = f"{directory}/{subdirectory}"
    return f"{directory}/{class_name}.php"


def migration_path(
    table_name: str,
    moment: datetime,
    timestamp_format: str = "%Y_%m_%d_%H%M%S",
) -> str:
    """``database/migrations/2024_01_31_120000_create_posts_table.php``"""
    stamp: str = moment.strftime(timestamp_format)
    return f"{ARTIFACT_DIRECTORIES['migration']}/{stamp}_create_{table_name}_table.php"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single written file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """Every file written by one exporter, with totals."""

    generator_version: str = ""
    export_timestamp: str = ""
    base_path: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "base_path": self.base_path,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [
                {
                    "relative_path": f.relative_path,
                    "absolute_path": f.absolute_path,
                    "size_bytes": f.size_bytes,
                    "line_count": f.line_count,
                    "sha256": f.sha256,
                }
                for f in self.files
            ],
            "skipped": list(self.skipped),
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated files under a Laravel project root.

    Usage::

        exporter = ProjectExporter(Path("~/code/blog"))
        exporter.write("app/Models/Post.php", php)
        print(exporter.build_manifest().to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per run.
    """

    def __init__(self, base_path: Union[str, Path] = ".", *, atomic_writes: bool = True) -> None:
        self._base_path: Path = Path(base_path).expanduser().resolve()
        self._atomic_writes: bool = atomic_writes
        self._file_records: List[FileRecord] = []
        self._skipped: List[str] = []

        logger.debug(
            "ProjectExporter initialised: base_path=%s, atomic=%s.",
            self._base_path,
            self._atomic_writes,
        )

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def records(self) -> List[FileRecord]:
        return list(self._file_records)

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def resolve(self, relative_path: str) -> Path:
        return self._base_path / relative_path

    def exists(self, relative_path: str) -> bool:
        return self.resolve(relative_path).is_file()

    def write(self, relative_path: str, content: str) -> FileRecord:
        """
        Write *content* to *relative_path*, creating parent directories.

        ``OSError`` propagates to the caller.
        """
        full_path: Path = self.resolve(relative_path)
        size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)

        record: FileRecord = FileRecord(
            relative_path=relative_path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=count_lines(content),
            sha256=sha256_hex(content),
        )
        self._file_records.append(record)
        logger.info("Wrote %s (%d bytes).", relative_path, size_bytes)
        return record

    def write_if_missing(self, relative_path: str, content: str) -> Optional[FileRecord]:
        """Write only when nothing exists at *relative_path*; ``None`` if skipped."""
        if self.exists(relative_path):
            self._skipped.append(relative_path)
            logger.debug("Keeping existing %s.", relative_path)
            return None
        return self.write(relative_path, content)

    def build_manifest(self) -> ExportManifest:
        import laragen

        return ExportManifest(
            generator_version=laragen.__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            base_path=str(self._base_path),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
            skipped=list(self._skipped),
        )

    def __repr__(self) -> str:
        return f"<ProjectExporter {self._base_path} ({len(self._file_records)} written)>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ARTIFACT_DIRECTORIES",
    "BASE_FILE_PATHS",
    "artifact_path",
    "migration_path",
    "FileRecord",
    "ExportManifest",
    "ProjectExporter",
]

logger.debug("laragen.exporters loaded.")
