"""
tests/conftest.py
Shared fixtures for the laragen test suite.

No external mocking libraries are used; real file I/O is performed inside
temporary directories managed by pytest's tmp_path fixtures, and live
introspection runs against throw-away SQLite databases.
"""

from __future__ import annotations

import copy
import pathlib
import shutil
from datetime import datetime
from typing import Any, Dict, List

import pytest
import yaml
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from laragen.generator import GenerationOrchestrator
from laragen.models import ArtifactNames, GeneratorConfig, TableSpec
from laragen.naming import derive_names
from laragen.stubs import DEFAULT_STUB_DIR, StubLoader
from laragen.templates import TemplateGenerator


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
JOB_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "post_example.yaml"

#: Fixed clock so migration file names are predictable.
FIXED_MOMENT: datetime = datetime(2024, 1, 31, 12, 30, 45)


def fixed_clock() -> datetime:
    return FIXED_MOMENT


# ---------------------------------------------------------------------------
# Raw job data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_job_dict() -> Dict[str, Any]:
    """Load the reference post_example.yaml once per session."""
    assert JOB_EXAMPLE_PATH.exists(), f"Reference job not found at {JOB_EXAMPLE_PATH}."
    with open(JOB_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def job_dict(raw_job_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_job_dict)


@pytest.fixture()
def post_payload(job_dict: Dict[str, Any]) -> Dict[str, Any]:
    return job_dict["spec"]


@pytest.fixture()
def post_spec(post_payload: Dict[str, Any]) -> TableSpec:
    """Every artifact enabled, soft deletes, split requests."""
    return TableSpec.from_payload(post_payload)


@pytest.fixture()
def basic_columns() -> List[Dict[str, Any]]:
    return [
        {"column_name": "title", "data_type": "string"},
        {"column_name": "body", "data_type": "text", "nullable": True},
        {"column_name": "views", "data_type": "integer", "default_value": "0"},
    ]


@pytest.fixture()
def basic_spec(basic_columns: List[Dict[str, Any]]) -> TableSpec:
    """Post with three columns and the default artifact flags."""
    return TableSpec.from_payload({"model_name": "Post", "columns": basic_columns})


@pytest.fixture()
def empty_spec() -> TableSpec:
    return TableSpec(entity_name="Tag", has_soft_deletes=True)


# ---------------------------------------------------------------------------
# Generator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """Empty Laravel project root."""
    root = tmp_path / "laravel"
    root.mkdir()
    return root


@pytest.fixture()
def config(project_dir: pathlib.Path) -> GeneratorConfig:
    return GeneratorConfig(base_path=project_dir)


@pytest.fixture()
def templates(config: GeneratorConfig) -> TemplateGenerator:
    return TemplateGenerator(config)


@pytest.fixture()
def post_names(post_spec: TableSpec) -> ArtifactNames:
    return derive_names(post_spec)


@pytest.fixture()
def clock():
    """Clock returning ``FIXED_MOMENT``."""
    return fixed_clock


@pytest.fixture()
def job_example_path() -> pathlib.Path:
    return JOB_EXAMPLE_PATH


@pytest.fixture()
def orchestrator(config: GeneratorConfig) -> GenerationOrchestrator:
    return GenerationOrchestrator(config, clock=fixed_clock)


@pytest.fixture()
def stub_dir_without(tmp_path: pathlib.Path):
    """
    Factory: copy the bundled stubs into a temp dir minus the named ones and
    return a loader restricted to that directory.
    """

    def _make(*missing: str) -> StubLoader:
        target = tmp_path / "partial_stubs"
        if target.exists():
            shutil.rmtree(target)
        shutil.copytree(DEFAULT_STUB_DIR, target)
        for name in missing:
            (target / f"{name}.stub").unlink()
        return StubLoader([target], use_default_stubs=False)

    return _make


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sqlite_engine(tmp_path: pathlib.Path) -> Engine:
    """SQLite database holding a ``blog_posts`` table."""
    engine = create_engine(f"sqlite:///{tmp_path / 'app.sqlite'}")
    with engine.begin() as conn:
        conn.execute(text(
            """
            CREATE TABLE blog_posts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title VARCHAR(200) NOT NULL,
                slug VARCHAR(255) NOT NULL,
                body TEXT,
                views INTEGER NOT NULL DEFAULT 0,
                is_published BOOLEAN NOT NULL DEFAULT 0,
                status VARCHAR(20) NOT NULL DEFAULT 'draft',
                rating DECIMAL(3, 1),
                payload JSON,
                geometry POINT,
                created_at DATETIME,
                updated_at DATETIME,
                deleted_at DATETIME
            )
            """
        ))
        conn.execute(text("CREATE UNIQUE INDEX blog_posts_slug_unique ON blog_posts (slug)"))
    yield engine
    engine.dispose()
