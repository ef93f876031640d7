"""
tests/test_cli.py
End-to-end tests for the laragen command line (laragen.cli.cli_main).

Tests cover:
- Exit codes for success, validation, input and introspection failures
- --spec job files, inline --columns and --from-table with a SQLite URL
- Artifact flag selection (--all, individual flags, --split-requests)
- --preview and --validate-only output
- --force for an existing repository interface
- --manifest output and the data types listed in --help
"""

from __future__ import annotations

import json
import logging
import pathlib
from typing import Iterator, List

import pytest
from sqlalchemy.engine import Engine

from laragen.cli import (
    EXIT_INPUT_ERROR,
    EXIT_INTROSPECTION_ERROR,
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    _artifact_flags,
    _build_parser,
    cli_main,
)

COLUMNS = json.dumps([
    {"column_name": "title", "data_type": "string"},
    {"column_name": "views", "data_type": "integer", "default_value": "0"},
])


@pytest.fixture(autouse=True)
def restore_laragen_logger() -> Iterator[None]:
    """cli_main reconfigures the ``laragen`` logger; put it back afterwards."""
    log = logging.getLogger("laragen")
    saved = (log.level, list(log.handlers), log.propagate)
    yield
    log.setLevel(saved[0])
    log.handlers[:] = saved[1]
    log.propagate = saved[2]


def run(argv: List[str]) -> int:
    with pytest.raises(SystemExit) as excinfo:
        cli_main(argv)
    return excinfo.value.code


# ===========================================================================
# Flag parsing
# ===========================================================================


class TestArtifactFlags:

    def test_no_flags(self) -> None:
        args = _build_parser().parse_args(["Post"])
        assert _artifact_flags(args) == {}

    def test_all(self) -> None:
        flags = _artifact_flags(_build_parser().parse_args(["Post", "-a"]))
        assert flags and all(flags.values())
        assert flags["generate_cache"] is True

    def test_individual_flags_are_explicit(self) -> None:
        flags = _artifact_flags(_build_parser().parse_args(["Post", "-g", "-j"]))
        assert flags["generate_migration"] is True
        assert flags["generate_json_resource"] is True
        assert flags["generate_policy"] is False
        assert flags["generate_factory"] is False

    def test_split_requests_implies_form_request(self) -> None:
        flags = _artifact_flags(_build_parser().parse_args(["Post", "--split-requests"]))
        assert flags["generate_form_request"] is True
        assert flags["generate_migration"] is False


# ===========================================================================
# Generation runs
# ===========================================================================


class TestGeneration:

    def test_inline_columns(self, project_dir: pathlib.Path) -> None:
        code = run(["Post", "-g", "--columns", COLUMNS, "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        assert (project_dir / "app/Models/Post.php").is_file()
        migrations = list((project_dir / "database/migrations").glob("*_create_posts_table.php"))
        assert len(migrations) == 1
        assert not (project_dir / "app/Policies").exists()

    def test_spec_file(self, project_dir: pathlib.Path, job_example_path: pathlib.Path) -> None:
        code = run(["--spec", str(job_example_path), "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        assert (project_dir / "app/Http/Requests/StorePostRequest.php").is_file()
        assert (project_dir / "app/Cache/Post/PostById.php").is_file()

    def test_model_argument_overrides_spec(
        self, project_dir: pathlib.Path, job_example_path: pathlib.Path
    ) -> None:
        code = run(["Article", "--spec", str(job_example_path), "-p", "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        assert (project_dir / "app/Models/Article.php").is_file()
        assert (project_dir / "app/Policies/ArticlePolicy.php").is_file()
        assert not (project_dir / "app/Repositories").exists()

    def test_soft_deletes_and_no_timestamps(self, project_dir: pathlib.Path) -> None:
        code = run(["Tag", "-g", "-s", "--no-timestamps", "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        model = (project_dir / "app/Models/Tag.php").read_text(encoding="utf-8")
        assert "use SoftDeletes;" in model
        assert "public $timestamps = false;" in model

    def test_config_file(self, project_dir: pathlib.Path, tmp_path: pathlib.Path) -> None:
        config = tmp_path / "laragen.json"
        config.write_text(json.dumps({"model_namespace": "Domain\\Models"}), encoding="utf-8")
        code = run(["Post", "--config", str(config), "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        model = (project_dir / "app/Models/Post.php").read_text(encoding="utf-8")
        assert "namespace Domain\\Models;" in model

    def test_force_overwrites_interface(self, project_dir: pathlib.Path) -> None:
        target = project_dir / "app/Repositories/Contracts/PostRepositoryInterface.php"
        target.parent.mkdir(parents=True)
        target.write_text("old", encoding="utf-8")

        assert run(["Post", "-e", "--base-path", str(project_dir), "-q"]) == EXIT_SUCCESS
        assert target.read_text(encoding="utf-8") == "old"

        assert run(["Post", "-e", "--force", "--base-path", str(project_dir), "-q"]) == EXIT_SUCCESS
        assert "interface PostRepositoryInterface" in target.read_text(encoding="utf-8")


class TestFromTable:

    def test_from_table(self, project_dir: pathlib.Path, sqlite_engine: Engine) -> None:
        url = str(sqlite_engine.url)
        code = run(["--from-table", "blog_posts", "--database-url", url, "-j",
                    "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        resource = (project_dir / "app/Http/Resources/BlogPostResource.php").read_text(encoding="utf-8")
        assert "'slug' => $this->slug," in resource

    def test_table_from_model_name(self, project_dir: pathlib.Path, sqlite_engine: Engine) -> None:
        url = str(sqlite_engine.url)
        code = run(["BlogPost", "--from-table", "--database-url", url, "--base-path", str(project_dir), "-q"])
        assert code == EXIT_SUCCESS
        assert (project_dir / "app/Models/BlogPost.php").is_file()

    def test_missing_table(self, project_dir: pathlib.Path, sqlite_engine: Engine) -> None:
        url = str(sqlite_engine.url)
        code = run(["--from-table", "comments", "--database-url", url, "--base-path", str(project_dir), "-q"])
        assert code == EXIT_INTROSPECTION_ERROR

    def test_missing_database_url(self, project_dir: pathlib.Path) -> None:
        code = run(["--from-table", "blog_posts", "--base-path", str(project_dir), "-q"])
        assert code == EXIT_INPUT_ERROR


# ===========================================================================
# Failures & other modes
# ===========================================================================


class TestFailures:

    def test_no_input(self) -> None:
        assert run(["-q"]) == EXIT_INPUT_ERROR

    def test_bad_columns_json(self, project_dir: pathlib.Path) -> None:
        assert run(["Post", "--columns", "[{", "--base-path", str(project_dir), "-q"]) == EXIT_INPUT_ERROR

    def test_missing_spec_file(self, tmp_path: pathlib.Path) -> None:
        assert run(["--spec", str(tmp_path / "nope.yaml"), "-q"]) == EXIT_INPUT_ERROR

    def test_validation_error(self, project_dir: pathlib.Path) -> None:
        assert run(["Class", "--base-path", str(project_dir), "-q"]) == EXIT_VALIDATION_ERROR
        assert list(project_dir.iterdir()) == []


class TestModes:

    def test_preview(
        self, project_dir: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run(["Post", "-j", "--columns", COLUMNS, "--preview", "--base-path", str(project_dir), "-q"])
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "// ===== model_preview =====" in out
        assert "// ===== json_resource_preview =====" in out
        assert "class PostResource extends JsonResource" in out
        assert list(project_dir.iterdir()) == []

    def test_validate_only(
        self, project_dir: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run(["Post", "--columns", COLUMNS, "--validate-only", "--base-path", str(project_dir), "-q"])
        out = capsys.readouterr().out
        assert code == EXIT_SUCCESS
        assert "Model Validation Report" in out
        assert "Valid:    Yes" in out
        assert list(project_dir.iterdir()) == []

    def test_validate_only_failure(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["List", "--validate-only", "-q"]) == EXIT_VALIDATION_ERROR
        assert "ENTITY_NAME_PHP_RESERVED" in capsys.readouterr().out

    def test_preview_validation_failure(
        self, project_dir: pathlib.Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = run(["Class", "--preview", "--base-path", str(project_dir), "-q"])
        out = capsys.readouterr().out
        assert code == EXIT_VALIDATION_ERROR
        assert "// Validation failed: " in out
        assert "extends Model" not in out

    def test_manifest(self, project_dir: pathlib.Path, tmp_path: pathlib.Path) -> None:
        manifest_path = tmp_path / "out" / "manifest.json"
        code = run(["Post", "-g", "--columns", COLUMNS, "--base-path", str(project_dir),
                    "--manifest", str(manifest_path), "-q"])
        assert code == EXIT_SUCCESS
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
        paths = [f["relative_path"] for f in manifest["files"]]
        assert manifest["total_files"] == 2
        assert paths[0] == "app/Models/Post.php"
        assert paths[1].endswith("_create_posts_table.php")
        assert all(len(f["sha256"]) == 64 for f in manifest["files"])

    def test_help_lists_data_types(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--help"]) == 0
        out = capsys.readouterr().out
        assert "Column data types:" in out
        assert "big_integer" in out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert run(["--version"]) == 0
        assert "laragen 1.0.0" in capsys.readouterr().out
