"""
Tests for the workspace — discovery, summary file and manifests.
"""

import textwrap
from pathlib import Path

import pytest

from appctl.adapters.workspace import Workspace
from appctl.core.config.loader import (
    ConfigError,
    WorkspaceSummary,
    find_workspace_dir,
    load_summary,
    write_summary,
)
from appctl.core.errors import (
    ManifestNotFoundError,
    NoApplicationAssociatedError,
    ValidationError,
    WorkspaceNotFoundError,
)

# ── Loader ──────────────────────────────────────────────────────


class TestFindWorkspaceDir:
    def test_found_in_cwd(self, workspace_root: Path):
        assert find_workspace_dir(workspace_root) == (workspace_root / "deploy").resolve()

    def test_found_from_subdirectory(self, workspace_root: Path):
        sub = workspace_root / "src" / "api"
        sub.mkdir(parents=True)
        assert find_workspace_dir(sub) == (workspace_root / "deploy").resolve()

    def test_not_found(self, tmp_path: Path):
        deep = tmp_path / "a" / "b" / "c" / "d" / "e" / "f"
        deep.mkdir(parents=True)
        with pytest.raises(WorkspaceNotFoundError) as exc:
            find_workspace_dir(deep, max_levels=3)
        assert exc.value.dir_name == "deploy"
        assert exc.value.levels_checked == 3
        assert "couldn't find a directory called deploy" in str(exc.value)


class TestSummary:
    def test_load(self, workspace_root: Path):
        assert load_summary(workspace_root / "deploy").application == "badgoose"

    def test_missing(self, tmp_path: Path):
        with pytest.raises(NoApplicationAssociatedError):
            load_summary(tmp_path)

    def test_invalid_yaml(self, tmp_path: Path):
        (tmp_path / ".workspace").write_text("application: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_summary(tmp_path)

    def test_not_a_mapping(self, tmp_path: Path):
        (tmp_path / ".workspace").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_summary(tmp_path)

    def test_write_round_trip(self, tmp_path: Path):
        ws_dir = tmp_path / "deploy"
        write_summary(ws_dir, WorkspaceSummary(application="badgoose"))
        assert load_summary(ws_dir).application == "badgoose"


# ── Workspace adapter ───────────────────────────────────────────


class TestWorkspace:
    def test_app_name(self, workspace_root: Path):
        assert Workspace.discover(workspace_root).app_name() == "badgoose"

    def test_app_name_without_summary(self, tmp_path: Path):
        (tmp_path / "deploy").mkdir()
        assert Workspace(tmp_path / "deploy").app_name() == ""

    def test_legacy_manifest(self, workspace_root: Path):
        ws = Workspace.discover(workspace_root)
        manifest = ws.read_pipeline_manifest(ws.pipeline_manifest_legacy_path())
        assert manifest.name == "pipepiper"
        assert manifest.source.access_token_secret == "github-token-badgoose-repo"
        assert [s.name for s in manifest.stages] == ["chicken", "wings"]
        assert manifest.stages[1].requires_approval is True

    def test_legacy_manifest_missing(self, tmp_path: Path):
        (tmp_path / "deploy").mkdir()
        with pytest.raises(ManifestNotFoundError):
            Workspace(tmp_path / "deploy").pipeline_manifest_legacy_path()

    def test_invalid_manifest(self, tmp_path: Path):
        ws_dir = tmp_path / "deploy"
        ws_dir.mkdir()
        (ws_dir / "pipeline.yml").write_text("version: 1\n")
        with pytest.raises(ValidationError, match="unmarshal pipeline manifest"):
            Workspace(ws_dir).read_pipeline_manifest(str(ws_dir / "pipeline.yml"))

    def test_list_pipelines(self, workspace_root: Path):
        ws_dir = workspace_root / "deploy"
        (ws_dir / "pipelines" / "release").mkdir(parents=True)
        (ws_dir / "pipelines" / "release" / "manifest.yml").write_text(textwrap.dedent("""\
            name: release
            source:
              provider: GitHub
              properties:
                repository: badgoose/repo
        """))
        entries = Workspace(ws_dir).list_pipelines()
        assert [p.name for p in entries] == ["pipepiper", "release"]
        assert [p.legacy for p in entries] == [True, False]
        assert entries[1].path == str(ws_dir / "pipelines" / "release" / "manifest.yml")

    def test_services_and_jobs(self, workspace_root: Path):
        ws = Workspace(workspace_root / "deploy")
        assert ws.list_services() == ["backend", "frontend"]
        assert ws.list_jobs() == ["report"]

    def test_pipelines_dir_not_a_workload(self, workspace_root: Path):
        ws_dir = workspace_root / "deploy"
        (ws_dir / "pipelines" / "x").mkdir(parents=True)
        (ws_dir / "pipelines" / "manifest.yml").write_text("name: nope\n")
        assert "pipelines" not in Workspace(ws_dir).list_services()

    def test_delete_workspace_file(self, workspace_root: Path):
        ws = Workspace(workspace_root / "deploy")
        ws.delete_workspace_file()
        assert not (workspace_root / "deploy" / ".workspace").exists()
        ws.delete_workspace_file()  # already gone

    def test_missing_directory(self, tmp_path: Path):
        ws = Workspace(tmp_path / "deploy")
        assert ws.app_name() == ""
        assert ws.list_pipelines() == []
        assert ws.list_services() == []
