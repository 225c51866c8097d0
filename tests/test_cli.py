"""
Tests for CLI commands — pipeline deploy/delete and app init/delete on the local backend.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from appctl.adapters.local import LocalStateFile, LocalStore
from appctl.core.models.application import Application, Environment, Workload
from appctl.core.persistence.audit import AuditWriter
from appctl.main import cli

SECRET = "github-token-badgoose-repo"


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    return tmp_path / "state"


@pytest.fixture
def seeded(state_dir: Path) -> LocalStateFile:
    """badgoose with environments chicken and wings and one service."""
    sf = LocalStateFile(state_dir / "state.json")
    store = LocalStore(sf)
    store.create_application(Application(name="badgoose", account_id="123456789012"))
    for env in ("chicken", "wings"):
        store.create_environment(Environment(name=env, app="badgoose", region="us-west-2"))
    state = sf.load()
    state.workloads["badgoose"] = {"frontend": Workload(name="frontend", app="badgoose")}
    state.workload_stacks["badgoose"] = {"chicken": ["frontend"], "wings": ["frontend"]}
    state.secrets[SECRET] = "ghp_token"
    sf.save(state)
    return sf


def _invoke(workspace: Path, state_dir: Path, *args: str, input: str | None = None):
    runner = CliRunner()
    return runner.invoke(
        cli,
        ["--workspace", str(workspace), "--state-dir", str(state_dir), "--region", "us-west-2", *args],
        input=input,
    )


def _json_tail(output: str) -> dict:
    """The JSON report, skipping progress lines printed before it."""
    start = output.index("{\n")
    end = output.rindex("}") + 1
    return json.loads(output[start:end])


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "pipeline" in result.output
        assert "app" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


# ── pipeline deploy ─────────────────────────────────────────────


class TestPipelineDeploy:
    def test_creates_pipeline(self, workspace_root, state_dir, seeded):
        result = _invoke(workspace_root, state_dir, "pipeline", "deploy")
        assert result.exit_code == 0, result.output
        assert "✅ Pipeline pipepiper created" in result.output

        record = seeded.load().pipelines["pipepiper"]
        assert [s.name for s in record.spec.stages] == ["chicken", "wings"]
        assert record.spec.stages[0].local_workloads == ["backend", "frontend", "report"]
        assert record.spec.template_bucket == "badgoose-us-west-2-artifacts"

    def test_redeploy_with_yes_updates(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        result = _invoke(workspace_root, state_dir, "pipeline", "deploy", "--yes")
        assert result.exit_code == 0, result.output
        assert "Successfully deployed pipeline: pipepiper" in result.output
        assert "✅ Pipeline pipepiper updated" in result.output

    def test_redeploy_declined(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        before = seeded.load().pipelines["pipepiper"].updated_at
        result = _invoke(workspace_root, state_dir, "pipeline", "deploy", input="n\n")
        assert result.exit_code == 0, result.output
        assert "redeploy an existing pipeline" in result.output
        assert "Pipeline pipepiper left unchanged" in result.output
        assert "updated" not in result.output
        assert seeded.load().pipelines["pipepiper"].updated_at == before

    def test_named_pipeline_from_pipelines_dir(self, workspace_root, state_dir, seeded):
        foo = workspace_root / "deploy" / "pipelines" / "foo"
        foo.mkdir(parents=True)
        (foo / "manifest.yml").write_text(
            "name: foo\n"
            "source:\n"
            "  provider: GitHub\n"
            "  properties:\n"
            "    repository: badgoose/repo\n"
            "stages:\n"
            "  - name: chicken\n"
        )
        result = _invoke(workspace_root, state_dir, "pipeline", "deploy", "--name", "foo")
        assert result.exit_code == 0, result.output
        assert "Creating a new pipeline: foo" in result.output
        assert "✅ Pipeline foo created" in result.output

        pipelines = seeded.load().pipelines
        assert list(pipelines) == ["foo"]
        assert [s.name for s in pipelines["foo"].spec.stages] == ["chicken"]

    def test_unknown_environment(self, workspace_root, state_dir, seeded):
        LocalStore(seeded).delete_environment("badgoose", "wings")
        result = _invoke(workspace_root, state_dir, "pipeline", "deploy")
        assert result.exit_code == 1
        assert "❌ convert environments to deployment stage: get environment wings" in result.output

    def test_outside_workspace(self, tmp_path, state_dir):
        empty = tmp_path / "elsewhere"
        empty.mkdir()
        result = _invoke(empty, state_dir, "pipeline", "deploy")
        assert result.exit_code == 1
        assert "couldn't find a directory called deploy" in result.output

    def test_json_output(self, workspace_root, state_dir, seeded):
        result = _invoke(workspace_root, state_dir, "pipeline", "deploy", "--json")
        assert result.exit_code == 0, result.output
        data = _json_tail(result.output)
        assert data["status"] == "ok"
        assert data["completed"][-1] == "deploy-pipeline"

    def test_audit_entry(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        entries = AuditWriter(state_dir=state_dir).read_all()
        assert len(entries) == 1
        assert entries[0].operation_type == "pipeline-deploy"
        assert entries[0].app == "badgoose"
        assert entries[0].pipeline == "pipepiper"
        assert entries[0].status == "ok"


# ── pipeline delete ─────────────────────────────────────────────


class TestPipelineDelete:
    def test_delete_with_secret(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        result = _invoke(workspace_root, state_dir, "pipeline", "delete", "--yes", "--delete-secret")
        assert result.exit_code == 0, result.output
        state = seeded.load()
        assert "pipepiper" not in state.pipelines
        assert SECRET not in state.secrets
        assert f"✅ Deleted secret {SECRET}" in result.output

    def test_secret_kept_when_declined(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        result = _invoke(workspace_root, state_dir, "pipeline", "delete", "--yes", input="n\n")
        assert result.exit_code == 0, result.output
        assert f"Kept secret {SECRET}" in result.output
        assert "Deleted secret" not in result.output
        assert SECRET in seeded.load().secrets
        assert "pipepiper" not in seeded.load().pipelines

    def test_delete_declined(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        result = _invoke(workspace_root, state_dir, "pipeline", "delete", input="n\n")
        assert result.exit_code == 1
        assert "pipeline delete cancelled - no changes made" in result.output
        assert "pipepiper" in seeded.load().pipelines
        assert AuditWriter(state_dir=state_dir).read_all()[-1].status == "cancelled"


# ── app ─────────────────────────────────────────────────────────


class TestAppInit:
    def test_registers_and_binds(self, tmp_path, state_dir):
        result = _invoke(tmp_path, state_dir, "app", "init", "badgoose")
        assert result.exit_code == 0, result.output
        assert (tmp_path / "deploy" / ".workspace").read_text().strip() == "application: badgoose"
        assert LocalStore(LocalStateFile(state_dir / "state.json")).get_application("badgoose")

    def test_workspace_bound_to_other_app(self, workspace_root, state_dir):
        result = _invoke(workspace_root, state_dir, "app", "init", "other")
        assert result.exit_code == 1
        assert "already registered with application badgoose" in result.output


class TestAppDelete:
    def test_full_teardown(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        result = _invoke(workspace_root, state_dir, "app", "delete", "--yes")
        assert result.exit_code == 0, result.output
        assert "Application badgoose deleted" in result.output

        state = seeded.load()
        assert state.applications == {}
        assert state.pipelines == {}
        assert state.secrets == {}
        assert state.regional_resources == {}
        assert not (workspace_root / "deploy" / ".workspace").exists()

        entry = AuditWriter(state_dir=state_dir).read_all()[-1]
        assert entry.operation_type == "app-delete"
        assert entry.status == "ok"
        assert len(entry.steps_completed) == 10

    def test_declined(self, workspace_root, state_dir, seeded):
        result = _invoke(workspace_root, state_dir, "app", "delete", input="n\n")
        assert result.exit_code == 1
        assert "operation cancelled" in result.output
        assert "badgoose" in seeded.load().applications

    def test_no_application(self, tmp_path, state_dir):
        result = _invoke(tmp_path, state_dir, "app", "delete", "--yes")
        assert result.exit_code == 1
        assert "could not find an application attached to this workspace" in result.output

    def test_partial_failure_reported(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        (workspace_root / "deploy" / "pipeline.yml").write_text("version: 1\n")

        result = _invoke(workspace_root, state_dir, "app", "delete", "--yes", "--json")
        assert result.exit_code == 1
        data = _json_tail(result.output)
        assert data["status"] == "partial"
        assert data["failed_step"] == "delete-pipeline"
        # earlier steps are not rolled back
        assert seeded.load().environments.get("badgoose", {}) == {}
        assert "badgoose" in seeded.load().applications

    def test_secret_already_gone(self, workspace_root, state_dir, seeded):
        _invoke(workspace_root, state_dir, "pipeline", "deploy")
        state = seeded.load()
        state.secrets.clear()
        seeded.save(state)

        result = _invoke(workspace_root, state_dir, "app", "delete", "--yes")
        assert result.exit_code == 0, result.output
        assert seeded.load().applications == {}
        assert not (workspace_root / "deploy" / ".workspace").exists()
