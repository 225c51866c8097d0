"""
Local backend — a file-backed stand-in for the cloud store and deployer.

Every adapter here shares one JSON state file. Each call loads the
file, applies its change and saves it back. Writes are atomic (write
to temp file, then rename) so an interrupted teardown never leaves a
half-written state behind.

The state records what a real backend would own: application,
environment and workload records, the stacks deployed for them, the
regional support resources, pipeline stacks, bucket objects and secrets.
"""

from __future__ import annotations

import json
import logging
import tempfile
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, Field

from appctl.adapters.base import BucketEmptier, ConfigStore, SecretsManager, StackDeployer
from appctl.core.errors import ExternalServiceError
from appctl.core.models.application import JOB_KIND, SERVICE_KIND, Application, Environment, Workload
from appctl.core.models.pipeline import ArtifactBucket, PipelineSpec
from appctl.core.models.resources import TASK_STACK_PREFIX, AppRegionalResources, TaskStackInfo

logger = logging.getLogger(__name__)


# ── State model ─────────────────────────────────────────────────


class PipelineRecord(BaseModel):
    """A deployed pipeline stack."""

    app: str
    spec: PipelineSpec
    artifact_buckets: list[ArtifactBucket] = Field(default_factory=list)
    updated_at: str = ""


class LocalState(BaseModel):
    """Everything the local backend knows about."""

    # Configuration store
    applications: dict[str, Application] = Field(default_factory=dict)
    environments: dict[str, dict[str, Environment]] = Field(default_factory=dict)
    workloads: dict[str, dict[str, Workload]] = Field(default_factory=dict)

    # Deployed stacks, keyed app → env → names
    env_stacks: dict[str, list[str]] = Field(default_factory=dict)
    workload_stacks: dict[str, dict[str, list[str]]] = Field(default_factory=dict)
    task_stacks: dict[str, dict[str, list[str]]] = Field(default_factory=dict)

    # Support stacks, keyed app → region
    regional_resources: dict[str, dict[str, AppRegionalResources]] = Field(default_factory=dict)
    pipelines: dict[str, PipelineRecord] = Field(default_factory=dict)

    # Storage
    buckets: dict[str, list[str]] = Field(default_factory=dict)
    secrets: dict[str, str] = Field(default_factory=dict)

    updated_at: str = ""

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC).isoformat()


class LocalStateFile:
    """Atomic load/save of the local backend state."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> LocalState:
        """Load state. A missing file is an empty backend.

        Raises:
            ExternalServiceError: If the file exists but can't be parsed.
        """
        if not self.path.is_file():
            logger.debug("No state file at %s, starting empty", self.path)
            return LocalState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return LocalState.model_validate(data)
        except Exception as e:
            raise ExternalServiceError(f"load state from {self.path}: {e}") from e

    def save(self, state: LocalState) -> None:
        """Save state (atomic write)."""
        state.touch()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".state_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with open(fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp.replace(self.path)
            logger.debug("State saved to %s", self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise


# ── Configuration store ─────────────────────────────────────────


class LocalStore(ConfigStore):
    """Application, environment and workload records."""

    def __init__(self, state_file: LocalStateFile):
        self.state_file = state_file

    def get_application(self, app: str) -> Application:
        state = self.state_file.load()
        if app not in state.applications:
            raise ExternalServiceError(f"application {app} not found")
        return state.applications[app]

    def get_environment(self, app: str, env: str) -> Environment:
        state = self.state_file.load()
        envs = state.environments.get(app, {})
        if env not in envs:
            raise ExternalServiceError(f"environment {env} not found in application {app}")
        return envs[env]

    def list_environments(self, app: str) -> list[Environment]:
        return list(self.state_file.load().environments.get(app, {}).values())

    def list_services(self, app: str) -> list[Workload]:
        return self._list_workloads(app, SERVICE_KIND)

    def list_jobs(self, app: str) -> list[Workload]:
        return self._list_workloads(app, JOB_KIND)

    def delete_workload(self, app: str, name: str) -> None:
        state = self.state_file.load()
        state.workloads.get(app, {}).pop(name, None)
        self.state_file.save(state)

    def delete_environment(self, app: str, env: str) -> None:
        state = self.state_file.load()
        state.environments.get(app, {}).pop(env, None)
        self.state_file.save(state)

    def delete_application(self, app: str) -> None:
        state = self.state_file.load()
        state.applications.pop(app, None)
        state.environments.pop(app, None)
        state.workloads.pop(app, None)
        self.state_file.save(state)

    # ── Registration (used by ``app init`` and fixtures) ────────

    def create_application(self, app: Application) -> None:
        state = self.state_file.load()
        if app.name in state.applications:
            raise ExternalServiceError(f"application {app.name} already exists")
        state.applications[app.name] = app
        self.state_file.save(state)

    def create_environment(self, env: Environment) -> None:
        state = self.state_file.load()
        if env.app not in state.applications:
            raise ExternalServiceError(f"application {env.app} not found")
        state.environments.setdefault(env.app, {})[env.name] = env
        state.env_stacks.setdefault(env.app, [])
        if env.name not in state.env_stacks[env.app]:
            state.env_stacks[env.app].append(env.name)
        self.state_file.save(state)

    def _list_workloads(self, app: str, kind: str) -> list[Workload]:
        workloads = self.state_file.load().workloads.get(app, {}).values()
        return [w for w in workloads if w.kind == kind]


# ── Stack deployer ──────────────────────────────────────────────


class LocalDeployer(StackDeployer):
    """Stacks recorded in the state file instead of a cloud account."""

    def __init__(self, state_file: LocalStateFile):
        self.state_file = state_file

    def add_pipeline_resources_to_app(self, app: Application, region: str) -> None:
        state = self.state_file.load()
        regions = state.regional_resources.setdefault(app.name, {})
        if region in regions:
            return
        bucket = f"{app.name}-{region}-artifacts"
        regions[region] = AppRegionalResources(
            region=region,
            s3_bucket=bucket,
            kms_key_arn=f"arn:aws:kms:{region}:{app.account_id or '000000000000'}:key/{app.name}",
        )
        state.buckets.setdefault(bucket, [])
        self.state_file.save(state)
        logger.info("Added pipeline resources for %s in %s", app.name, region)

    def get_regional_app_resources(self, app: Application) -> list[AppRegionalResources]:
        return list(self.state_file.load().regional_resources.get(app.name, {}).values())

    def get_app_resources_by_region(self, app: Application, region: str) -> AppRegionalResources:
        regions = self.state_file.load().regional_resources.get(app.name, {})
        if region not in regions:
            raise ExternalServiceError(f"no resources for application {app.name} in region {region}")
        return regions[region]

    def delete_app(self, app: str) -> None:
        state = self.state_file.load()
        for resources in state.regional_resources.pop(app, {}).values():
            state.buckets.pop(resources.s3_bucket, None)
        self.state_file.save(state)

    # ── Pipelines ───────────────────────────────────────────────

    def pipeline_exists(self, spec: PipelineSpec) -> bool:
        record = self.state_file.load().pipelines.get(spec.name)
        return record is not None and record.app == spec.app_name

    def create_pipeline(self, spec: PipelineSpec, buckets: list[ArtifactBucket]) -> None:
        state = self.state_file.load()
        if spec.name in state.pipelines:
            raise ExternalServiceError(f"pipeline {spec.name} already exists")
        self._put_pipeline(state, spec, buckets)

    def update_pipeline(self, spec: PipelineSpec, buckets: list[ArtifactBucket]) -> None:
        state = self.state_file.load()
        if spec.name not in state.pipelines:
            raise ExternalServiceError(f"pipeline {spec.name} does not exist")
        self._put_pipeline(state, spec, buckets)

    def delete_pipeline(self, name: str) -> None:
        state = self.state_file.load()
        state.pipelines.pop(name, None)
        self.state_file.save(state)

    def _put_pipeline(self, state: LocalState, spec: PipelineSpec, buckets: list[ArtifactBucket]) -> None:
        state.pipelines[spec.name] = PipelineRecord(
            app=spec.app_name,
            spec=spec,
            artifact_buckets=list(buckets),
            updated_at=datetime.now(UTC).isoformat(),
        )
        self.state_file.save(state)

    # ── Workloads, tasks, environments ──────────────────────────

    def list_task_stacks(self, app: str, env: str) -> list[TaskStackInfo]:
        names = self.state_file.load().task_stacks.get(app, {}).get(env, [])
        return [TaskStackInfo(stack_name=name, app=app, env=env) for name in names]

    def delete_task(self, task: TaskStackInfo) -> None:
        state = self.state_file.load()
        stacks = state.task_stacks.get(task.app, {}).get(task.env, [])
        if task.stack_name in stacks:
            stacks.remove(task.stack_name)
        self.state_file.save(state)

    def delete_workload(self, app: str, env: str, name: str) -> None:
        state = self.state_file.load()
        stacks = state.workload_stacks.get(app, {}).get(env, [])
        if name in stacks:
            stacks.remove(name)
        self.state_file.save(state)

    def delete_environment(self, app: str, env: str) -> None:
        state = self.state_file.load()
        if state.workload_stacks.get(app, {}).get(env):
            raise ExternalServiceError(f"environment {env} still has deployed workloads")
        stacks = state.env_stacks.get(app, [])
        if env in stacks:
            stacks.remove(env)
        state.task_stacks.get(app, {}).pop(env, None)
        state.workload_stacks.get(app, {}).pop(env, None)
        self.state_file.save(state)

    # ── Used by fixtures and ``app init`` ───────────────────────

    def add_task_stack(self, app: str, env: str, task_name: str) -> None:
        state = self.state_file.load()
        state.task_stacks.setdefault(app, {}).setdefault(env, []).append(
            f"{TASK_STACK_PREFIX}{task_name}"
        )
        self.state_file.save(state)


# ── Storage ─────────────────────────────────────────────────────


class LocalBucketEmptier(BucketEmptier):
    """Empties buckets recorded in the state file. One per region."""

    def __init__(self, state_file: LocalStateFile, region: str):
        self.state_file = state_file
        self.region = region

    def empty_bucket(self, bucket: str) -> None:
        state = self.state_file.load()
        if bucket not in state.buckets:
            raise ExternalServiceError(f"bucket {bucket} does not exist in {self.region}")
        removed = len(state.buckets[bucket])
        state.buckets[bucket] = []
        self.state_file.save(state)
        logger.debug("Emptied bucket %s in %s (%d objects)", bucket, self.region, removed)


class LocalSecretsManager(SecretsManager):
    """Secrets recorded in the state file."""

    def __init__(self, state_file: LocalStateFile):
        self.state_file = state_file

    def delete_secret(self, name: str) -> None:
        state = self.state_file.load()
        if name not in state.secrets:
            logger.debug("Secret %s not found, already deleted", name)
            return
        del state.secrets[name]
        self.state_file.save(state)
