"""
Adapter base — the contracts between the workflows and the outside world.

The orchestrators in ``appctl.core.use_cases`` only talk to external
systems through these interfaces, never directly to a cloud SDK or the
filesystem. Concrete bindings live next to this module
(``workspace.py``, ``local.py``, ``terminal.py``); tests substitute
``MagicMock`` instances.

Unlike the sub-executors in ``appctl.core.engine.executor``, adapters
DO raise: a failed lookup or deletion surfaces as an exception that the
calling step wraps with its own prefix.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from appctl.core.config.loader import WorkspaceSummary
from appctl.core.models.application import Application, Environment, Workload
from appctl.core.models.pipeline import (
    ArtifactBucket,
    PipelineEntry,
    PipelineManifest,
    PipelineSpec,
)
from appctl.core.models.resources import AppRegionalResources, TaskStackInfo


class ConfigStore(ABC):
    """Persisted application configuration (apps, environments, workloads)."""

    @abstractmethod
    def get_application(self, app: str) -> Application:
        """Look up an application. Raises if it doesn't exist."""

    @abstractmethod
    def get_environment(self, app: str, env: str) -> Environment:
        """Look up one environment of an application. Raises if missing."""

    @abstractmethod
    def list_environments(self, app: str) -> list[Environment]:
        """All environments of an application."""

    @abstractmethod
    def list_services(self, app: str) -> list[Workload]:
        """All services registered under an application."""

    @abstractmethod
    def list_jobs(self, app: str) -> list[Workload]:
        """All jobs registered under an application."""

    @abstractmethod
    def delete_workload(self, app: str, name: str) -> None:
        """Remove a workload record."""

    @abstractmethod
    def delete_environment(self, app: str, env: str) -> None:
        """Remove an environment record."""

    @abstractmethod
    def delete_application(self, app: str) -> None:
        """Remove the application record."""


class StackDeployer(ABC):
    """Creates, inspects and deletes infrastructure stacks."""

    # ── Application support stacks ──────────────────────────────

    @abstractmethod
    def add_pipeline_resources_to_app(self, app: Application, region: str) -> None:
        """Ensure pipeline support resources exist in a region. Idempotent."""

    @abstractmethod
    def get_regional_app_resources(self, app: Application) -> list[AppRegionalResources]:
        """Support-stack outputs for every region the application uses."""

    @abstractmethod
    def get_app_resources_by_region(
        self, app: Application, region: str
    ) -> AppRegionalResources:
        """Support-stack outputs for a single region."""

    @abstractmethod
    def delete_app(self, app: str) -> None:
        """Delete the application's support stacks."""

    # ── Pipelines ───────────────────────────────────────────────

    @abstractmethod
    def pipeline_exists(self, spec: PipelineSpec) -> bool:
        """Whether a pipeline stack already exists for this app + name."""

    @abstractmethod
    def create_pipeline(self, spec: PipelineSpec, buckets: list[ArtifactBucket]) -> None:
        """Create a new pipeline stack."""

    @abstractmethod
    def update_pipeline(self, spec: PipelineSpec, buckets: list[ArtifactBucket]) -> None:
        """Update an existing pipeline stack."""

    @abstractmethod
    def delete_pipeline(self, name: str) -> None:
        """Delete a pipeline stack."""

    # ── Workloads, tasks, environments ──────────────────────────

    @abstractmethod
    def list_task_stacks(self, app: str, env: str) -> list[TaskStackInfo]:
        """Standalone task stacks deployed in an environment."""

    @abstractmethod
    def delete_task(self, task: TaskStackInfo) -> None:
        """Delete a standalone task stack."""

    @abstractmethod
    def delete_workload(self, app: str, env: str, name: str) -> None:
        """Delete a workload's stack from one environment."""

    @abstractmethod
    def delete_environment(self, app: str, env: str) -> None:
        """Delete an environment stack."""


class BucketEmptier(ABC):
    """Removes every object from a bucket. Built once per region."""

    @abstractmethod
    def empty_bucket(self, bucket: str) -> None:
        """Delete all objects (and versions) in the bucket."""


class SecretsManager(ABC):
    """Secret storage."""

    @abstractmethod
    def delete_secret(self, name: str) -> None:
        """Delete a secret by name."""


class WorkspaceReader(ABC):
    """The local workspace: manifests and the workspace summary file."""

    @abstractmethod
    def summary(self) -> WorkspaceSummary:
        """Parsed workspace summary file."""

    @abstractmethod
    def app_name(self) -> str:
        """Application the workspace is bound to, or empty."""

    @abstractmethod
    def pipeline_manifest_legacy_path(self) -> str:
        """Path of the single-pipeline manifest. Raises if it doesn't exist."""

    @abstractmethod
    def read_pipeline_manifest(self, path: str) -> PipelineManifest:
        """Parse a pipeline manifest file."""

    @abstractmethod
    def list_pipelines(self) -> list[PipelineEntry]:
        """Every pipeline manifest found in the workspace."""

    @abstractmethod
    def list_services(self) -> list[str]:
        """Names of services with a manifest in the workspace."""

    @abstractmethod
    def list_jobs(self) -> list[str]:
        """Names of jobs with a manifest in the workspace."""

    @abstractmethod
    def delete_workspace_file(self) -> None:
        """Remove the summary file binding the workspace to an application."""


class Prompter(ABC):
    """Interactive questions. Raises ``ConfirmationError`` on I/O failure."""

    @abstractmethod
    def confirm(self, message: str, help: str = "", final_message: str | None = None) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def select(self, message: str, help: str, options: list[str]) -> str:
        """Ask the user to pick one of ``options``."""


class Progress(ABC):
    """A start/stop progress indicator around long-running calls."""

    @abstractmethod
    def start(self, label: str) -> None:
        """Show ``label`` as in progress."""

    @abstractmethod
    def stop(self, label: str) -> None:
        """Replace the in-progress label with a final one."""
