"""
Pipeline deploy use case — create or update an application's pipeline.

The workflow reads the pipeline manifest from the workspace, converts it
into a deployable spec, resolves where artifacts live, and then either
creates the pipeline stack or, after confirmation, updates the existing
one. There is no upsert: existence strictly decides which call is made.

Flow:
    add support resources → read manifest → validate → convert stages
    → artifact buckets → exists? → create | confirm + update
"""

from __future__ import annotations

import logging

from appctl.adapters.base import (
    ConfigStore,
    Progress,
    Prompter,
    StackDeployer,
    WorkspaceReader,
)
from appctl.core.engine.executor import (
    Command,
    Step,
    StepReport,
    failed,
    run_steps,
    succeeded,
)
from appctl.core.errors import NO_APP_IN_WORKSPACE, StepError, ValidationError
from appctl.core.models.application import Application
from appctl.core.models.pipeline import (
    ArtifactBucket,
    GitHubSource,
    PipelineEntry,
    PipelineManifest,
    PipelineSpec,
    PipelineStage,
)
from appctl.core.services.artifacts import get_artifact_buckets
from appctl.core.services.manifest_converter import (
    ManifestConverter,
    build_spec,
    read_source,
    validate_manifest,
)

logger = logging.getLogger(__name__)

PIPELINE_SELECT_PROMPT = "Select a pipeline from your workspace to deploy"
PIPELINE_SELECT_HELP = "The pipeline manifest will be read from the workspace."

FMT_RESOURCES_START = "Adding pipeline resources to your application: {app}"
FMT_RESOURCES_COMPLETE = "Successfully added pipeline resources to your application: {app}"
FMT_RESOURCES_FAILED = "Failed to add pipeline resources to your application: {app}"

FMT_CREATE_START = "Creating a new pipeline: {name}"
FMT_CREATE_COMPLETE = "Successfully created a new pipeline: {name}"
FMT_CREATE_FAILED = "Failed to create a new pipeline: {name}."

FMT_EXISTS_PROMPT = "Are you sure you want to redeploy an existing pipeline: {name}?"
FMT_UPDATE_START = "Proposing infrastructure changes for the pipeline: {name}"
FMT_UPDATE_COMPLETE = "Successfully deployed pipeline: {name}"
FMT_UPDATE_FAILED = "Failed to accept changes for pipeline: {name}."

# What execute() ended up doing
OUTCOME_CREATED = "created"
OUTCOME_UPDATED = "updated"
OUTCOME_DECLINED = "declined"


class DeployPipeline(Command):
    """Deploy the workspace's pipeline for an application.

    Args:
        app_name: Application flag value ("" = use the workspace's).
        name: Pipeline flag value ("" = pick from the workspace).
        region: Region the pipeline support resources live in.
        store: Configuration store.
        ws: Workspace reader.
        deployer: Stack deployer.
        prompter: Interactive prompts.
        progress: Progress indicator.
        skip_confirmation: Redeploy an existing pipeline without asking.
        app: Pre-loaded application record (skips the lookup in validate).
    """

    def __init__(
        self,
        *,
        app_name: str,
        name: str,
        region: str,
        store: ConfigStore,
        ws: WorkspaceReader,
        deployer: StackDeployer,
        prompter: Prompter,
        progress: Progress,
        skip_confirmation: bool = False,
        app: Application | None = None,
    ):
        self.app_name = app_name
        self.name = name
        self.region = region
        self.store = store
        self.ws = ws
        self.deployer = deployer
        self.prompter = prompter
        self.progress = progress
        self.skip_confirmation = skip_confirmation
        self.app = app

        self.pipeline: PipelineEntry | None = None
        self.report = StepReport()
        self.outcome = ""

        # Filled in as the steps run
        self._manifest: PipelineManifest | None = None
        self._source: GitHubSource | None = None
        self._stages: list[PipelineStage] = []
        self._buckets: list[ArtifactBucket] = []

    # ── Command protocol ────────────────────────────────────────

    def validate(self) -> None:
        """Bind to the workspace's application and load its record."""
        ws_app = self.ws.app_name()
        if not ws_app:
            raise ValidationError(NO_APP_IN_WORKSPACE)
        if self.app_name and self.app_name != ws_app:
            raise ValidationError(
                f"cannot specify app {self.app_name} because the workspace "
                f"is already registered with app {ws_app}"
            )
        self.app_name = ws_app

        try:
            self.app = self.store.get_application(self.app_name)
        except Exception as e:
            raise StepError(f"get application {self.app_name} configuration", e) from e

    def ask(self) -> None:
        """Resolve which pipeline of the workspace to deploy."""
        pipelines = self._list_pipelines()
        if self.name:
            for entry in pipelines:
                if entry.name == self.name:
                    self.pipeline = entry
                    return
            raise ValidationError(f"pipeline {self.name} not found in the workspace")

        if not pipelines:
            raise ValidationError("no pipelines found in the workspace")
        if len(pipelines) == 1:
            self.pipeline = pipelines[0]
        else:
            try:
                chosen = self.prompter.select(
                    PIPELINE_SELECT_PROMPT,
                    PIPELINE_SELECT_HELP,
                    [p.name for p in pipelines],
                )
            except Exception as e:
                raise StepError("select pipeline", e) from e
            self.pipeline = next(p for p in pipelines if p.name == chosen)
        self.name = self.pipeline.name

    def execute(self) -> None:
        """Run the deploy workflow. Returns None when the user declines."""
        if self.app is None:
            raise ValidationError(f"application {self.app_name} has not been loaded")

        run_steps(
            [
                Step("add-pipeline-resources", self._add_pipeline_resources),
                Step("read-manifest", self._read_manifest),
                Step("validate-manifest", self._validate_manifest),
                Step("convert-stages", self._convert_stages),
                Step("artifact-buckets", self._get_artifact_buckets),
                Step("deploy-pipeline", self._deploy_pipeline),
            ],
            workflow="pipeline-deploy",
            report=self.report,
        )

    # ── Steps ───────────────────────────────────────────────────

    def _list_pipelines(self) -> list[PipelineEntry]:
        try:
            return self.ws.list_pipelines()
        except Exception as e:
            raise StepError("list pipelines", e) from e

    def _add_pipeline_resources(self) -> None:
        assert self.app is not None
        self.progress.start(FMT_RESOURCES_START.format(app=self.app.name))
        try:
            self.deployer.add_pipeline_resources_to_app(self.app, self.region)
        except Exception as e:
            self.progress.stop(failed(FMT_RESOURCES_FAILED.format(app=self.app.name)))
            raise StepError(
                f"add pipeline resources to application {self.app.name} in {self.region}", e
            ) from e
        self.progress.stop(succeeded(FMT_RESOURCES_COMPLETE.format(app=self.app.name)))

    def _read_manifest(self) -> None:
        # Path and parse failures share one message
        try:
            if self.pipeline is not None and not self.pipeline.legacy:
                path = self.pipeline.path
            else:
                path = self.ws.pipeline_manifest_legacy_path()
            self._manifest = self.ws.read_pipeline_manifest(path)
        except Exception as e:
            raise StepError("read pipeline manifest", e) from e

    def _validate_manifest(self) -> None:
        assert self._manifest is not None
        try:
            validate_manifest(self._manifest)
        except ValidationError as e:
            raise StepError("validate pipeline manifest", e) from e
        try:
            self._source = read_source(self._manifest)
        except ValidationError as e:
            raise StepError("read source from manifest", e) from e

    def _convert_stages(self) -> None:
        assert self._manifest is not None
        converter = ManifestConverter(self.app_name, self.store, self.ws)
        try:
            self._stages = converter.convert_stages(self._manifest.stages)
        except Exception as e:
            raise StepError("convert environments to deployment stage", e) from e

    def _get_artifact_buckets(self) -> None:
        assert self.app is not None
        try:
            self._buckets = get_artifact_buckets(self.deployer, self.app)
        except Exception as e:
            raise StepError("get cross-regional resources", e) from e

    def _deploy_pipeline(self) -> None:
        assert self.app is not None and self._manifest is not None and self._source is not None
        spec = build_spec(self.app_name, self._manifest, self._source, self._stages)
        spec.artifact_buckets = list(self._buckets)

        try:
            exists = self.deployer.pipeline_exists(spec)
        except Exception as e:
            raise StepError("check if pipeline exists", e) from e

        try:
            resources = self.deployer.get_app_resources_by_region(self.app, self.region)
        except Exception as e:
            raise StepError(f"get application {self.region} resources", e) from e
        spec.template_bucket = resources.s3_bucket

        if not exists:
            self._create(spec)
            return

        if not self.skip_confirmation:
            try:
                confirmed = self.prompter.confirm(FMT_EXISTS_PROMPT.format(name=spec.name), "")
            except Exception as e:
                raise StepError("prompt for pipeline deploy", e) from e
            if not confirmed:
                logger.info("Redeploy of pipeline %s declined, nothing changed", spec.name)
                self.outcome = OUTCOME_DECLINED
                return

        self._update(spec)

    def _create(self, spec: PipelineSpec) -> None:
        self.progress.start(FMT_CREATE_START.format(name=spec.name))
        try:
            self.deployer.create_pipeline(spec, self._buckets)
        except Exception as e:
            self.progress.stop(failed(FMT_CREATE_FAILED.format(name=spec.name)))
            raise StepError("create pipeline", e) from e
        self.progress.stop(succeeded(FMT_CREATE_COMPLETE.format(name=spec.name)))
        self.outcome = OUTCOME_CREATED

    def _update(self, spec: PipelineSpec) -> None:
        self.progress.start(FMT_UPDATE_START.format(name=spec.name))
        try:
            self.deployer.update_pipeline(spec, self._buckets)
        except Exception as e:
            self.progress.stop(failed(FMT_UPDATE_FAILED.format(name=spec.name)))
            raise StepError("update pipeline", e) from e
        self.progress.stop(succeeded(FMT_UPDATE_COMPLETE.format(name=spec.name)))
        self.outcome = OUTCOME_UPDATED
