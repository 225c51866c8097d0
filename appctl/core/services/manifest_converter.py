"""
Manifest converter — pipeline manifest → deployable pipeline spec.

Validates the manifest, resolves its source provider, and turns every
named stage into a concrete environment the pipeline can deploy to.
Stage conversion is all-or-nothing: one unresolvable stage name aborts
the whole conversion.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from appctl.adapters.base import ConfigStore, WorkspaceReader
from appctl.core.errors import (
    EnvironmentResolutionError,
    StepError,
    UnsupportedProviderError,
    ValidationError,
)
from appctl.core.models.pipeline import (
    DEFAULT_BRANCH,
    DEFAULT_BUILD_IMAGE,
    MAX_PIPELINE_NAME_LENGTH,
    AssociatedEnvironment,
    GitHubSource,
    PipelineManifest,
    PipelineSpec,
    PipelineStage,
    SourceProvider,
    StageManifest,
)

logger = logging.getLogger(__name__)


def validate_manifest(manifest: PipelineManifest) -> None:
    """Check manifest fields that don't need any external lookup.

    Raises:
        ValidationError: If the pipeline name is too long.
    """
    if len(manifest.name) >= MAX_PIPELINE_NAME_LENGTH:
        raise ValidationError(
            f"pipeline name '{manifest.name}' must be shorter than "
            f"{MAX_PIPELINE_NAME_LENGTH} characters"
        )


def _read_github_source(manifest: PipelineManifest) -> GitHubSource:
    props = manifest.source.properties
    return GitHubSource(
        repository_url=str(props.get("repository", "")),
        branch=str(props.get("branch") or DEFAULT_BRANCH),
        access_token_secret=manifest.source.access_token_secret,
    )


_SOURCE_READERS: dict[SourceProvider, Callable[[PipelineManifest], GitHubSource]] = {
    SourceProvider.GITHUB: _read_github_source,
}


def read_source(manifest: PipelineManifest) -> GitHubSource:
    """Resolve the manifest's source block into a typed source.

    Raises:
        UnsupportedProviderError: If the provider isn't a SourceProvider.
    """
    try:
        provider = SourceProvider(manifest.source.provider)
    except ValueError:
        raise UnsupportedProviderError(manifest.source.provider) from None

    return _SOURCE_READERS[provider](manifest)


def merge_unique(*groups: list[str]) -> list[str]:
    """Concatenate name lists, keeping first-seen order and dropping repeats."""
    return list(dict.fromkeys(name for group in groups for name in group))


class ManifestConverter:
    """Converts manifest stages into environment-bound pipeline stages.

    Args:
        app_name: Application the pipeline belongs to.
        store: Configuration store used to resolve stage environments.
        ws: Workspace used to list locally-defined services and jobs.
    """

    def __init__(self, app_name: str, store: ConfigStore, ws: WorkspaceReader):
        self.app_name = app_name
        self.store = store
        self.ws = ws

    def local_workloads(self) -> list[str]:
        """Services then jobs defined in the workspace, without duplicates."""
        try:
            services = self.ws.list_services()
        except Exception as e:
            raise StepError("get local services", e) from e
        try:
            jobs = self.ws.list_jobs()
        except Exception as e:
            raise StepError("get local jobs", e) from e
        return merge_unique(services, jobs)

    def convert_stages(self, stages: list[StageManifest]) -> list[PipelineStage]:
        """Resolve every manifest stage to an environment of the application.

        The local workload list is computed once and shared by all stages.

        Raises:
            StepError: If the local workloads can't be listed.
            EnvironmentResolutionError: If any stage name isn't an environment.
        """
        workloads = self.local_workloads()

        converted: list[PipelineStage] = []
        for stage in stages:
            try:
                env = self.store.get_environment(self.app_name, stage.name)
            except Exception as e:
                raise EnvironmentResolutionError(self.app_name, stage.name, e) from e

            converted.append(
                PipelineStage(
                    environment=AssociatedEnvironment(
                        name=env.name,
                        region=env.region,
                        account_id=env.account_id,
                        prod=env.prod,
                    ),
                    local_workloads=list(workloads),
                    requires_approval=stage.requires_approval,
                    test_commands=list(stage.test_commands),
                )
            )
            logger.debug("Stage '%s' → %s/%s", stage.name, env.account_id, env.region)

        return converted

    def convert(self, manifest: PipelineManifest) -> PipelineSpec:
        """Validate and fully convert a manifest.

        Validation runs first, so a bad manifest fails before any call
        to the store or the workspace.
        """
        validate_manifest(manifest)
        source = read_source(manifest)
        stages = self.convert_stages(manifest.stages)
        return build_spec(self.app_name, manifest, source, stages)


def build_spec(
    app_name: str,
    manifest: PipelineManifest,
    source: GitHubSource,
    stages: list[PipelineStage],
) -> PipelineSpec:
    """Assemble the deployable spec from already-converted parts."""
    build_image = manifest.build.image if manifest.build and manifest.build.image else ""
    return PipelineSpec(
        name=manifest.name,
        app_name=app_name,
        source=source,
        build_image=build_image or DEFAULT_BUILD_IMAGE,
        stages=stages,
    )
