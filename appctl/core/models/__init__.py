"""
Domain models — Pydantic types for applications, pipelines and stacks.

All models are re-exported here for convenient access:

    from appctl.core.models import Application, Environment, PipelineManifest
"""

from appctl.core.models.application import (
    JOB_KIND,
    SERVICE_KIND,
    Application,
    Environment,
    Workload,
)
from appctl.core.models.pipeline import (
    DEFAULT_BUILD_IMAGE,
    MAX_PIPELINE_NAME_LENGTH,
    ArtifactBucket,
    AssociatedEnvironment,
    BuildManifest,
    GitHubSource,
    PipelineEntry,
    PipelineManifest,
    PipelineSpec,
    PipelineStage,
    SourceManifest,
    SourceProvider,
    StageManifest,
)
from appctl.core.models.resources import AppRegionalResources, TaskStackInfo

__all__ = [
    # application.py
    "Application",
    "Environment",
    "JOB_KIND",
    "SERVICE_KIND",
    "Workload",
    # pipeline.py
    "ArtifactBucket",
    "AssociatedEnvironment",
    "BuildManifest",
    "DEFAULT_BUILD_IMAGE",
    "GitHubSource",
    "MAX_PIPELINE_NAME_LENGTH",
    "PipelineEntry",
    "PipelineManifest",
    "PipelineSpec",
    "PipelineStage",
    "SourceManifest",
    "SourceProvider",
    "StageManifest",
    # resources.py
    "AppRegionalResources",
    "TaskStackInfo",
]
