"""
Pipeline models — manifest (what the user declared) and plan (what gets deployed).

The manifest side mirrors the YAML file in the workspace. The plan side
is what the converter produces: every stage resolved to a concrete
environment, plus the artifact buckets the pipeline writes to.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

# Pipeline names become stack names, which are length-limited
MAX_PIPELINE_NAME_LENGTH = 100

DEFAULT_BUILD_IMAGE = "aws/codebuild/amazonlinux2-x86_64-standard:3.0"
DEFAULT_BRANCH = "main"


class SourceProvider(StrEnum):
    """Recognized source providers."""

    GITHUB = "GitHub"


# ── Manifest ────────────────────────────────────────────────────


class SourceManifest(BaseModel):
    """The ``source`` block of a pipeline manifest."""

    provider: str = ""
    properties: dict[str, Any] = Field(default_factory=dict)

    @property
    def access_token_secret(self) -> str:
        """Legacy personal-access-token secret name, or empty."""
        secret = self.properties.get("access_token_secret")
        return secret if isinstance(secret, str) else ""


class BuildManifest(BaseModel):
    """Optional ``build`` block overriding the build image."""

    image: str = ""


class StageManifest(BaseModel):
    """One entry of the manifest's ``stages`` list."""

    name: str
    requires_approval: bool = False
    test_commands: list[str] = Field(default_factory=list)


class PipelineManifest(BaseModel):
    """A pipeline manifest as declared in the workspace."""

    name: str
    version: int = 1
    source: SourceManifest = Field(default_factory=SourceManifest)
    build: BuildManifest | None = None
    stages: list[StageManifest] = Field(default_factory=list)


class PipelineEntry(BaseModel):
    """A pipeline found in the workspace: its name and manifest path."""

    name: str
    path: str
    legacy: bool = False


# ── Plan ────────────────────────────────────────────────────────


class GitHubSource(BaseModel):
    """A GitHub repository source, resolved from the manifest."""

    provider: SourceProvider = SourceProvider.GITHUB
    repository_url: str
    branch: str = DEFAULT_BRANCH
    access_token_secret: str = ""

    def owner_and_repo(self) -> tuple[str, str]:
        """Split the repository into (owner, repo).

        Accepts both ``owner/repo`` and full GitHub URLs.
        """
        path = self.repository_url.strip()
        for prefix in ("https://github.com/", "http://github.com/", "github.com/"):
            if path.startswith(prefix):
                path = path[len(prefix):]
                break
        path = path.strip("/").removesuffix(".git")
        owner, _, repo = path.partition("/")
        return owner, repo


class AssociatedEnvironment(BaseModel):
    """The environment a stage deploys to."""

    name: str
    region: str = ""
    account_id: str = ""
    prod: bool = False


class PipelineStage(BaseModel):
    """A manifest stage resolved against the configuration store."""

    environment: AssociatedEnvironment
    local_workloads: list[str] = Field(default_factory=list)
    requires_approval: bool = False
    test_commands: list[str] = Field(default_factory=list)

    @property
    def name(self) -> str:
        return self.environment.name


class ArtifactBucket(BaseModel):
    """Per-region artifact storage used by the pipeline."""

    bucket_name: str
    key_arn: str = ""
    region: str = ""


class PipelineSpec(BaseModel):
    """Everything the deployer needs to create or update a pipeline stack."""

    name: str
    app_name: str
    source: GitHubSource
    build_image: str = DEFAULT_BUILD_IMAGE
    stages: list[PipelineStage] = Field(default_factory=list)
    artifact_buckets: list[ArtifactBucket] = Field(default_factory=list)
    template_bucket: str = ""
    tags: dict[str, str] = Field(default_factory=dict)
