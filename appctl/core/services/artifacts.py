"""
Artifact resolver — the per-region buckets a pipeline stores artifacts in.
"""

from __future__ import annotations

from appctl.adapters.base import StackDeployer
from appctl.core.models.application import Application
from appctl.core.models.pipeline import ArtifactBucket


def get_artifact_buckets(deployer: StackDeployer, app: Application) -> list[ArtifactBucket]:
    """One artifact bucket per region the application has resources in.

    Order follows the deployer's region enumeration. Deployer errors
    propagate unchanged.
    """
    resources = deployer.get_regional_app_resources(app)
    return [
        ArtifactBucket(
            bucket_name=resource.s3_bucket,
            key_arn=resource.kms_key_arn,
            region=resource.region,
        )
        for resource in resources
    ]
