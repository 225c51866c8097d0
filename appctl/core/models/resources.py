"""
Stack output models — what the deployer reports about deployed stacks.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Standalone task stacks are named "task-<task name>"
TASK_STACK_PREFIX = "task-"


class AppRegionalResources(BaseModel):
    """Region-scoped outputs of an application's support stack."""

    region: str = ""
    s3_bucket: str = ""
    kms_key_arn: str = ""
    repository_urls: dict[str, str] = Field(default_factory=dict)


class TaskStackInfo(BaseModel):
    """A standalone task stack deployed into an environment."""

    stack_name: str
    app: str = ""
    env: str = ""

    @property
    def task_name(self) -> str:
        """Task name with the stack-name prefix removed."""
        return self.stack_name.removeprefix(TASK_STACK_PREFIX)
