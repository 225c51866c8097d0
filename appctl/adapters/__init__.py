"""Adapters — bindings for the store, deployer, workspace and terminal.

Public re-exports for convenient access.
"""

from appctl.adapters.base import (
    BucketEmptier,
    ConfigStore,
    Progress,
    Prompter,
    SecretsManager,
    StackDeployer,
    WorkspaceReader,
)

__all__ = [
    "BucketEmptier",
    "ConfigStore",
    "Progress",
    "Prompter",
    "SecretsManager",
    "StackDeployer",
    "WorkspaceReader",
]
