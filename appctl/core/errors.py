"""
Error taxonomy — every failure the workflows can report.

Workflows never recover locally. Each step wraps whatever its
collaborator raised in a ``StepError`` carrying a short static prefix,
so the final message reads like a breadcrumb trail:

    convert environments to deployment stage: get local services: boom

The original exception stays reachable through ``__cause__`` and
``find_cause()``.
"""

from __future__ import annotations

from typing import TypeVar

E = TypeVar("E", bound=BaseException)

NO_APP_IN_WORKSPACE = (
    "could not find an application attached to this workspace, please run `app init` first"
)


class AppctlError(Exception):
    """Base class for all appctl errors."""


class ValidationError(AppctlError):
    """A manifest or input is malformed. Raised before any external call."""


class UnsupportedProviderError(ValidationError):
    """The manifest names a source provider we don't know."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"invalid repo source provider: {provider}")


class ResolutionError(AppctlError):
    """A referenced record (application, environment) could not be found."""


class EnvironmentResolutionError(ResolutionError):
    """A pipeline stage names an environment the application doesn't have."""

    def __init__(self, app: str, env: str, cause: BaseException):
        self.app = app
        self.env = env
        super().__init__(f"get environment {env} in application {app}: {cause}")


class ConfirmationError(AppctlError):
    """The interactive prompt itself failed (not a user decline)."""


class ExternalServiceError(AppctlError):
    """A store, deployer, bucket or secret call failed."""


class OperationCancelledError(AppctlError):
    """The user declined a top-level confirmation."""


class StepError(AppctlError):
    """A failure wrapped with the name of the step it happened in."""

    def __init__(self, prefix: str, cause: BaseException):
        self.prefix = prefix
        self.cause = cause
        super().__init__(f"{prefix}: {cause}")


def find_cause(err: BaseException | None, cls: type[E]) -> E | None:
    """Walk the ``__cause__`` chain and return the first instance of ``cls``."""
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        if isinstance(err, cls):
            return err
        seen.add(id(err))
        err = err.__cause__
    return None


# ── Workspace ───────────────────────────────────────────────────


class WorkspaceNotFoundError(ResolutionError):
    """No workspace directory was found walking up from the cwd."""

    def __init__(self, current_dir: str, dir_name: str, levels_checked: int):
        self.current_dir = current_dir
        self.dir_name = dir_name
        self.levels_checked = levels_checked
        super().__init__(
            f"couldn't find a directory called {dir_name} up to "
            f"{levels_checked} levels up from {current_dir}"
        )


class NoApplicationAssociatedError(ResolutionError):
    """The workspace has no summary file binding it to an application."""

    def __init__(self) -> None:
        super().__init__("couldn't find an application associated with this workspace")


class ManifestNotFoundError(ResolutionError):
    """A manifest file is missing from the workspace."""

    def __init__(self, manifest_name: str):
        self.manifest_name = manifest_name
        super().__init__(f"manifest file {manifest_name} does not exist")
