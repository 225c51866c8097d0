"""
Workspace loader — finds the workspace directory and reads its summary.

A workspace is a ``deploy/`` directory somewhere above the current
directory. The ``.workspace`` summary file inside it binds the workspace
to an application:

    application: pipepiper

The loader walks upward a bounded number of levels, so commands work
from any subdirectory of the project.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel

from appctl.core.errors import AppctlError, NoApplicationAssociatedError, WorkspaceNotFoundError

logger = logging.getLogger(__name__)

WORKSPACE_DIR_NAME = "deploy"
SUMMARY_FILE_NAME = ".workspace"
MAX_SEARCH_LEVELS = 5


class ConfigError(AppctlError):
    """Raised when the workspace summary is unreadable or malformed."""


class WorkspaceSummary(BaseModel):
    """Contents of the workspace summary file."""

    application: str = ""


def find_workspace_dir(start_dir: Path | None = None, max_levels: int = MAX_SEARCH_LEVELS) -> Path:
    """Search for the workspace directory starting from ``start_dir``, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).
        max_levels: How many parent directories to check.

    Returns:
        Path to the workspace directory.

    Raises:
        WorkspaceNotFoundError: If no workspace directory is found.
    """
    start = (start_dir or Path.cwd()).resolve()
    current = start

    for _ in range(max_levels):
        candidate = current / WORKSPACE_DIR_NAME
        if candidate.is_dir():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    raise WorkspaceNotFoundError(str(start), WORKSPACE_DIR_NAME, max_levels)


def load_summary(workspace_dir: Path) -> WorkspaceSummary:
    """Load and validate the workspace summary file.

    Raises:
        NoApplicationAssociatedError: If the summary file doesn't exist.
        ConfigError: If the file is unreadable or malformed.
    """
    path = workspace_dir / SUMMARY_FILE_NAME
    if not path.is_file():
        raise NoApplicationAssociatedError()

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        summary = WorkspaceSummary.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid workspace summary: {e}") from e

    logger.debug("Workspace %s bound to application '%s'", workspace_dir, summary.application)
    return summary


def write_summary(workspace_dir: Path, summary: WorkspaceSummary) -> Path:
    """Write the workspace summary file, creating the directory if needed."""
    workspace_dir.mkdir(parents=True, exist_ok=True)
    path = workspace_dir / SUMMARY_FILE_NAME
    path.write_text(yaml.safe_dump(summary.model_dump(), sort_keys=False), encoding="utf-8")
    return path
