"""
Filesystem workspace — manifests and the summary file under ``deploy/``.

Layout:

    deploy/
    ├── .workspace                  summary (application binding)
    ├── pipeline.yml                legacy single-pipeline manifest
    ├── pipelines/<name>/manifest.yml
    └── <workload>/manifest.yml     services and jobs (``type:`` decides)
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from appctl.adapters.base import WorkspaceReader
from appctl.core.config.loader import (
    SUMMARY_FILE_NAME,
    WorkspaceSummary,
    find_workspace_dir,
    load_summary,
)
from appctl.core.errors import ManifestNotFoundError, NoApplicationAssociatedError, ValidationError
from appctl.core.models.pipeline import PipelineEntry, PipelineManifest

logger = logging.getLogger(__name__)

LEGACY_PIPELINE_FILE = "pipeline.yml"
PIPELINES_DIR = "pipelines"
MANIFEST_FILE = "manifest.yml"

# Workload manifest ``type`` values that make a workload a job
JOB_TYPES = frozenset({"Scheduled Job"})


class Workspace(WorkspaceReader):
    """A workspace rooted at a ``deploy/`` directory."""

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def discover(cls, start_dir: Path | None = None) -> Workspace:
        """Find the workspace above ``start_dir`` (default: cwd)."""
        return cls(find_workspace_dir(start_dir))

    # ── Summary ─────────────────────────────────────────────────

    def summary(self) -> WorkspaceSummary:
        return load_summary(self.path)

    def app_name(self) -> str:
        try:
            return self.summary().application
        except NoApplicationAssociatedError:
            return ""

    def delete_workspace_file(self) -> None:
        (self.path / SUMMARY_FILE_NAME).unlink(missing_ok=True)
        logger.debug("Removed %s from %s", SUMMARY_FILE_NAME, self.path)

    # ── Pipelines ───────────────────────────────────────────────

    def pipeline_manifest_legacy_path(self) -> str:
        path = self.path / LEGACY_PIPELINE_FILE
        if not path.is_file():
            raise ManifestNotFoundError(LEGACY_PIPELINE_FILE)
        return str(path)

    def read_pipeline_manifest(self, path: str) -> PipelineManifest:
        data = _read_yaml(Path(path))
        try:
            return PipelineManifest.model_validate(data)
        except Exception as e:
            raise ValidationError(f"unmarshal pipeline manifest {path}: {e}") from e

    def list_pipelines(self) -> list[PipelineEntry]:
        """Legacy manifest first, then ``pipelines/*`` sorted by directory name."""
        entries: list[PipelineEntry] = []

        legacy = self.path / LEGACY_PIPELINE_FILE
        if legacy.is_file():
            entries.append(PipelineEntry(name=self.read_pipeline_manifest(str(legacy)).name,
                                         path=str(legacy), legacy=True))

        pipelines_dir = self.path / PIPELINES_DIR
        if pipelines_dir.is_dir():
            for child in sorted(pipelines_dir.iterdir()):
                manifest = child / MANIFEST_FILE
                if manifest.is_file():
                    entries.append(PipelineEntry(
                        name=self.read_pipeline_manifest(str(manifest)).name,
                        path=str(manifest),
                    ))
        return entries

    # ── Workloads ───────────────────────────────────────────────

    def list_services(self) -> list[str]:
        return [name for name, wl_type in self._workloads() if wl_type not in JOB_TYPES]

    def list_jobs(self) -> list[str]:
        return [name for name, wl_type in self._workloads() if wl_type in JOB_TYPES]

    def _workloads(self) -> list[tuple[str, str]]:
        found: list[tuple[str, str]] = []
        if not self.path.is_dir():
            return found
        for child in sorted(self.path.iterdir()):
            if not child.is_dir() or child.name == PIPELINES_DIR:
                continue
            manifest = child / MANIFEST_FILE
            if not manifest.is_file():
                continue
            data = _read_yaml(manifest)
            found.append((child.name, str(data.get("type", ""))))
        return found


def _read_yaml(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ManifestNotFoundError(path.name) from e
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValidationError(f"invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"expected a YAML mapping in {path}, got {type(data).__name__}")
    return data
