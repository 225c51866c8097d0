"""
Runtime settings — resolved once per CLI invocation.

Precedence: CLI flag > APPCTL_* environment variable > default.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel

DEFAULT_REGION = "us-west-2"
DEFAULT_STATE_DIR = ".appctl"


class Settings(BaseModel):
    """Where the local backend keeps its state and which region it targets."""

    region: str = DEFAULT_REGION
    state_dir: Path = Path(DEFAULT_STATE_DIR)
    log_level: str = "WARNING"
    log_file: str | None = None
    log_file_level: str | None = None

    @classmethod
    def from_env(cls, region: str | None = None, state_dir: str | None = None) -> Settings:
        """Build settings from the environment, with explicit overrides on top."""
        env = os.environ
        return cls(
            region=region or env.get("APPCTL_REGION") or DEFAULT_REGION,
            state_dir=Path(state_dir or env.get("APPCTL_STATE_DIR") or DEFAULT_STATE_DIR),
            log_level=env.get("APPCTL_LOG_LEVEL", "WARNING"),
            log_file=env.get("APPCTL_LOG_FILE"),
            log_file_level=env.get("APPCTL_LOG_FILE_LEVEL"),
        )

    @property
    def state_file(self) -> Path:
        return self.state_dir / "state.json"
