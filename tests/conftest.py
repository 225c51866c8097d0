"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from appctl.core.models.application import Application, Environment


@pytest.fixture
def mocks() -> MagicMock:
    """One parent mock for every collaborator.

    Attach collaborators as children (``mocks.store``, ``mocks.deployer``,
    ``mocks.progress``, ...) so ``mocks.mock_calls`` records the order in
    which a workflow touched them.
    """
    return MagicMock()


@pytest.fixture
def app() -> Application:
    return Application(name="badgoose", account_id="123456789012", domain="example.com")


@pytest.fixture
def environments() -> dict[str, Environment]:
    return {
        "chicken": Environment(name="chicken", app="badgoose", region="us-west-2",
                               account_id="123456789012", prod=False),
        "wings": Environment(name="wings", app="badgoose", region="us-east-1",
                             account_id="210987654321", prod=True),
    }


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """A project directory with a ``deploy/`` workspace bound to badgoose."""
    ws = tmp_path / "deploy"
    ws.mkdir()
    (ws / ".workspace").write_text("application: badgoose\n")
    (ws / "pipeline.yml").write_text(textwrap.dedent("""\
        name: pipepiper
        version: 1
        source:
          provider: GitHub
          properties:
            repository: badgoose/repo
            access_token_secret: github-token-badgoose-repo
            branch: main
        stages:
          - name: chicken
            test_commands: [make test, echo "made test"]
          - name: wings
            requires_approval: true
    """))
    for name, wl_type in (("frontend", "Load Balanced Web Service"),
                          ("backend", "Backend Service"),
                          ("report", "Scheduled Job")):
        (ws / name).mkdir()
        (ws / name / "manifest.yml").write_text(f"name: {name}\ntype: {wl_type}\n")
    return tmp_path
