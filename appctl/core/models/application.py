"""
Application model — the identity records owned by the configuration store.

Applications, environments and workloads are read from the store and
only ever deleted by the teardown workflow. The core never creates them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# Workload kinds recorded in the store
SERVICE_KIND = "service"
JOB_KIND = "job"


class Application(BaseModel):
    """A named collection of environments and workloads."""

    name: str
    account_id: str = ""
    domain: str = ""
    tags: dict[str, str] = Field(default_factory=dict)


class Environment(BaseModel):
    """A deployment target: one application, one region, one account."""

    name: str
    app: str
    region: str = ""
    account_id: str = ""
    prod: bool = False


class Workload(BaseModel):
    """A service or job registered under an application."""

    name: str
    app: str
    type: str = ""                 # e.g. "Load Balanced Web Service"
    kind: str = SERVICE_KIND       # service | job
