"""appctl — application pipeline deployment and teardown."""

__version__ = "0.1.0"
