"""
Logging configuration for the appctl CLI.

``configure_cli_logging`` runs once per invocation from ``appctl.main``;
modules only ever do ``logger = logging.getLogger(__name__)``.

Console level:
    --debug  >  --verbose  >  --quiet  >  APPCTL_LOG_LEVEL  >  WARNING

The console is stderr, which keeps ``--json`` output on stdout clean.
Deploy and teardown steps log one line each at INFO (``✓ app-delete:
delete-services``), so ``-v`` traces how far a workflow got. A log file
(APPCTL_LOG_FILE) always gets the detailed format and may sit at its
own level (APPCTL_LOG_FILE_LEVEL).
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from appctl.core.config.settings import Settings

_DETAILED = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"

# Console format per level, first threshold the level falls under wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, _DETAILED, "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
)
_CONSOLE_DEFAULT = "%(message)s"

_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Libraries that may appear under a cloud-backed deployer
_NOISY_LOGGERS = ("urllib3", "botocore", "charset_normalizer")


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console log level from CLI flags and the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def configure_cli_logging(
    settings: Settings,
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> str:
    """Set up logging for one CLI invocation. Returns the console level."""
    level = resolve_level(debug, verbose, quiet, settings.log_level)
    setup_logging(
        level=level,
        log_file=settings.log_file,
        log_file_level=settings.log_file_level,
        quiet_third_party=not debug,
    )
    return level


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Replace the root logger's handlers with appctl's.

    Args:
        level: Console level name.
        log_file: Optional log file; parent directories are created.
        log_file_level: File level name (default: same as ``level``).
        quiet_third_party: Hold ``_NOISY_LOGGERS`` at WARNING unless the
            console is at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(Path(log_file), file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # The root must let through whatever the most verbose handler wants
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = _CONSOLE_DEFAULT, None
    for threshold, threshold_fmt, threshold_datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            fmt, datefmt = threshold_fmt, threshold_datefmt
            break

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_DETAILED, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown or empty names mean WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
