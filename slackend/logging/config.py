"""Centralized logging configuration.

Both command-line entry points (the webhook server and the relay worker)
configure logging through :func:`setup_logging_from_args`, so the
``--log-*`` options behave the same everywhere. An option left off the
command line falls back to the matching ``LOG_LEVEL``, ``LOG_FILE``,
``LOG_DIR`` or ``LOG_FORMAT`` setting.

.. code-block:: python

    parser = argparse.ArgumentParser()
    add_logging_arguments(parser)
    setup_logging_from_args(parser.parse_args(["--log-level", "DEBUG"]))
"""

from __future__ import annotations

import argparse
import logging
import logging.config
import pathlib
from typing import Any, Dict, Final, Optional

from slackend.settings import LogLevel, SettingModel

__all__: list[str] = [
    "DEFAULT_LOG_FORMAT",
    "add_logging_arguments",
    "setup_logging",
    "setup_logging_from_args",
]

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)8s] %(name)s: %(message)s"


def add_logging_arguments(parser: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """Add the shared ``--log-*`` options to an argument parser."""
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=[level.value for level in LogLevel],
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Log file name (default: LOG_FILE); logs go to the console only when unset",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for the log file (default: LOG_DIR or logs)",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        help="Log message format (default: LOG_FORMAT)",
    )
    return parser


def _build_config(level: str, log_file: Optional[str], log_dir: Optional[str], log_format: str) -> Dict[str, Any]:
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
            "level": level,
        }
    }
    if log_file:
        path = pathlib.Path(log_dir or ".") / log_file
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "filename": str(path),
            "encoding": "utf-8",
            "level": level,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": log_format},
        },
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers),
                "level": level,
            },
            # Reduce noise from external libraries
            "botocore": {"level": "WARNING"},
            "urllib3": {"level": "WARNING"},
            "asyncio": {"level": "WARNING"},
        },
    }


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    log_dir: Optional[str] = "logs",
    log_format: Optional[str] = None,
) -> None:
    """Configure the root logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file name, created under ``log_dir``.
        log_dir: Directory for ``log_file``.
        log_format: Format string, defaults to :data:`DEFAULT_LOG_FORMAT`.
    """
    config = _build_config(level.upper(), log_file, log_dir, log_format or DEFAULT_LOG_FORMAT)
    logging.config.dictConfig(config)


def setup_logging_from_args(args: Any, settings: Optional[SettingModel] = None) -> None:
    """Configure logging from parsed CLI options (argparse namespace or options model).

    Options the command line left unset are taken from ``settings``, which
    defaults to a snapshot read from the environment and the ``.env`` file
    named by ``args``.
    """
    if settings is None:
        env_file = None if getattr(args, "no_env_file", False) else getattr(args, "env_file", ".env")
        settings = SettingModel(_env_file=env_file)
    setup_logging(
        level=getattr(args, "log_level", None) or settings.log_level.value,
        log_file=getattr(args, "log_file", None) or settings.log_file,
        log_dir=getattr(args, "log_dir", None) or settings.log_dir,
        log_format=getattr(args, "log_format", None) or settings.log_format,
    )
