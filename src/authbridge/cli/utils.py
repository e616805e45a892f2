"""Shared helpers for authbridge commands: logging setup and result/error output."""

import json
import logging
import os
import traceback
from typing import Any

import click

from authbridge.auth.contracts import AuthError, UpstreamError

DEBUG_ENV_VAR = "AUTHBRIDGE_DEBUG"
LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def debug_from_env() -> bool:
    """True when $AUTHBRIDGE_DEBUG holds 1/true/yes/on (any case)."""
    return os.environ.get(DEBUG_ENV_VAR, "").strip().lower() in _TRUTHY


def configure_logging(debug: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    `--debug` or $AUTHBRIDGE_DEBUG selects DEBUG, otherwise INFO. httpx logs
    every request at INFO, so it stays at WARNING unless debugging.
    """
    debug = debug or debug_from_env()
    level = logging.DEBUG if debug else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)


def describe_error(error: Exception, debug: bool = False) -> dict[str, Any]:
    """Turn an exception into the fields printed by `output_error`.

    Login errors contribute their machine `reason`, and upstream failures the
    provider's HTTP status when one was received.
    """
    if isinstance(error, AuthError):
        info: dict[str, Any] = {"error": error.description, "reason": error.reason}
        if isinstance(error, UpstreamError) and error.status_code is not None:
            info["upstream_status"] = error.status_code
    else:
        info = {"error": str(error) or error.__class__.__name__}

    if debug:
        info["type"] = error.__class__.__name__
        info["traceback"] = traceback.format_exc()
    return info


def output_result(result: Any, json_output: bool = False) -> None:
    """Print a command result.

    JSON mode wraps it as `{"status": "ok", "result": ...}`. Otherwise a list
    prints one line per item and anything else is echoed as is.
    """
    if json_output:
        click.echo(json.dumps({"status": "ok", "result": result}, indent=2, default=str))
        return
    for line in result if isinstance(result, list) else [result]:
        click.echo(line)


def output_error(error: Exception, json_output: bool = False, debug: bool = False) -> None:
    """Print an error, then abort the command with a non-zero exit code."""
    info = describe_error(error, debug)

    if json_output:
        click.echo(json.dumps({"status": "error", **info}, indent=2))
    else:
        reason = f" [{info['reason']}]" if "reason" in info else ""
        click.echo(f"Error: {info['error']}{reason}", err=True)
        if "traceback" in info:
            click.echo(f"\nTraceback:\n{info['traceback']}", err=True)

    raise click.Abort()
