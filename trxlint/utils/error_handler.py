"""Turn unexpected command failures into click errors with a logged traceback."""

import traceback
from collections.abc import Callable
from datetime import datetime
from functools import wraps
from typing import Any

import click

from trxlint.utils.logging import logger

from .constants import ERROR_LOG_FILE, STATE_DIR


def _append_error_log(command: str, exc: Exception) -> None:
    STATE_DIR.mkdir(parents=True, exist_ok=True)
    with open(ERROR_LOG_FILE, "a", encoding="utf-8") as f:
        f.write(f"[{datetime.now().isoformat()}] trxlint {command}: {type(exc).__name__}: {exc}\n")
        f.write(traceback.format_exc())
        f.write("\n")


def handle_exceptions(func: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a click command so crashes end as ``ClickException`` (exit 1).

    Click's own exceptions and ``sys.exit`` pass through untouched, so
    commands keep control of their exit codes.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except Exception as e:
            logger.opt(exception=True).error("trxlint {cmd} failed: {err}", cmd=func.__name__, err=str(e))
            _append_error_log(func.__name__, e)
            raise click.ClickException(
                f"{type(e).__name__}: {e}\n\nTraceback written to {ERROR_LOG_FILE}"
            ) from e

    return wrapper
