"""CLI utilities."""

from __future__ import annotations

import functools
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click

from readgate.config.loader import load_config
from readgate.config.models import ReadGateConfig
from readgate.core.errors import ReadGateError
from readgate.core.logging import get_log_file_path, get_logger
from readgate.core.paths import RAG_DIR_NAME
from readgate.optimizer.engine import DecisionEngine

P = ParamSpec("P")
R = TypeVar("R")

log = get_logger("cli")


def find_repo_root(start_path: Path | None = None) -> Path:
    """Find the repository root from the given path.

    Walks up the directory tree looking for a .rag state directory or a .git
    directory. Falls back to the starting directory when neither is found.
    """
    start = (start_path or Path.cwd()).resolve()
    current = start
    while True:
        if (current / RAG_DIR_NAME).is_dir() or (current / ".git").exists():
            return current
        if current == current.parent:
            return start
        current = current.parent


def get_config(ctx: click.Context) -> ReadGateConfig:
    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        obj["config"] = load_config(get_root(ctx))
    return obj["config"]  # type: ignore[no-any-return]


def get_root(ctx: click.Context) -> Path:
    obj = ctx.ensure_object(dict)
    if "root" not in obj:
        obj["root"] = find_repo_root()
    return obj["root"]  # type: ignore[no-any-return]


def get_engine(ctx: click.Context) -> DecisionEngine:
    obj = ctx.ensure_object(dict)
    if "engine" not in obj:
        obj["engine"] = DecisionEngine(get_root(ctx), get_config(ctx))
    return obj["engine"]  # type: ignore[no-any-return]


def handle_errors(func: Callable[P, R]) -> Callable[P, R]:
    """Turn ReadGateError into a ClickException (exit code 1).

    The message points at the log file when one is configured.
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except ReadGateError as e:
            log.debug("command_failed", error=e.error_name, details=e.details)
            message = str(e)
            if log_file := get_log_file_path():
                message = f"{message} (see {log_file} for details)"
            raise click.ClickException(message) from e

    return wrapper


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))
