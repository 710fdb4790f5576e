# Treeshell CLI Framework — (c) 2025 rtj.dev LLC — MIT Licensed
"""utils.py"""
from __future__ import annotations

import functools
import inspect
import logging
import os
import shlex
from typing import Any, Awaitable, Callable, TypeVar

import pythonjsonlogger.json
from rich.logging import RichHandler

T = TypeVar("T")

_CONTAINER_MARKERS = ("docker", "kubepods", "containerd", "podman")
_JSON_LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def split_line(line: str) -> list[str]:
    """
    Split a raw input line into shell-like words.

    Raises:
        ValueError: If the line has unbalanced quotes or a dangling escape.
    """
    return shlex.split(line)


def is_coroutine(function: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(function)


def ensure_async(function: Callable[..., T]) -> Callable[..., Awaitable[T]]:
    """Wrap a plain callable so it can be awaited like a coroutine function."""
    if not callable(function):
        raise TypeError(f"{function} is not callable")
    if is_coroutine(function):
        return function  # type: ignore

    @functools.wraps(function)
    async def async_wrapper(*args, **kwargs) -> T:
        return function(*args, **kwargs)

    return async_wrapper


def running_in_container() -> bool:
    """Guess from PID 1's cgroups whether we run inside a container."""
    try:
        with open("/proc/1/cgroup", "r", encoding="UTF-8") as cgroup_file:
            cgroups = cgroup_file.read()
    except OSError:
        return False
    return any(marker in cgroups for marker in _CONTAINER_MARKERS)


def _console_handler(mode: str) -> logging.Handler:
    if mode == "cli":
        return RichHandler(
            rich_tracebacks=True,
            show_path=False,
            markup=False,
            log_time_format="[%X]",
        )
    if mode == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(pythonjsonlogger.json.JsonFormatter(_JSON_LOG_FORMAT))
        return handler
    raise ValueError(f"Invalid log mode: {mode}")


def _file_handler(filename: str, as_json: bool) -> logging.Handler:
    handler = logging.FileHandler(filename, "a", "UTF-8")
    if as_json:
        handler.setFormatter(pythonjsonlogger.json.JsonFormatter(_JSON_LOG_FORMAT))
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    return handler


def setup_logging(
    mode: str | None = None,
    log_filename: str | None = "treeshell.log",
    json_log_to_file: bool = False,
    file_log_level: int = logging.DEBUG,
    console_log_level: int = logging.WARNING,
) -> None:
    """
    Route Treeshell logs to the console and, optionally, a log file.

    Args:
        mode (str | None): "cli" for Rich formatted console logs, "json" for one
            JSON object per line. Falls back to `TREESHELL_LOG_MODE`, then to
            "json" inside containers and "cli" everywhere else.
        log_filename (str | None): Log file path, or None/"" to skip the file.
        json_log_to_file (bool): Write JSON lines to the file instead of text.
        file_log_level (int): Threshold for the file handler.
        console_log_level (int): Threshold for the console handler.

    Raises:
        ValueError: If `mode` is not "cli" or "json".
    """
    mode = mode or os.getenv("TREESHELL_LOG_MODE")
    if not mode:
        mode = "json" if running_in_container() else "cli"
    console_handler = _console_handler(mode)
    console_handler.setLevel(console_log_level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)
    root.addHandler(console_handler)

    if log_filename:
        file_handler = _file_handler(log_filename, json_log_to_file)
        file_handler.setLevel(file_log_level)
        root.addHandler(file_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("treeshell").debug("Logging initialized in '%s' mode.", mode)
