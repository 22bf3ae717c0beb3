"""Worker helpers: interrupt handling, configuration lookups and worker kinds."""

import logging
import signal
import sys
import threading
from collections.abc import Mapping
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


def sig_int_handler(flag: threading.Event):
    """Install a SIGINT handler that sets ``flag``; returns the previous handler."""

    def _handle(signum, frame):
        logger.warning("Received interrupt signal. Finishing up...")
        flag.set()

    return signal.signal(signal.SIGINT, _handle)


def check_exit(flag: threading.Event) -> None:
    """Exit the process with status 0 if ``flag`` is set."""
    if flag.is_set():
        sys.exit(0)


def check_flag(flag: threading.Event) -> bool:
    """Return whether ``flag`` is set."""
    return flag.is_set()


def get_check_command_interval(conf: Mapping[str, Any], stream_name: str) -> int:
    """Return ``workers.<stream_name>.command_interval`` from the configuration."""
    try:
        table = conf["workers"]
    except KeyError:
        raise KeyError("worker table not found in config") from None
    if not isinstance(table, Mapping):
        raise ValueError("worker table in config is not a table")
    try:
        stream_table = table[stream_name]
    except KeyError:
        raise KeyError(f"stream name {stream_name} not found in config") from None
    if not isinstance(stream_table, Mapping):
        raise ValueError(f"stream {stream_name} in config is not a table")
    try:
        value = stream_table["command_interval"]
    except KeyError:
        raise KeyError("command_interval not found in config") from None
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"command_interval is not an integer: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"command_interval is not an integer: {value!r}") from None


class WorkerType(Enum):
    """Kind of pipeline worker."""

    ALERT = "Alert"
    FILTER = "Filter"
    ML = "ML"

    def __str__(self) -> str:
        return self.value


class WorkerCmd(Enum):
    """Command sent to a worker."""

    TERM = "TERM"

    def __str__(self) -> str:
        return self.value