"""Logging utilities.

Standard `logging` with one plain format for console and file:

- Console output always.
- `<log_dir>/<run_name>.log` when a log directory is given.

Calling setup again replaces the handlers installed by the previous call.
"""

from __future__ import annotations
import logging
import os
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_HANDLER_TAG = "_license_detect_handler"


def setup_logging(
    level: Union[str, int] = "INFO",
    log_dir: Optional[str] = None,
    run_name: str = "license_detect",
) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root.removeHandler(handler)
            handler.close()

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler()]
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.join(log_dir, f"{run_name}.log"), encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(fmt)
        setattr(handler, _HANDLER_TAG, True)
        root.addHandler(handler)
