"""
Logging setup for portgraph.

Every module logs through ``logging.getLogger(__name__)``, so all records land
under the ``portgraph`` logger. configure_logging() attaches one stream handler
there; calling it again only changes the level.
"""
from __future__ import annotations

import logging
import sys
from typing import Union

ROOT_LOGGER_NAME = "portgraph"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)-5s %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = level.upper()
    root.setLevel(level)

    if not any(getattr(h, "_portgraph_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._portgraph_handler = True
        root.addHandler(handler)

    return root
