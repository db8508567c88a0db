from __future__ import annotations

import logging

LOG_FORMAT = "[timewise] %(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger(__name__.rsplit(".", 2)[0]).setLevel(level)
