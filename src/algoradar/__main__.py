"""Serve the contests API with uvicorn."""

from __future__ import annotations

import logging

import uvicorn

from algoradar.config import get_settings
from algoradar.utils.logger import get_logger, set_level


def _log_level(name: str) -> int:
    level = getattr(logging, name.upper(), None)
    return level if isinstance(level, int) else logging.INFO


def main() -> None:
    settings = get_settings()
    level = _log_level(settings.log_level)
    set_level(level)
    logger = get_logger("algoradar")
    logger.info("Starting AlgoRadar API on %s:%s", settings.host, settings.port)
    uvicorn.run(
        "algoradar.api:app",
        host=settings.host,
        port=settings.port,
        log_level=logging.getLevelName(level).lower(),
    )


if __name__ == "__main__":
    main()
