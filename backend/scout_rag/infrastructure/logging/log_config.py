"""Logging setup for the API process and the cache generator.

Each level setting in ``Settings`` governs a group of loggers:

    log_level_http      httpx, httpcore
    log_level_uvicorn   uvicorn, uvicorn.access, uvicorn.error
    log_level_pipeline  knowledge base build (services, cache, team store, CLI)
    log_level_jina      Jina embedding client

Usage:
    setup_logging()                                  # FastAPI lifespan
    setup_logging(stream=sys.stdout, plain=True)     # cache generator CLI
"""

import logging
import sys
from typing import TextIO

from scout_rag.config import Settings, get_settings

_SERVER_FORMAT = "%(levelname)-8s %(name)s — %(message)s"
# PipelineLogger lines already carry a stage label and color.
_PLAIN_FORMAT = "%(message)s"

_LOGGER_GROUPS: dict[str, tuple[str, ...]] = {
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_pipeline": (
        "scout_rag.application.services",
        "scout_rag.infrastructure.cache",
        "scout_rag.infrastructure.storage",
        "scout_rag.cli",
    ),
    "log_level_jina": ("scout_rag.infrastructure.jina",),
}


def category_levels(settings: Settings) -> dict[str, int]:
    """Resolve every grouped logger name to its numeric level."""
    levels: dict[str, int] = {}
    for field_name, logger_names in _LOGGER_GROUPS.items():
        level = _parse_level(getattr(settings, field_name))
        for name in logger_names:
            levels[name] = level
    return levels


def setup_logging(stream: TextIO | None = None, *, plain: bool = False) -> dict[str, int]:
    """Apply root and per-group levels; return the per-group levels applied.

    A handler on ``stream`` (stderr by default) is only attached when the
    root logger has none, so uvicorn's and pytest's handlers are left alone.
    """
    settings = get_settings()

    root = logging.getLogger()
    root.setLevel(_parse_level(settings.log_level))
    if not root.handlers:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(logging.Formatter(_PLAIN_FORMAT if plain else _SERVER_FORMAT))
        root.addHandler(handler)

    levels = category_levels(settings)
    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured (root=%s, groups=%s)",
        settings.log_level,
        {field: getattr(settings, field) for field in _LOGGER_GROUPS},
    )
    return levels


def _parse_level(raw: str) -> int:
    """Level name to logging constant; unknown names mean INFO."""
    numeric = logging.getLevelName(raw.strip().upper())
    return numeric if isinstance(numeric, int) else logging.INFO
