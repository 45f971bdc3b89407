"""Settings from environment variables (a .env file is loaded by the CLI)."""

import logging
import os
from dataclasses import dataclass

DEFAULT_SOURCE_EXTENSIONS = ("js", "ts", "py", "java", "cpp", "cs")
DEFAULT_DOC_EXTENSIONS = ("md",)
DEFAULT_EXCLUDE_DIRS = ("node_modules",)
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    root: str = "."
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    doc_extensions: tuple[str, ...] = DEFAULT_DOC_EXTENSIONS
    exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS
    log_level: str = "INFO"


def _split_list(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if raw is None:
        return default
    items = tuple(part.strip() for part in raw.split(",") if part.strip())
    return items or default


def _extensions(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    # ".py" and "py" are the same extension
    return tuple(ext.lstrip(".") for ext in _split_list(raw, default))


def _log_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("Unknown log level %r, using INFO", raw)
        return "INFO"
    return level


def load_settings() -> Settings:
    return Settings(
        root=os.getenv("SNIPPET_SYNC_ROOT", "."),
        source_extensions=_extensions(
            os.getenv("SNIPPET_SYNC_SOURCE_EXTENSIONS"), DEFAULT_SOURCE_EXTENSIONS),
        doc_extensions=_extensions(
            os.getenv("SNIPPET_SYNC_DOC_EXTENSIONS"), DEFAULT_DOC_EXTENSIONS),
        exclude_dirs=_split_list(
            os.getenv("SNIPPET_SYNC_EXCLUDE_DIRS"), DEFAULT_EXCLUDE_DIRS),
        log_level=_log_level(os.getenv("SNIPPET_SYNC_LOG_LEVEL", "INFO")),
    )
