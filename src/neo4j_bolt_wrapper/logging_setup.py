import sys
from typing import Any, Optional

from loguru import logger  # type: ignore

from .config import LoggingSettings


def configure_logging(settings: Optional[LoggingSettings] = None) -> list[int]:
    """
    Replace loguru's default sink with the configured console and file sinks.

    Returns:
        The ids of the sinks that were added.
    """
    settings = settings or LoggingSettings()
    logger.remove()
    sink_ids: list[int] = []
    if settings.enable_console:
        sink_ids.append(
            logger.add(
                sys.stderr,
                level=settings.level,
                format=settings.format,
                colorize=True,
            )
        )
    if settings.file_path:
        sink_ids.append(
            logger.add(
                settings.file_path,
                level=settings.level,
                format=settings.format,
                rotation="10 MB",
            )
        )
    logger.debug("Logger configured with level: {}", settings.level)
    return sink_ids


def mask_secret(value: str) -> str:
    """Mask a secret or identifier for logging."""
    if len(value) <= 2:
        return "***"
    return value[:2] + "*" * (len(value) - 2)


def mask_auth(auth: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Copy an auth descriptor with its credentials hidden."""
    if not auth:
        return {}
    masked = dict(auth)
    if "credentials" in masked:
        masked["credentials"] = "***"
    if masked.get("principal"):
        masked["principal"] = mask_secret(str(masked["principal"]))
    return masked
