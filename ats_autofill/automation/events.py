"""Structured event logging for automation steps.

Every component that reports progress receives an ``EventLogger`` instance
instead of reaching for a module-level logger, so tests can hand in their own
and inspect what was emitted.
"""

import logging
from typing import Any

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | int = "INFO") -> None:
    """Install the default console format for the whole process."""
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)


def format_meta(meta: dict[str, Any]) -> str:
    """Render metadata as `` k=v k2=v2``, skipping None values."""
    parts = [f"{key}={value}" for key, value in meta.items() if value is not None]
    return " " + " ".join(parts) if parts else ""


class EventLogger:
    """Write-only sink for ``{level, platform, step, message, meta}`` events.

    Entries are forwarded to a stdlib logger; the structured fields are also
    attached to the record as ``platform``, ``step`` and ``meta`` attributes.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("ats_autofill.events")

    def log(
        self,
        level: int,
        platform: str,
        step: str,
        message: str,
        /,
        **meta: Any,
    ) -> None:
        """Emit one event.

        The leading arguments are positional-only so any keyword, including
        ``platform``, can be passed as metadata.
        """
        if not self._logger.isEnabledFor(level):
            return
        clean = {k: v for k, v in meta.items() if v is not None}
        self._logger.log(
            level,
            f"[{platform}] [{step}] {message}{format_meta(clean)}",
            extra={"platform": platform, "step": step, "meta": clean},
        )

    def info(self, platform: str, step: str, message: str, /, **meta: Any) -> None:
        self.log(logging.INFO, platform, step, message, **meta)

    def warning(self, platform: str, step: str, message: str, /, **meta: Any) -> None:
        self.log(logging.WARNING, platform, step, message, **meta)

    def error(self, platform: str, step: str, message: str, /, **meta: Any) -> None:
        self.log(logging.ERROR, platform, step, message, **meta)
