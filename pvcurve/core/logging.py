"""Structured JSON logging for batch PV model runs."""

from __future__ import annotations

import logging
from typing import Any

from pvcurve.config import settings

# Numeric context attached by the solar modules via ``extra=...``
_EXTRA_FIELDS = (
    "n_elements",
    "n_nonconverged",
    "n_overflow",
    "p_ac_total_w",
)


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter carrying model run context."""

    def format(self, record: logging.LogRecord) -> str:
        import json

        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Include extra fields
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val

        return json.dumps(log_entry)


def setup_logging(json_format: bool | None = None, level: str | None = None) -> None:
    """Configure root logger.

    Arguments left as ``None`` fall back to :data:`pvcurve.config.settings`
    (``PVCURVE_LOG_JSON`` / ``PVCURVE_LOG_LEVEL``).
    """
    if json_format is None:
        json_format = settings.log_json
    if level is None:
        level = settings.log_level

    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler()
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    # Remove existing handlers to avoid duplicates
    root.handlers.clear()
    root.addHandler(handler)
