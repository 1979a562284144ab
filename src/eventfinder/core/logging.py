"""
Logging configuration.

Handlers and formatters come from the packaged `logging.yaml`. One level, taken
from the caller (CLI `--log-level`) or from `app.log_level` in settings, is applied
to the root logger and every handler; per-library levels in the YAML (e.g. `httpx`)
are left alone.
"""

from __future__ import annotations

import logging.config

from eventfinder.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> str:
    """Apply the logging config and return the effective level name."""
    effective = (level or get_settings().app.log_level).upper()
    if not isinstance(logging.getLevelName(effective), int):
        raise ValueError(f"Unknown log level '{effective}'")

    config = dict(get_logging_config())
    config["root"] = {**config.get("root", {}), "level": effective}
    config["handlers"] = {
        name: {**handler, "level": effective} for name, handler in config.get("handlers", {}).items()
    }
    logging.config.dictConfig(config)
    return effective
