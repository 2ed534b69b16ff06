"""
Logging configuration.

We use a YAML logging config (`src/gruenfinder/config/logging.yaml`) and then apply
runtime overrides from settings (e.g., `GRUENFINDER_LOG_LEVEL`).
"""

from __future__ import annotations

import logging.config

from gruenfinder.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure the Python logging system from the packaged YAML config + settings.

    An explicit `level` (e.g. from `--verbose`) wins over the configured one.
    """
    config = dict(get_logging_config())
    level = (level or get_settings().app.log_level).upper()

    config["root"] = {**config.get("root", {}), "level": level}
    handlers = {name: dict(h) for name, h in config.get("handlers", {}).items()}
    for handler in handlers.values():
        if "level" in handler:
            handler["level"] = level
    config["handlers"] = handlers

    logging.config.dictConfig(config)
