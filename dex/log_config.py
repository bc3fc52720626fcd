"""structlog setup shared by the service and scripts."""

import logging

import structlog

from dex.config import DexConfig


def configure_logging(config: DexConfig) -> None:
    """Install structlog processors according to the configuration."""
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {config.log_level}")

    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
