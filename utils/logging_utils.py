import logging

import structlog
from structlog.stdlib import add_log_level, add_logger_name

from goap.config import GoapConfig


def setup_logging(
    level: int = logging.INFO, colors: bool = True, renderer: str = "console"
) -> None:
    """Configure structlog and standard logging with the given level.

    ``renderer`` is ``"console"`` for human-readable output or ``"json"`` for
    one JSON object per line.
    """
    logging.basicConfig(level=level, format="%(message)s")
    processors = [
        structlog.contextvars.merge_contextvars,
        add_logger_name,
        add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=False),
    ]
    if renderer == "json":
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colors))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging_from_config(config: GoapConfig) -> None:
    setup_logging(
        level=config.log_level_value,
        colors=config.log_colors,
        renderer=config.log_renderer,
    )
