"""
Structured logging via structlog.

One shared processor chain feeds either a coloured console renderer
(development) or a JSON renderer (production). Stdlib logging used by
uvicorn and httpx is routed through the same formatter.
"""
import logging
import sys

import structlog

_LEVELS = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'error': logging.ERROR,
}


def configure_logging(log_level: str = 'info', json_output: bool = False) -> None:
    """
    Configure structlog and bridge the stdlib root logger into it.

    :param log_level: one of debug, info, warn, error.
    :param json_output: render JSON lines instead of console output.
    """
    level = _LEVELS.get(log_level.lower(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt='iso'),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # httpx logs full request URLs, api_key included, at INFO.
    logging.getLogger('httpx').setLevel(logging.WARNING)


def get_logger(name: str):
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)
