import os

from loguru import logger

_logger_initialized = False
_sink_ids: list[int] = []

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[component]} | {message}"


def setup_logger(
    log_level: str = "INFO",
    log_path: str | None = "/data/logs/pageflow.log",
    component: str = "engine",
):
    global _logger_initialized, _sink_ids

    if not _logger_initialized:
        logger.remove()
        logger.configure(extra={"component": component})

        sinks = []
        if log_path:
            os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
            sinks.append(
                logger.add(
                    log_path,
                    rotation="10 MB",
                    retention="7 days",
                    level=log_level,
                    format=LOG_FORMAT,
                    enqueue=True,
                )
            )
        sinks.append(
            logger.add(
                lambda msg: print(msg, end=""),
                colorize=True,
                level=log_level,
                format=LOG_FORMAT,
            )
        )

        _sink_ids = sinks
        _logger_initialized = True

    return logger.bind(component=component)
