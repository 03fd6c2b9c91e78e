import logging

import logging_loki

from src.utils.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(application: str, level: int = logging.INFO) -> logging.Logger:
    """Configure the root logger for one service and return the service logger.

    A Loki handler is attached when LOKI_URL is configured, console output otherwise
    goes through the default stream handler.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(stream_handler)

    if settings.LOKI_URL and not any(isinstance(h, logging_loki.LokiHandler) for h in root_logger.handlers):
        loki_handler = logging_loki.LokiHandler(
            url=settings.LOKI_URL,
            tags={"application": application, "environment": settings.ENVIRONMENT, "job_name": application},
            version="1",
        )
        root_logger.addHandler(loki_handler)

    logger = logging.getLogger(application)
    logger.setLevel(level)
    return logger
