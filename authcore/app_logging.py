import logging
from pythonjsonlogger import jsonlogger

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def setup_logger(level: int = logging.INFO) -> logging.Logger:
    """Send JSON-formatted records from all loggers to stderr."""
    logHandler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(FORMAT,
                                         rename_fields={'levelname': 'level',
                                                        'asctime': 'timestamp'})
    logHandler.setFormatter(formatter)
    logger = logging.getLogger()
    # Calling this twice must not duplicate output.
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, jsonlogger.JsonFormatter):
            logger.removeHandler(handler)
    logger.addHandler(logHandler)
    logger.setLevel(level)
    return logger
