"""
Logging setup shared by the demo and batch entry points.
"""

import logging
import os
import sys

LOG_LEVEL_ENV = 'PATTERN_BACKTESTER_LOG_LEVEL'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_logging(level: str = None) -> logging.Logger:
    """Set up logging configuration"""
    level_name = (level or os.getenv(LOG_LEVEL_ENV, 'INFO')).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger('pattern_backtester')
    logger.setLevel(log_level)
    logger.info(f"Logging configured at {level_name} level")
    return logger
