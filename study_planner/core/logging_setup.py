import logging
import sys
from typing import Any, Dict, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def setup_basic_logging():
    """Setup basic stdout logging before config is loaded"""
    root_logger = logging.getLogger()
    if not root_logger.handlers:  # Only add handler if none exists
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)
        root_logger.setLevel(logging.DEBUG)
        logging.debug("Basic logging initialized")


def setup_logging(logging_config: Optional[Dict[str, Any]] = None) -> None:
    """Configure logging to write to stdout and, when logging.file is set, to a file"""
    logging_config = logging_config or {}
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    level_name = str(logging_config.get("level", "INFO")).upper()
    root_logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT)

    log_file = logging_config.get("file")
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.info(f"Study planner logging configured (level={level_name})")
