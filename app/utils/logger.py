import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

# Empty LOG_DIR turns off file logging (console only)
DEFAULT_LOG_DIR = os.getenv("LOG_DIR", "logs")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(
    module_name: str,
    log_dir: Optional[str] = DEFAULT_LOG_DIR,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Create and return a logger for the given module.
    Each module gets its own log file named <module_name>.log.

    Args:
        module_name (str): Name of the module (used for logger and filename)
        log_dir (str): Directory to store log files, falsy for console only
        level (int): Logging level (default INFO)

    Returns:
        logging.Logger
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(level)

    # Prevent adding multiple handlers if the function is called multiple times
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_path = os.path.join(log_dir, f"{module_name}.log")
            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=5*1024*1024,  # 5 MB
                backupCount=5
            )
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    return logger
