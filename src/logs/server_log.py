import logging
import sys
from pathlib import Path

from src.core import get_settings


def get_log_dir() -> Path:
    """Directory for log files, LOG_DIR or the logs package itself"""
    configured = get_settings().LOG_DIR
    log_dir = Path(configured) if configured else Path(__file__).parent
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


# Request log to file and console
def setup_logging():
    logger = logging.getLogger("api_logger")
    logger.setLevel(logging.INFO)

    if logger.handlers:
        return logger

    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(get_log_dir() / "api_requests.log", encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


api_logger = setup_logging()
