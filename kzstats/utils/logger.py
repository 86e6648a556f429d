import logging
import sys
from datetime import datetime
from pathlib import Path

from kzstats.config import Config

def setup_logger(name: str) -> logging.Logger:
    """Setup a logger with consistent formatting"""

    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    # Set log level based on debug setting
    log_level = logging.DEBUG if Config.DEBUG else getattr(logging, Config.LOG_LEVEL, logging.INFO)
    logger.setLevel(log_level)
    logger.propagate = False

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (disabled with an empty LOG_DIR)
    if Config.LOG_DIR:
        log_dir = Path(Config.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_dir / f'kzstats_{datetime.now().strftime("%Y%m%d")}.log',
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
