import logging
import logging.config
import os
import sys
from pathlib import Path

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def build_logging_config(log_file: Path, level: str = LOG_LEVEL) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-6s %(name)8s:%(lineno)d %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stdout,
            },
            "file": {
                "class": "logging.FileHandler",
                "formatter": "default",
                "filename": str(log_file),
                "mode": "a",
                "encoding": "utf-8",
            },
        },
        "loggers": {
            "batchsend": {
                "level": level,
                "handlers": ["console", "file"],
                "propagate": False,  # Don't pass 'batchsend' logs up to the root logger
            },
            # Shut the log levels for libraries up
            "web3": {
                "level": "WARNING",
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "urllib3": {
                "level": "WARNING",
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "aiohttp": {
                "level": "WARNING",
                "handlers": ["console", "file"],
                "propagate": False,
            },
        },
        # Default for all other loggers
        "root": {
            "level": "WARNING",
            "handlers": ["console", "file"],
        },
    }


def setup_logging(log_file: Path, level: str = LOG_LEVEL) -> None:
    """ Apply the logging configuration. """
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_file, level))
    os.environ.setdefault("PYTHONUNBUFFERED", "1")
