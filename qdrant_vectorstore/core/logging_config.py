import logging
import os
import sys
from logging.config import dictConfig

from pythonjsonlogger.json import JsonFormatter as BaseJsonFormatter

from .config import get_settings


class JsonFormatter(BaseJsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super(JsonFormatter, self).add_fields(log_record, record, message_dict)
        if not log_record.get("timestamp"):
            log_record["timestamp"] = record.created
        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname


def setup_logging():
    """Configure logging for the vector store and the Qdrant client.

    Console logging is always enabled. JSON file logging is added when
    ``log_file_enabled`` is set; if the file handler cannot be configured
    (e.g. permission denied on the log directory), the configuration
    degrades to console-only logging instead of failing.
    """
    settings = get_settings()
    log_level = "DEBUG" if settings.debug else "INFO"

    log_dir = settings.log_dir
    log_file_path = os.path.join(log_dir, settings.log_file_name)
    handlers = ["console"]

    if settings.log_file_enabled:
        handlers.append("file")
        try:
            os.makedirs(log_dir, exist_ok=True)
        except Exception as e:  # pragma: no cover - extremely rare
            print(
                f"[logging] Unable to create log directory '{log_dir}': {e}",
                file=sys.stderr,
            )

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(levelname)-8s %(asctime)s | %(name)s:%(lineno)d | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": JsonFormatter,
                "format": "%(timestamp)s %(level)s %(name)s %(message)s %(lineno)d",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "qdrant_vectorstore": {
                "handlers": list(handlers),
                "level": log_level,
                "propagate": False,
            },
            "qdrant_client": {
                "handlers": list(handlers),
                "level": "WARNING",
                "propagate": False,
            },
        },
        "root": {
            "handlers": list(handlers),
            "level": log_level,
        },
    }

    if settings.log_file_enabled:
        logging_config["handlers"]["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "formatter": "json",
            "filename": log_file_path,
            "when": "midnight",
            "interval": 1,
            "backupCount": 30,
            "encoding": "utf-8",
        }

    try:
        dictConfig(logging_config)
    except Exception as e:
        if not settings.log_file_enabled:
            raise
        # Remove file handler and retry with console-only.
        for logger_name in list(logging_config.get("loggers", {}).keys()):
            logger_handlers = logging_config["loggers"][logger_name].get("handlers", [])
            logging_config["loggers"][logger_name]["handlers"] = [
                h for h in logger_handlers if h != "file"
            ]
        logging_config["root"]["handlers"] = [
            h for h in logging_config["root"]["handlers"] if h != "file"
        ]
        logging_config["handlers"].pop("file", None)
        dictConfig(logging_config)
        logging.getLogger(__name__).warning(
            "File logging disabled; falling back to console only (%s)", e
        )
