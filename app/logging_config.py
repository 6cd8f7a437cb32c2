import logging.config

from app.config import settings


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
            },
        },
        "loggers": {
            "app": {"handlers": ["console"], "level": level, "propagate": False},
            "uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """Install the console logging config; called once from the app lifespan."""
    logging.config.dictConfig(build_logging_config((level or settings.LOG_LEVEL).upper()))
