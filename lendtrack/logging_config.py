import logging.config

from lendtrack.config import settings


def configure_logging(level: str | None = None) -> None:
    """Jednotné nastavení logování pro aplikaci i seed skript."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "lendtrack": {
                "handlers": ["console"],
                "level": level or settings.LOG_LEVEL,
                "propagate": False,
            },
        },
    })
