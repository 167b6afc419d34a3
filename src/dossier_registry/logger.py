"""
Logging setup shared by the package.

Modules obtain their logger with:

    from dossier_registry.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys

from dossier_registry.settings import settings


def _build_handler() -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    return handler


def _configure_root_logger() -> None:
    root = logging.getLogger()
    if root.handlers:
        # Already configured, e.g. by pytest or streamlit.
        return

    root.setLevel(settings.log_level.upper())
    root.addHandler(_build_handler())
    logging.getLogger("httpx").setLevel(logging.WARNING)


_configure_root_logger()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
