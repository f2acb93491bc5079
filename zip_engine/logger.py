"""Logging setup for the CLI and the HTTP API."""

import logging

FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=FORMAT, datefmt="%H:%M:%S", force=True)


def get_logger(name: str = "zip_engine") -> logging.Logger:
    return logging.getLogger(name)
