"""Logging configuration using loguru: colored console or structured JSON."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from omegaconf import DictConfig


# ---------------------------------------------------------------------------
# Intercept stdlib logging → loguru
# ---------------------------------------------------------------------------

class _InterceptHandler(logging.Handler):
    """Route standard-library log records (uvicorn, hydra) through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno  # type: ignore[assignment]

        # Walk out of the logging module so loguru reports the real caller.
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


#: Stage label for records logged outside a quote stage.
NO_STAGE = "-"

_PRETTY_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[stage]: <12}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(cfg: DictConfig) -> None:
    """Configure loguru from the ``logging`` config section.

    Parameters
    ----------
    cfg:
        Section with keys ``level``, ``colored`` and ``format``. ``format``
        is ``"pretty"`` for colored console lines or ``"structured"`` for
        JSON lines. Records carry the quote stage they were logged from
        (``validation``, ``pricing``, ``discounts``, ``underwriting``)
        in ``extra["stage"]``, or ``"-"`` outside the pipeline.
    """
    logger.remove()
    logger.configure(extra={"stage": NO_STAGE})

    level: str = getattr(cfg, "level", "INFO").upper()
    use_json: bool = getattr(cfg, "format", "pretty") == "structured"
    colorize: bool = getattr(cfg, "colored", True)

    if use_json:
        logger.add(sys.stderr, level=level, serialize=True, colorize=False)
    else:
        logger.add(sys.stderr, level=level, format=_PRETTY_FORMAT, colorize=colorize)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    for noisy in ("httpx", "httpcore", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.info("Logging configured (level={level}, json={json_mode})", level=level, json_mode=use_json)
