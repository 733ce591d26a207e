from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional
from colorlog import ColoredFormatter

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "white",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def get_logger(name: str,
               log_dir: Optional[Path] = None,
               level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(f"subject_blur.{name}")
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        # Console handler (colored)
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(ColoredFormatter(
            "%(log_color)s%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%H:%M:%S",
            log_colors=LOG_COLORS,
        ))
        logger.addHandler(ch)

    # File handler (plain), attached once per log dir
    if log_dir is not None:
        log_path = (log_dir / "run.log").resolve()
        has_file = any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_path
            for h in logger.handlers
        )
        if not has_file:
            log_dir.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_path, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
            logger.addHandler(fh)

    return logger
