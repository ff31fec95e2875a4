from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

LOG_DIR_NAME = "excerpt-overlay"
LOG_FILENAME = "excerpt-overlay.log"
LOG_DIR_ENV_VAR = "EXCERPT_OVERLAY_LOG_DIR"
PROPAGATE_ENV_VAR = "EXCERPT_OVERLAY_PROPAGATE_LOGS"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAX_LOG_BYTES = 512 * 1024


def log_dir_candidates() -> List[Path]:
    """Directories tried for the log file, most specific first."""
    candidates: List[Path] = []
    override = os.environ.get(LOG_DIR_ENV_VAR)
    if override:
        candidates.append(Path(override).expanduser())
    state_home = os.environ.get("XDG_STATE_HOME")
    candidates.append(Path(state_home) if state_home else Path.home() / ".local" / "state")
    candidates.append(Path(tempfile.gettempdir()))
    return [base / LOG_DIR_NAME for base in candidates]


def resolve_logs_dir() -> Path:
    """Return the first candidate directory that exists or can be created."""
    candidates = log_dir_candidates()
    for target in candidates[:-1]:
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return target
    fallback = candidates[-1]
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def propagation_requested() -> bool:
    return os.environ.get(PROPAGATE_ENV_VAR, "").lower() in {"1", "true", "yes", "on"}


class ExcerptLogHandler(RotatingFileHandler):
    """Rotating file handler marked so ``configure_logger`` can replace it."""


def configure_logger(
    logger: logging.Logger,
    *,
    debug_enabled: bool,
    log_dir: Optional[Path] = None,
    retention: int = 5,
) -> logging.Handler:
    """Route ``logger`` to the rotating excerpt log and apply level and propagation.

    ``retention`` counts the live file plus its backups, so 1 keeps no
    backups. Calling this again swaps the previous handler out instead of
    writing every record twice.
    """
    target_dir = log_dir if log_dir is not None else resolve_logs_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    handler = ExcerptLogHandler(
        target_dir / LOG_FILENAME,
        maxBytes=MAX_LOG_BYTES,
        backupCount=max(0, retention - 1),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for previous in [h for h in logger.handlers if isinstance(h, ExcerptLogHandler)]:
        logger.removeHandler(previous)
        previous.close()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug_enabled else logging.INFO)
    logger.propagate = propagation_requested()
    return handler
