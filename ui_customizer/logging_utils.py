from __future__ import annotations

import logging
import os
import tempfile
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

LOGGER_NAME = "UICustomizer"
ENGINE_LOGGER_NAME = f"{LOGGER_NAME}.Engine"
STORE_LOGGER_NAME = f"{LOGGER_NAME}.Store"
QT_LOGGER_NAME = f"{LOGGER_NAME}.Qt"
LOG_DIR_ENV_VAR = "UI_CUSTOMIZER_LOG_DIR"
PROPAGATE_ENV_VAR = "UI_CUSTOMIZER_PROPAGATE_LOGS"
LOG_FILENAME = "ui-customizer.log"

_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _env_flag(name: str) -> bool:
    value = os.getenv(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _log_dir_candidates(base_path: Optional[Path]) -> List[Path]:
    candidates: List[Path] = []
    env_override = os.environ.get(LOG_DIR_ENV_VAR)
    if env_override:
        candidates.append(Path(env_override).expanduser())
    if base_path is not None:
        candidates.append(Path(base_path) / "logs")
    state_home = os.environ.get("XDG_STATE_HOME")
    candidates.append(Path(state_home) if state_home else Path.home() / ".local" / "state")
    return candidates


def resolve_logs_dir(base_path: Optional[Path] = None, log_dir_name: str = "UICustomizer") -> Path:
    """
    Pick a writable directory for customizer logs.

    Order: ``$UI_CUSTOMIZER_LOG_DIR``, ``<base_path>/logs``, the XDG state
    directory, and finally the system temp directory.
    """
    for base in _log_dir_candidates(base_path):
        target = base / log_dir_name
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return target
    fallback = Path(tempfile.gettempdir()) / log_dir_name
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def build_rotating_file_handler(
    log_dir: Path,
    filename: str,
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    retention = max(1, retention)
    backup_count = max(0, retention - 1)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def configure_logging(
    *,
    debug_enabled: bool = False,
    log_dir: Optional[Path] = None,
    retention: int = 5,
) -> logging.Logger:
    """Attach a rotating file handler to the customizer logger (idempotent)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug_enabled))
    logger.propagate = _env_flag(PROPAGATE_ENV_VAR)
    target_dir = log_dir if log_dir is not None else resolve_logs_dir()
    target_path = (target_dir / LOG_FILENAME).resolve()
    for handler in logger.handlers:
        if isinstance(handler, RotatingFileHandler) and Path(handler.baseFilename).resolve() == target_path:
            return logger
    handler = build_rotating_file_handler(
        target_dir,
        LOG_FILENAME,
        retention=retention,
        formatter=logging.Formatter(_LOG_FORMAT),
    )
    logger.addHandler(handler)
    return logger
