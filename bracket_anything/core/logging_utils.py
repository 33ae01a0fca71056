from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
PACKAGE_LOGGER = "bracket_anything"


@dataclass(frozen=True)
class RotationSettings:
    max_bytes: int = 5 * 1024 * 1024
    max_age_hours: int = 24
    max_files: int = 5

    @property
    def enabled(self) -> bool:
        return self.max_bytes > 0 or self.max_age_hours > 0


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def rotation_settings() -> RotationSettings:
    defaults = RotationSettings()
    return RotationSettings(
        max_bytes=_env_int("BRACKET_LOG_MAX_BYTES", defaults.max_bytes),
        max_age_hours=_env_int("BRACKET_LOG_MAX_AGE_HOURS", defaults.max_age_hours),
        max_files=_env_int("BRACKET_LOG_MAX_FILES", defaults.max_files),
    )


def _is_stale(path: Path, settings: RotationSettings, now: datetime) -> bool:
    stat = path.stat()
    if settings.max_bytes > 0 and stat.st_size >= settings.max_bytes:
        return True
    if settings.max_age_hours <= 0:
        return False
    modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
    return (now - modified).total_seconds() >= settings.max_age_hours * 3600


def _prune_rotated(path: Path, keep: int) -> None:
    rotated = sorted(
        path.parent.glob(f"{path.stem}.*{path.suffix}"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )
    for old in rotated[keep:]:
        old.unlink(missing_ok=True)


def rotate_log_if_needed(path: Path) -> None:
    """Move ``bracket.log`` aside as ``bracket.<timestamp>.log`` once it is too big or too old."""
    settings = rotation_settings()
    if not settings.enabled or not path.is_file():
        return

    now = datetime.now(timezone.utc)
    try:
        if not _is_stale(path, settings, now):
            return
    except FileNotFoundError:
        return

    target = path.with_name(f"{path.stem}.{now:%Y%m%d-%H%M%S}{path.suffix}")
    shutil.move(str(path), str(target))
    if settings.max_files > 0:
        _prune_rotated(path, settings.max_files)


def configure_logging(log_path: Path | None = None, level: int | str = logging.INFO) -> logging.Logger:
    """Attach console and (optionally) file handlers to the package logger.

    Safe to call more than once; handlers from an earlier call are replaced.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        rotate_log_if_needed(log_path)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
