# Overview: Service-layer operations for maintenance; timestamped backups of the store files.

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from ..config import Config
from ..storage import StorageError
from ..time_utils import backup_stamp

logger = logging.getLogger(__name__)


def create_backup(config: Config, *, when: datetime | None = None) -> Path:
    """
    Copy every existing store file into backups/backup_YYYYmmdd_HHMMSS/.

    Missing store files are skipped. Two backups within the same second share
    a directory and the later copy wins.
    """
    target = config.backup_dir / f"backup_{backup_stamp(when)}"
    copied = []
    try:
        target.mkdir(parents=True, exist_ok=True)
        for path in config.store_paths:
            if not path.is_file():
                continue
            shutil.copy2(path, target / path.name)
            copied.append(path.name)
    except OSError as exc:
        raise StorageError(f"Backup failed: {exc}") from exc

    logger.info("Backup created", extra={"extra": {"directory": str(target), "files": copied}})
    return target
