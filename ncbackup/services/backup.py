"""Timestamped SQLite backup upload.

upload_backup(): ensure folder (MKCOL, existing folder is fine) -> PUT
<stem>_<timestamp><ext> -> optionally PROPFIND the result and compare sizes.

upload_simple_backup(): the minimal variant; folder errors are ignored and
the file is always stored as backup_<timestamp>.db.
"""
from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ncbackup.core.config import Settings, get_settings
from ncbackup.services.webdav_client import (
    WebDAVError,
    create_folder,
    ensure_folder_best_effort,
    files_url,
    stat,
    upload_file,
)

logger = logging.getLogger("ncbackup.backup")

TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"


@dataclass
class BackupResult:
    remote_path: str
    file_name: str
    size_bytes: int
    status_code: int
    verified_size: Optional[int] = None


def _timestamp(now: datetime | None) -> str:
    return (now or datetime.now(timezone.utc)).strftime(TIMESTAMP_FORMAT)


def backup_file_name(local_path: str | os.PathLike[str], now: datetime | None = None) -> str:
    p = Path(local_path)
    return f"{p.stem}_{_timestamp(now)}{p.suffix}"


def simple_backup_file_name(now: datetime | None = None) -> str:
    return f"backup_{_timestamp(now)}.db"


def _folder_path(folder: str) -> str:
    return "/" + folder.strip("/")


def _check_local(local_path: str | os.PathLike[str]) -> int:
    if not os.path.isfile(local_path):
        raise FileNotFoundError(errno.ENOENT, "No such file", str(local_path))
    return os.path.getsize(local_path)


def verify_remote_size(remote_path: str, expected: int, settings: Settings | None = None, session: Any = None) -> int:
    item = stat(remote_path, settings, session)
    if item is None:
        raise WebDAVError("PROPFIND", files_url(remote_path, settings), 404, "uploaded file not found")
    if item.size != expected:
        logger.error("verify_size_mismatch", extra={"remote": remote_path, "expected": expected, "actual": item.size})
        raise WebDAVError(
            "PROPFIND",
            files_url(remote_path, settings),
            None,
            f"size mismatch: local {expected} bytes, remote {item.size} bytes",
        )
    return item.size


def upload_backup(
    local_path: str | os.PathLike[str],
    folder: str | None = None,
    verify: bool = False,
    settings: Settings | None = None,
    session: Any = None,
    now: datetime | None = None,
) -> BackupResult:
    """Upload local_path into the backup folder under a timestamped name.

    Raises FileNotFoundError for a missing local file and WebDAVError for any
    HTTP failure (MKCOL on an existing folder is not a failure).
    """
    s = settings or get_settings()
    size = _check_local(local_path)
    folder_path = _folder_path(folder or s.backup_folder)
    create_folder(folder_path, s, session)

    name = backup_file_name(local_path, now)
    remote_path = f"{folder_path}/{name}"
    status = upload_file(local_path, remote_path, s, session)
    result = BackupResult(remote_path=remote_path, file_name=name, size_bytes=size, status_code=status)
    if verify:
        result.verified_size = verify_remote_size(remote_path, size, s, session)
    logger.info("backup_completed", extra={"remote": remote_path, "size_bytes": size})
    return result


def upload_simple_backup(
    local_path: str | os.PathLike[str] | None = None,
    settings: Settings | None = None,
    session: Any = None,
    now: datetime | None = None,
) -> BackupResult:
    s = settings or get_settings()
    path = local_path or s.sqlite_file
    size = _check_local(path)
    folder_path = _folder_path(s.backup_folder)
    ensure_folder_best_effort(folder_path, s, session)

    name = simple_backup_file_name(now)
    remote_path = f"{folder_path}/{name}"
    status = upload_file(path, remote_path, s, session)
    return BackupResult(remote_path=remote_path, file_name=name, size_bytes=size, status_code=status)


__all__ = [
    "BackupResult",
    "backup_file_name",
    "simple_backup_file_name",
    "upload_backup",
    "upload_simple_backup",
    "verify_remote_size",
]
