#!/usr/bin/env python3
"""Create the backup folder on Nextcloud / WebDAV.

Reads credentials from .env (NEXTCLOUD_URL, NEXTCLOUD_USERNAME, NEXTCLOUD_PASSWORD).
Issues MKCOL for BACKUP_FOLDER (or each path given on the command line); a
folder that already exists is reported and skipped.

Usage:
  python create_folders.py [path ...]

Exit codes:
  0 success
  1 missing configuration
  2 connection/auth failure
  3 unexpected error
"""
from __future__ import annotations

import sys
from typing import List, Optional

from ncbackup.core.config import ConfigError, get_settings
from ncbackup.core.logging_config import bind_command, setup_logging
from ncbackup.services.webdav_client import WebDAVError, create_folder


def ensure_dir(path: str) -> bool:
    posix_path = "/" + path.strip("/")
    if create_folder(posix_path):
        print(f"[CREATED] {posix_path}")
        return True
    print(f"[OK] Exists: {posix_path}")
    return False


def main(argv: Optional[List[str]] = None) -> int:
    paths = sys.argv[1:] if argv is None else argv
    try:
        setup_logging()
        bind_command("create_folders")
        targets = paths or [get_settings().backup_folder]
        created = 0
        for d in targets:
            if ensure_dir(d):
                created += 1
        print(f"Done. Created {created} new folder(s).")
        return 0
    except ConfigError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except WebDAVError as exc:
        print(f"[ERROR] Cannot create folder: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover
        print(f"[ERROR] Unexpected: {exc}", file=sys.stderr)
        return 3


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
