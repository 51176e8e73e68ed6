#!/usr/bin/env python3
"""Ultra-minimal SQLite backup uploader.

Uploads SQLITE_FILE (default ./daily_takings.sqlite3) or the given path to
BACKUP_FOLDER as backup_<timestamp>.db. Folder creation errors are ignored.

Usage:
  python upload_backup_simple.py [path]
"""
from __future__ import annotations

import sys
from typing import List, Optional

from ncbackup.core.config import ConfigError, get_settings
from ncbackup.core.logging_config import bind_command, setup_logging
from ncbackup.services.backup import upload_simple_backup
from ncbackup.services.formatting import format_kb
from ncbackup.services.webdav_client import WebDAVError


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    try:
        setup_logging()
        bind_command("upload_backup_simple")
        path = args[0] if args else get_settings().sqlite_file
        print("Uploading backup...")
        result = upload_simple_backup(path)
    except OSError as exc:
        print(f"Error reading file: {exc}", file=sys.stderr)
        return 1
    except ConfigError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except WebDAVError as exc:
        print(f"✗ Upload failed: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        print(f"✗ Upload failed (unexpected): {exc}", file=sys.stderr)
        return 3

    print("✓ Backup uploaded successfully!")
    print(f"  File: {result.file_name}")
    print(f"  Size: {format_kb(result.size_bytes)}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
