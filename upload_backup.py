#!/usr/bin/env python3
"""Upload a SQLite file to the Nextcloud backup folder.

The file is stored as <name>_<UTC timestamp><ext> inside BACKUP_FOLDER
(default: cashier). The folder is created first; an existing folder is fine.
Credentials are read from environment / .env (NEXTCLOUD_URL,
NEXTCLOUD_USERNAME, NEXTCLOUD_PASSWORD).

Usage:
  python upload_backup.py <path-to-sqlite-file> [--folder NAME] [--verify]

Example:
  python upload_backup.py ./database.db

Exit codes:
  0 success
  1 usage error, missing file or missing configuration
  2 HTTP / connection failure
  3 unexpected error
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from ncbackup.core.config import ConfigError
from ncbackup.core.logging_config import bind_command, setup_logging
from ncbackup.services.backup import upload_backup
from ncbackup.services.formatting import format_kb
from ncbackup.services.webdav_client import WebDAVError

USAGE = (
    "Usage: python upload_backup.py <path-to-sqlite-file>\n"
    "Example: python upload_backup.py ./database.db"
)


def parse_args(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="Upload a SQLite backup to Nextcloud")
    ap.add_argument("file", nargs="?", help="Path to the SQLite file")
    ap.add_argument("--folder", default=None, help="Remote folder (default: BACKUP_FOLDER)")
    ap.add_argument("--verify", action="store_true", help="Compare remote size with local size after upload")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if not args.file:
        print(USAGE)
        return 1
    try:
        setup_logging()
        bind_command("upload_backup")
        print("\n📦 Starting backup upload...\n")
        result = upload_backup(args.file, folder=args.folder, verify=args.verify)
    except FileNotFoundError:
        print(f"✗ File not found: {args.file}", file=sys.stderr)
        return 1
    except ConfigError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except WebDAVError as exc:
        print(f"\n✗ Backup failed: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:  # pragma: no cover
        print(f"\n✗ Backup failed (unexpected): {exc}", file=sys.stderr)
        return 3

    print(f"✓ Upload successful! Status: {result.status_code}")
    print("\n✓ Backup completed successfully!")
    print(f"   Remote path: {result.remote_path}")
    print(f"   File size: {format_kb(result.size_bytes)}")
    if result.verified_size is not None:
        print(f"   Verified remote size: {result.verified_size} bytes")
    print()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
