#!/usr/bin/env python3
"""CLI tool to list files & folders on Nextcloud via WebDAV PROPFIND.

Credentials are read from environment / .env (NEXTCLOUD_URL, NEXTCLOUD_USERNAME,
NEXTCLOUD_PASSWORD).

Examples:
  python list_folders.py                 # everything in /, then folders only
  python list_folders.py /cashier
  python list_folders.py --folders-only
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from ncbackup.core.config import ConfigError
from ncbackup.core.logging_config import bind_command, setup_logging
from ncbackup.services.formatting import format_item
from ncbackup.services.propfind_parser import DavItem
from ncbackup.services.webdav_client import WebDAVError, files_url, list_folder


def _print_items(title: str, items: List[DavItem]) -> None:
    print(title)
    if not items:
        print("(empty)")
    for item in items:
        print(format_item(item))


def cmd_list(path: str, folders_only: bool) -> int:
    print(f"Requesting: {files_url(path)}\n")
    try:
        items = list_folder(path)
    except WebDAVError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 2
    folders = [i for i in items if i.is_directory]
    if folders_only:
        _print_items(f"Folders in {path}:", folders)
        return 0
    _print_items(f"All items in {path}:", items)
    print("\n---\n")
    _print_items("Folders only:", folders)
    return 0


def parse_args(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="List a Nextcloud folder over WebDAV")
    ap.add_argument("path", nargs="?", default="/", help="Remote path (default: /)")
    ap.add_argument("--folders-only", action="store_true", help="Only print folders")
    return ap.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        setup_logging()
        bind_command("list_folders")
        return cmd_list(args.path, args.folders_only)
    except ConfigError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    except Exception as exc:  # pragma: no cover
        print(f"[ERROR] Unexpected: {exc}", file=sys.stderr)
        return 3


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
