"""ncbackup package.

Service helpers for the root-level scripts (upload_backup.py, list_folders.py, ...).
Nothing is imported implicitly here so the CLI tools stay side-effect free
until they call setup_logging().
"""

from typing import List

__all__: List[str] = []
