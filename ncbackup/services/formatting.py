from __future__ import annotations

from ncbackup.services.propfind_parser import DavItem

_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_bytes(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    i = 0
    while size >= 1024 ** (i + 1) and i < len(_UNITS) - 1:
        i += 1
    value = round(size / 1024 ** i, 2)
    # 1.0 -> "1", 1.5 -> "1.5"
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_UNITS[i]}"


def format_kb(size: int) -> str:
    return f"{size / 1024:.2f} KB"


def format_item(item: DavItem) -> str:
    if item.is_directory:
        return f"📁 {item.name}"
    return f"📄 {item.name} ({format_bytes(item.size)})"


__all__ = ["format_bytes", "format_item", "format_kb"]
