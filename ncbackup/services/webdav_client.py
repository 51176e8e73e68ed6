"""Nextcloud WebDAV helpers built on requests.

Credentials and server come from ncbackup.core.config (environment / .env).
Every call targets <NEXTCLOUD_URL>/remote.php/dav/files/<username><path>.

Functions:
  files_url(path) -> str
  create_folder(path) -> bool            MKCOL, 405 (already exists) tolerated
  ensure_folder_best_effort(path) -> bool | None
  upload_file(local_path, remote_path) -> int   PUT
  list_folder(path) -> list[DavItem]     PROPFIND Depth: 1
  list_folders_only(path) -> list[DavItem]
  stat(path) -> DavItem | None           PROPFIND Depth: 0

All functions accept an optional settings object and a requests.Session-like
object (anything with .request()) so tests can swap the transport.
"""
from __future__ import annotations

import logging
import os
from typing import Any, List, Optional
from urllib.parse import quote

import requests

from ncbackup.core.config import Settings, get_settings
from ncbackup.services.propfind_parser import DavItem, PROPFIND_BODY, parse_multistatus

logger = logging.getLogger("ncbackup.webdav")


class WebDAVError(RuntimeError):
    def __init__(self, method: str, url: str, status_code: int | None = None, reason: str = ""):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is None:
            detail = reason or "connection error"
        else:
            detail = f"HTTP {status_code} {reason}".rstrip()
        super().__init__(f"{method} {url} failed: {detail}")


def _normalize_remote_path(path: str) -> str:
    parts = [p for p in path.strip().split("/") if p]
    return "/" + "/".join(parts)


def files_url(path: str = "/", settings: Settings | None = None) -> str:
    s = settings or get_settings()
    user = quote(s.nextcloud_username, safe="")
    remote = quote(_normalize_remote_path(path), safe="/")
    return f"{s.base_url}/remote.php/dav/files/{user}{remote}"


def _request(method: str, path: str, settings: Settings | None, session: Any, **kwargs: Any) -> requests.Response:
    s = settings or get_settings()
    s.require_credentials()
    url = files_url(path, s)
    http = session or requests
    logger.debug("webdav_request", extra={"method": method, "url": url})
    try:
        return http.request(
            method,
            url,
            auth=(s.nextcloud_username, s.nextcloud_password),
            timeout=s.http_timeout_seconds,
            **kwargs,
        )
    except requests.RequestException as exc:
        logger.error("webdav_transport_error", extra={"method": method, "url": url, "error": str(exc)})
        raise WebDAVError(method, url, None, str(exc)) from exc


def _raise_for_status(method: str, resp: requests.Response) -> None:
    if resp.status_code >= 400:
        logger.error(
            "webdav_http_error",
            extra={"method": method, "url": resp.url, "status": resp.status_code, "body": resp.text[:300]},
        )
        raise WebDAVError(method, resp.url, resp.status_code, resp.reason or "")


def create_folder(path: str, settings: Settings | None = None, session: Any = None) -> bool:
    """MKCOL a single folder. Returns True if created, False if it already existed."""
    resp = _request("MKCOL", path, settings, session)
    if resp.status_code == 405:  # 405 = collection already exists
        logger.info("folder_exists", extra={"path": path})
        return False
    _raise_for_status("MKCOL", resp)
    logger.info("folder_created", extra={"path": path})
    return True


def ensure_folder_best_effort(path: str, settings: Settings | None = None, session: Any = None) -> bool | None:
    """Like create_folder but never raises; None means the MKCOL failed."""
    try:
        return create_folder(path, settings, session)
    except Exception as exc:
        logger.warning("folder_create_ignored", extra={"path": path, "error": str(exc)})
        return None


def upload_file(local_path: str | os.PathLike[str], remote_path: str, settings: Settings | None = None, session: Any = None) -> int:
    """PUT a local file to remote_path. Returns the HTTP status (201 new, 204 overwritten)."""
    size = os.path.getsize(local_path)
    logger.info("upload_started", extra={"local": str(local_path), "remote": remote_path, "size_bytes": size})
    with open(local_path, "rb") as fh:
        resp = _request(
            "PUT",
            remote_path,
            settings,
            session,
            # requests sends a zero-length file object chunked
            data=fh if size else b"",
            headers={"Content-Type": "application/octet-stream", "Content-Length": str(size)},
        )
    _raise_for_status("PUT", resp)
    logger.info("upload_finished", extra={"remote": remote_path, "status": resp.status_code})
    return resp.status_code


def _propfind(path: str, depth: str, settings: Settings | None, session: Any) -> requests.Response:
    return _request(
        "PROPFIND",
        path,
        settings,
        session,
        data=PROPFIND_BODY.encode("utf-8"),
        headers={"Content-Type": "application/xml", "Depth": depth},
    )


def list_folder(path: str = "/", settings: Settings | None = None, session: Any = None) -> List[DavItem]:
    """List the direct children of a remote folder (the folder itself is excluded)."""
    resp = _propfind(path, "1", settings, session)
    _raise_for_status("PROPFIND", resp)
    return parse_multistatus(resp.content)


def list_folders_only(path: str = "/", settings: Settings | None = None, session: Any = None) -> List[DavItem]:
    return [item for item in list_folder(path, settings, session) if item.is_directory]


def stat(path: str, settings: Settings | None = None, session: Any = None) -> Optional[DavItem]:
    """Properties of a single remote resource, None if it does not exist."""
    resp = _propfind(path, "0", settings, session)
    if resp.status_code == 404:
        return None
    _raise_for_status("PROPFIND", resp)
    items = parse_multistatus(resp.content, include_self=True)
    return items[0] if items else None


__all__ = [
    "WebDAVError",
    "create_folder",
    "ensure_folder_best_effort",
    "files_url",
    "list_folder",
    "list_folders_only",
    "stat",
    "upload_file",
]
