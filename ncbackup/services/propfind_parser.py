"""Parse WebDAV PROPFIND multistatus responses.

parse_multistatus(xml) -> list[DavItem]

The first <d:response> of a Depth: 1 listing describes the requested
collection itself and is dropped unless include_self=True.
"""
from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import List, Literal, Optional
from urllib.parse import unquote

from pydantic import BaseModel, Field

logger = logging.getLogger("ncbackup.propfind")

DAV_NS = "DAV:"
OC_NS = "http://owncloud.org/ns"
NAMESPACES = {"d": DAV_NS, "oc": OC_NS}

# Properties requested by list_folder(); kept here so the request body and the
# parser cannot drift apart.
PROPFIND_BODY = """<?xml version="1.0"?>
<d:propfind xmlns:d="DAV:" xmlns:oc="http://owncloud.org/ns">
    <d:prop>
        <d:displayname />
        <d:getlastmodified />
        <d:getetag />
        <d:getcontenttype />
        <d:resourcetype />
        <d:getcontentlength />
        <oc:fileid />
    </d:prop>
</d:propfind>"""


class DavItem(BaseModel):
    name: str
    path: str = Field(..., description="href as returned by the server (percent-encoded)")
    is_directory: bool
    type: Literal["directory", "file"]
    size: int = 0
    last_modified: Optional[datetime] = None
    content_type: str = ""
    etag: str = ""
    file_id: str = ""


def _truncate(raw: str | bytes, limit: int = 500) -> str:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return raw if len(raw) <= limit else raw[:limit] + "..."


def _text(prop: ET.Element, tag: str) -> str:
    el = prop.find(tag, NAMESPACES)
    if el is None or el.text is None:
        return ""
    return el.text.strip()


def _pick_propstat(response: ET.Element) -> Optional[ET.Element]:
    propstats = response.findall("d:propstat", NAMESPACES)
    if len(propstats) == 1:
        return propstats[0]
    for ps in propstats:
        if "200" in _text(ps, "d:status"):
            return ps
    return None


def _parse_size(raw: str) -> int:
    try:
        return int(raw) if raw else 0
    except ValueError:
        return 0


def _parse_last_modified(raw: str) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return parsedate_to_datetime(raw)
    except (TypeError, ValueError):
        return None


def _name_from_href(href: str) -> str:
    segments = [s for s in href.split("/") if s]
    return unquote(segments[-1]) if segments else ""


def _item_from_response(response: ET.Element) -> Optional[DavItem]:
    href = _text(response, "d:href")
    propstat = _pick_propstat(response)
    prop = propstat.find("d:prop", NAMESPACES) if propstat is not None else None
    if prop is None:
        logger.warning("propstat_missing", extra={"href": href})
        return None

    resourcetype = prop.find("d:resourcetype", NAMESPACES)
    is_dir = resourcetype is not None and resourcetype.find("d:collection", NAMESPACES) is not None
    return DavItem(
        name=_text(prop, "d:displayname") or _name_from_href(href),
        path=href,
        is_directory=is_dir,
        type="directory" if is_dir else "file",
        size=_parse_size(_text(prop, "d:getcontentlength")),
        last_modified=_parse_last_modified(_text(prop, "d:getlastmodified")),
        content_type=_text(prop, "d:getcontenttype"),
        etag=_text(prop, "d:getetag"),
        file_id=_text(prop, "oc:fileid"),
    )


def parse_multistatus(xml_data: str | bytes, include_self: bool = False) -> List[DavItem]:
    """Map a multistatus document to DavItem records.

    Raises xml.etree.ElementTree.ParseError for malformed XML. A well-formed
    document that is not a multistatus (or has no responses) yields [].
    """
    try:
        root = ET.fromstring(xml_data)
    except ET.ParseError as exc:
        logger.error("xml_parse_error", extra={"error": str(exc), "raw": _truncate(xml_data)})
        raise

    if root.tag != f"{{{DAV_NS}}}multistatus":
        logger.error("invalid_multistatus", extra={"root": root.tag})
        return []
    responses = root.findall("d:response", NAMESPACES)
    if not responses:
        logger.error("invalid_multistatus", extra={"root": root.tag, "responses": 0})
        return []

    if not include_self:
        responses = responses[1:]
    items: List[DavItem] = []
    for response in responses:
        item = _item_from_response(response)
        if item is not None:
            items.append(item)
    return items


__all__ = ["DavItem", "NAMESPACES", "PROPFIND_BODY", "parse_multistatus"]
