from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ncbackup.services import backup
from ncbackup.services.webdav_client import WebDAVError

NOW = datetime(2026, 10, 19, 7, 5, 9, 123456, tzinfo=timezone.utc)


def _stat_body(size: int) -> bytes:
    return f"""<d:multistatus xmlns:d="DAV:"><d:response>
      <d:href>/remote.php/dav/files/alice%40example.com/cashier/x</d:href>
      <d:propstat><d:prop><d:resourcetype/><d:getcontentlength>{size}</d:getcontentlength></d:prop>
      <d:status>HTTP/1.1 200 OK</d:status></d:propstat></d:response></d:multistatus>""".encode()


def test_backup_file_name_keeps_stem_and_extension():
    assert backup.backup_file_name("/data/daily_takings.sqlite3", NOW) == "daily_takings_2026-10-19T07-05-09.sqlite3"
    assert backup.backup_file_name("db", NOW) == "db_2026-10-19T07-05-09"


def test_simple_backup_file_name():
    assert backup.simple_backup_file_name(NOW) == "backup_2026-10-19T07-05-09.db"


def test_upload_backup_creates_folder_then_puts(settings, session, sqlite_file):
    session.queue(201).queue(201)
    result = backup.upload_backup(sqlite_file, settings=settings, session=session, now=NOW)
    assert [c["method"] for c in session.calls] == ["MKCOL", "PUT"]
    assert session.calls[0]["url"].endswith("/alice%40example.com/cashier")
    assert result.remote_path == "/cashier/daily_takings_2026-10-19T07-05-09.sqlite3"
    assert result.size_bytes == sqlite_file.stat().st_size
    assert result.status_code == 201
    assert result.verified_size is None
    assert session.calls[1]["body"] == sqlite_file.read_bytes()


def test_upload_backup_into_existing_folder(settings, session, sqlite_file):
    session.queue(405).queue(204)
    result = backup.upload_backup(sqlite_file, folder="/nightly/", settings=settings, session=session, now=NOW)
    assert result.remote_path.startswith("/nightly/")
    assert result.status_code == 204


def test_upload_backup_missing_file(settings, session, tmp_path):
    with pytest.raises(FileNotFoundError):
        backup.upload_backup(tmp_path / "missing.db", settings=settings, session=session)
    assert session.calls == []


def test_upload_backup_mkcol_failure_stops(settings, session, sqlite_file):
    session.queue(403)
    with pytest.raises(WebDAVError):
        backup.upload_backup(sqlite_file, settings=settings, session=session)
    assert len(session.calls) == 1


def test_verify_matching_size(settings, session, sqlite_file):
    size = sqlite_file.stat().st_size
    session.queue(201).queue(201).queue(207, _stat_body(size))
    result = backup.upload_backup(sqlite_file, verify=True, settings=settings, session=session, now=NOW)
    assert result.verified_size == size
    assert session.calls[2]["headers"]["Depth"] == "0"


def test_verify_size_mismatch_raises(settings, session, sqlite_file):
    session.queue(201).queue(201).queue(207, _stat_body(3))
    with pytest.raises(WebDAVError, match="size mismatch"):
        backup.upload_backup(sqlite_file, verify=True, settings=settings, session=session, now=NOW)


def test_simple_backup_ignores_folder_errors(settings, session, sqlite_file):
    session.queue(500).queue(201)
    result = backup.upload_simple_backup(sqlite_file, settings=settings, session=session, now=NOW)
    assert result.remote_path == "/cashier/backup_2026-10-19T07-05-09.db"
    assert result.file_name == "backup_2026-10-19T07-05-09.db"
    assert [c["method"] for c in session.calls] == ["MKCOL", "PUT"]


def test_simple_backup_defaults_to_configured_file(settings, session, sqlite_file):
    settings.sqlite_file = str(sqlite_file)
    session.queue(201).queue(201)
    result = backup.upload_simple_backup(settings=settings, session=session, now=NOW)
    assert result.size_bytes == sqlite_file.stat().st_size
