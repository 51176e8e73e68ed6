from __future__ import annotations

import logging
from typing import Any, List, Tuple

import pytest
import requests
import structlog

from ncbackup.core.config import Settings, get_settings, reload_settings_for_tests
from ncbackup.core.logging_config import _StructlogHandler

_ENV_KEYS = [
    "NEXTCLOUD_URL",
    "NEXTCLOUD_USERNAME",
    "NEXTCLOUD_PASSWORD",
    "BACKUP_FOLDER",
    "SQLITE_FILE",
    "HTTP_TIMEOUT_SECONDS",
    "WEBDAV_URL",
    "WEBDAV_USERNAME",
    "WEBDAV_PASSWORD",
    "NCB_ENV",
]


def make_response(status: int, body: bytes = b"", url: str = "http://nc.test/", reason: str = "") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = body
    resp.url = url
    resp.reason = reason
    resp.encoding = "utf-8"
    return resp


class FakeSession:
    """Records every request and answers from a queue of (status, body) pairs."""

    def __init__(self, replies: List[Tuple[int, bytes]] | None = None):
        self.replies = list(replies or [])
        self.calls: List[dict[str, Any]] = []

    def queue(self, status: int, body: bytes = b"") -> "FakeSession":
        self.replies.append((status, body))
        return self

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        data = kwargs.get("data")
        streamed = hasattr(data, "read")
        if streamed:
            data = data.read()  # file handle is closed once the caller returns
        self.calls.append({"method": method, "url": url, "body": data, "streamed": streamed, **{k: v for k, v in kwargs.items() if k != "data"}})
        status, body = self.replies.pop(0) if self.replies else (200, b"")
        return make_response(status, body, url=url)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)  # keep any developer .env out of the tests
    reload_settings_for_tests()
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    for h in list(logging.root.handlers):
        if isinstance(h, _StructlogHandler):
            logging.root.removeHandler(h)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        nextcloud_url="http://nc.test/",
        nextcloud_username="alice@example.com",
        nextcloud_password="app-pass",
        backup_folder="cashier",
    )  # type: ignore[call-arg]


@pytest.fixture()
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def env_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.setenv("NEXTCLOUD_URL", "http://nc.test")
    monkeypatch.setenv("NEXTCLOUD_USERNAME", "alice@example.com")
    monkeypatch.setenv("NEXTCLOUD_PASSWORD", "app-pass")
    return reload_settings_for_tests()


@pytest.fixture()
def sqlite_file(tmp_path):
    p = tmp_path / "daily_takings.sqlite3"
    p.write_bytes(b"SQLite format 3\x00" + bytes(range(256)) * 8)
    return p
