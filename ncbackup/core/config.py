from __future__ import annotations

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_NEXTCLOUD_URL = "http://localhost:8080"


class ConfigError(RuntimeError):
	pass


class Settings(BaseSettings):
	nextcloud_url: str | None = None  # NEXTCLOUD_URL (server root, no /remote.php)
	nextcloud_username: str = ""  # NEXTCLOUD_USERNAME
	nextcloud_password: str = ""  # NEXTCLOUD_PASSWORD (app password recommended)
	backup_folder: str = "cashier"  # BACKUP_FOLDER, without leading /
	sqlite_file: str = "./daily_takings.sqlite3"  # SQLITE_FILE used by upload_backup_simple.py
	http_timeout_seconds: float = 30.0  # HTTP_TIMEOUT_SECONDS per request
	ncb_env: str = "dev"  # NCB_ENV=prod switches logs to JSON
	# --- WEBDAV_* naming used by older deployments (fallbacks only) ---
	webdav_url: str | None = None  # WEBDAV_URL
	webdav_username: str | None = None  # WEBDAV_USERNAME
	webdav_password: str | None = None  # WEBDAV_PASSWORD

	# Allow unknown extra env vars (so future additions don't break startup/tests)
	model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

	@property
	def base_url(self) -> str:
		return (self.nextcloud_url or DEFAULT_NEXTCLOUD_URL).rstrip("/")

	def require_credentials(self) -> None:
		if not self.nextcloud_username:
			raise ConfigError("Missing NEXTCLOUD_USERNAME (or WEBDAV_USERNAME) in environment/.env")


def _base_from_webdav_url(url: str) -> str:
	# WEBDAV_URL may point at the dav endpoint itself, e.g. .../remote.php/dav/files/alice
	idx = url.find("/remote.php/")
	if idx != -1:
		url = url[:idx]
	return url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
	s = Settings()  # type: ignore[call-arg]
	# --- Backward compatibility for the WEBDAV_* variable naming ---
	if not s.nextcloud_url and s.webdav_url:
		s.nextcloud_url = _base_from_webdav_url(s.webdav_url)
	if not s.nextcloud_username and s.webdav_username:
		s.nextcloud_username = s.webdav_username
	if not s.nextcloud_password and s.webdav_password:
		s.nextcloud_password = s.webdav_password
	return s


def reload_settings_for_tests() -> Settings:  # pragma: no cover - test utility
	"""Force reload of settings (for tests that mutate env via monkeypatch).

	Usage in tests: call reload_settings_for_tests() after setenv/delenv and
	use the returned object or get_settings().
	"""
	get_settings.cache_clear()  # type: ignore[attr-defined]
	return get_settings()


__all__ = ["ConfigError", "DEFAULT_NEXTCLOUD_URL", "Settings", "get_settings", "reload_settings_for_tests"]
