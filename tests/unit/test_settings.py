"""
Unit Tests - Configuration and Credentials
"""
import logging

import pytest
import structlog
from pydantic import ValidationError

from catalog_admin.config import Settings, get_settings
from catalog_admin.config.logging import configure_logging
from catalog_admin.gateway import CredentialStore


class TestSettings:
    """Tests for environment-driven settings"""

    def test_defaults(self, test_settings):
        """Test default settings values"""
        assert test_settings.app_env == "testing"
        assert test_settings.catalog.name_max_length == 100
        assert test_settings.catalog.description_max_length == 500
        assert test_settings.catalog.reject_concurrent_mutations is False
        assert test_settings.api.login_path == "/auth/admin/login"

    def test_base_url_trailing_slash(self, monkeypatch):
        """Test the base URL loses its trailing slash"""
        monkeypatch.setenv("ADMIN_API_BASE_URL", "https://api.example.com/")
        get_settings.cache_clear()

        assert get_settings().api.base_url == "https://api.example.com"

    def test_axis_names_from_env(self, monkeypatch):
        """Test axis names read from the environment"""
        monkeypatch.setenv("CATALOG_COLOR_ATTRIBUTE_NAMES", '["color", "shade"]')
        get_settings.cache_clear()

        assert get_settings().catalog.color_attribute_names == ["color", "shade"]

    def test_invalid_environment(self, monkeypatch):
        """Test an unknown APP_ENV is rejected"""
        monkeypatch.setenv("APP_ENV", "moon")

        with pytest.raises(ValidationError):
            Settings()

    def test_cached(self):
        """Test settings are cached"""
        assert get_settings() is get_settings()


class TestCredentialStore:
    """Tests for persisted credentials"""

    def test_round_trip_between_sessions(self, tmp_path):
        """Test credentials survive a new store instance"""
        path = tmp_path / "nested" / "credentials.json"
        CredentialStore(path).save("abc", {"id": 1, "email": "admin@example.com"})

        reopened = CredentialStore(path)

        assert reopened.token == "abc"
        assert reopened.user["email"] == "admin@example.com"
        assert reopened.is_authenticated

    def test_clear_removes_file(self, credentials):
        """Test clear deletes the credentials file"""
        credentials.save("abc")
        credentials.clear()

        assert not credentials.path.exists()
        assert CredentialStore(credentials.path).token is None

    def test_unreadable_file_ignored(self, tmp_path):
        """Test a corrupt credentials file is ignored"""
        path = tmp_path / "credentials.json"
        path.write_text("{not json", encoding="utf-8")

        assert not CredentialStore(path).is_authenticated

    def test_default_path_from_settings(self, tmp_path):
        """Test the credentials path comes from settings"""
        assert CredentialStore().path == tmp_path / "credentials.json"


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestLogging:
    """Tests for logging configuration"""

    def test_debug_flag_selects_debug_level(self, monkeypatch, restore_logging):
        """Test DEBUG=true switches the default level to DEBUG"""
        monkeypatch.setenv("DEBUG", "true")
        get_settings.cache_clear()

        configure_logging()

        assert restore_logging.level == logging.DEBUG

    def test_explicit_level_wins_over_debug(self, monkeypatch, restore_logging):
        """Test an explicit level overrides the DEBUG flag"""
        monkeypatch.setenv("DEBUG", "true")
        get_settings.cache_clear()

        configure_logging("WARNING")

        assert restore_logging.level == logging.WARNING

    def test_level_from_settings(self, monkeypatch, restore_logging):
        """Test LOG_LEVEL is used when DEBUG is off"""
        monkeypatch.delenv("DEBUG", raising=False)
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        get_settings.cache_clear()

        configure_logging()

        assert restore_logging.level == logging.ERROR
