"""Tests for board settings."""

from noteboard.settings import BoardSettings


class TestBoardSettings:
    """Test cases for BoardSettings."""

    def test_defaults(self, settings, monkeypatch):
        monkeypatch.delenv("NOTEBOARD_API_URL", raising=False)
        monkeypatch.delenv("NOTEBOARD_USER_ID", raising=False)
        assert settings.api_url == "http://localhost:3001/api"
        assert settings.user_id == "test-user-id"
        assert settings.days == 14
        assert settings.reconcile_delay_ms == 5000
        assert settings.periodic_ms == 30000

    def test_stored_values(self, settings, monkeypatch):
        monkeypatch.delenv("NOTEBOARD_API_URL", raising=False)
        settings.settings.setValue("api/url", "http://notes.example/api")
        settings.settings.setValue("api/days", 30)
        assert settings.api_url == "http://notes.example/api"
        assert settings.days == 30

    def test_environment_overrides(self, settings, monkeypatch):
        settings.settings.setValue("api/user_id", "stored")
        monkeypatch.setenv("NOTEBOARD_USER_ID", "from-env")
        assert settings.user_id == "from-env"

    def test_keys_without_environment(self, settings):
        assert "api/days" not in BoardSettings.ENVIRONMENT
