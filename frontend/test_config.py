# frontend/test_config.py
# Unit tests for backend URL resolution and the startup banner

import pytest

from frontend import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("BACKEND_URL", raising=False)
    monkeypatch.delenv("API_BASE_URL", raising=False)


class TestGetApiBaseUrl:
    def test_local_default(self, monkeypatch):
        monkeypatch.setattr(config, "ENV", "local")
        assert config.get_api_base_url() == config.LOCAL_API_URL

    def test_backend_url_wins_and_is_read_per_call(self, monkeypatch):
        monkeypatch.setattr(config, "ENV", "production")
        monkeypatch.setenv("API_BASE_URL", "https://fallback.example.com")
        monkeypatch.setenv("BACKEND_URL", "https://api.example.com/")
        assert config.get_api_base_url() == "https://api.example.com"

        monkeypatch.setenv("BACKEND_URL", "https://other.example.com")
        assert config.get_api_base_url() == "https://other.example.com"

    def test_production_requires_https(self, monkeypatch):
        monkeypatch.setattr(config, "ENV", "production")
        monkeypatch.setenv("BACKEND_URL", "http://api.example.com")
        with pytest.raises(ValueError):
            config.get_api_base_url()


class TestDescribeBackend:
    def test_reports_configured_url(self, monkeypatch):
        monkeypatch.setattr(config, "ENV", "staging")
        monkeypatch.setenv("BACKEND_URL", "https://staging.example.com")
        assert config.describe_backend() == "https://staging.example.com"

    def test_missing_url_reported_not_raised(self, monkeypatch):
        monkeypatch.setattr(config, "ENV", "production")
        assert config.describe_backend().startswith("CRITICAL: Backend URL not configured")

    def test_insecure_url_reported_not_raised(self, monkeypatch):
        monkeypatch.setattr(config, "ENV", "production")
        monkeypatch.setenv("BACKEND_URL", "http://localhost:8000")
        assert config.describe_backend().startswith("CRITICAL: Production/staging must use HTTPS")

    def test_no_url_cached_at_import(self):
        assert not hasattr(config, "BACKEND_URL")
