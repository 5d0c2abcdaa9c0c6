"""Tests for configuration loading."""

from tender_scraper.config.loader import (
    ConfigLoader,
    ImportSettings,
    ScraperSettings,
    Settings,
    load_settings,
    substitute_env_vars,
)


class TestSubstituteEnvVars:
    """Tests for substitute_env_vars function."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("TENDER_TEST_URL", "https://portal.test")
        assert substitute_env_vars("url: ${TENDER_TEST_URL}") == "url: https://portal.test"

    def test_default_used(self, monkeypatch):
        monkeypatch.delenv("TENDER_TEST_PAGES", raising=False)
        assert substitute_env_vars("pages: ${TENDER_TEST_PAGES:-3}") == "pages: 3"

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("TENDER_TEST_MISSING", raising=False)
        assert substitute_env_vars("x: ${TENDER_TEST_MISSING}") == "x: "


class TestSettings:
    """Tests for settings dataclasses."""

    def test_defaults(self):
        """Test empty dict gives built-in defaults."""
        settings = Settings.from_dict({})

        assert settings.scraper.source_url == "https://eprocure.gov.in/epublish/app"
        assert settings.scraper.max_pages == 3
        assert settings.scraper.page_delay == 2.0
        assert settings.scraper.request_timeout == 30.0
        assert settings.storage.path == "data/tenders.json"
        assert settings.server.port == 8080

    def test_partial_section(self):
        """Test missing keys fall back per field."""
        scraper = ScraperSettings.from_dict({"max_pages": "5"})

        assert scraper.max_pages == 5
        assert scraper.source_name == "eprocure.gov.in"


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_packaged_settings(self, monkeypatch):
        """Test bundled settings.yml loads with defaults."""
        for var in ["TENDER_SOURCE_URL", "TENDER_MAX_PAGES", "TENDER_STORE_PATH", "HOST", "PORT"]:
            monkeypatch.delenv(var, raising=False)

        settings = ConfigLoader().load_settings()

        assert settings.scraper.source_url == "https://eprocure.gov.in/epublish/app"
        assert settings.scraper.max_pages == 3
        assert settings.importer.requirements == ImportSettings.requirements
        assert settings.server.port == 8080

    def test_env_override(self, monkeypatch):
        """Test environment variables override bundled values."""
        monkeypatch.setenv("TENDER_MAX_PAGES", "7")
        monkeypatch.setenv("TENDER_STORE_PATH", "/tmp/store.json")

        settings = ConfigLoader().load_settings()

        assert settings.scraper.max_pages == 7
        assert settings.storage.path == "/tmp/store.json"

    def test_custom_file(self, tmp_path):
        """Test load_settings with an explicit path."""
        path = tmp_path / "custom.yml"
        path.write_text("scraper:\n  source_url: https://portal.test/tenders\n  page_delay: 0.5\n")

        settings = load_settings(str(path))

        assert settings.scraper.source_url == "https://portal.test/tenders"
        assert settings.scraper.page_delay == 0.5
        assert settings.scraper.max_pages == 3
