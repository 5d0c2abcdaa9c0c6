"""
YAML settings loader.

Loads scraper settings from YAML files with:
- Environment variable substitution
- Default values for every key
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml
import structlog

logger = structlog.get_logger(__name__)


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variables in text.

    Supports formats:
    - ${VAR_NAME} - required, warning and empty string if missing
    - ${VAR_NAME:-default} - optional with default

    Args:
        text: Text with env var placeholders

    Returns:
        Text with substituted values
    """
    def replace(match):
        var_expr = match.group(1)
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)
        else:
            value = os.getenv(var_expr)
            if value is None:
                logger.warning("env_var_not_set", var=var_expr)
                return ""
            return value

    return re.sub(r"\$\{([^}]+)\}", replace, text)


@dataclass
class ScraperSettings:
    """Where and how to scrape."""

    source_url: str = "https://eprocure.gov.in/epublish/app"
    source_name: str = "eprocure.gov.in"
    link_origin: str = "https://eprocure.gov.in"

    max_pages: int = 3
    page_delay: float = 2.0  # Seconds between pages

    request_timeout: float = 30.0
    max_retries: int = 1  # Retry is left to the URL-pattern guesses

    @classmethod
    def from_dict(cls, data: dict) -> "ScraperSettings":
        return cls(
            source_url=data.get("source_url", cls.source_url),
            source_name=data.get("source_name", cls.source_name),
            link_origin=data.get("link_origin", cls.link_origin),
            max_pages=int(data.get("max_pages", cls.max_pages)),
            page_delay=float(data.get("page_delay", cls.page_delay)),
            request_timeout=float(data.get("request_timeout", cls.request_timeout)),
            max_retries=int(data.get("max_retries", cls.max_retries)),
        )


@dataclass
class ImportSettings:
    """Text used when synthesizing persisted tenders."""

    portal_url: str = "https://eprocure.gov.in"
    requirements: str = (
        "Please refer to the official tender document for detailed "
        "requirements and specifications."
    )

    @classmethod
    def from_dict(cls, data: dict) -> "ImportSettings":
        return cls(
            portal_url=data.get("portal_url", cls.portal_url),
            requirements=data.get("requirements", cls.requirements),
        )


@dataclass
class StorageSettings:
    path: str = "data/tenders.json"

    @classmethod
    def from_dict(cls, data: dict) -> "StorageSettings":
        return cls(path=data.get("path", cls.path))


@dataclass
class ServerSettings:
    host: str = "0.0.0.0"
    port: int = 8080

    @classmethod
    def from_dict(cls, data: dict) -> "ServerSettings":
        return cls(
            host=data.get("host", cls.host),
            port=int(data.get("port", cls.port)),
        )


@dataclass
class Settings:
    """Top-level settings tree."""
    scraper: ScraperSettings = field(default_factory=ScraperSettings)
    importer: ImportSettings = field(default_factory=ImportSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)
    server: ServerSettings = field(default_factory=ServerSettings)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """Create from dictionary (e.g., from YAML)."""
        return cls(
            scraper=ScraperSettings.from_dict(data.get("scraper") or {}),
            importer=ImportSettings.from_dict(data.get("importer") or {}),
            storage=StorageSettings.from_dict(data.get("storage") or {}),
            server=ServerSettings.from_dict(data.get("server") or {}),
        )


class ConfigLoader:
    """
    Configuration loader for scraper settings.

    Loads YAML config files and fills in defaults for missing keys.
    """

    def __init__(self, config_dir: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
                       (defaults to package config directory)
        """
        if config_dir:
            self.config_dir = Path(config_dir)
        else:
            self.config_dir = Path(__file__).parent

    def load_file(self, filename: str) -> dict:
        """
        Load YAML config file.

        Args:
            filename: Config file name (relative to config_dir)

        Returns:
            Parsed config dict
        """
        filepath = self.config_dir / filename

        if not filepath.exists():
            raise FileNotFoundError(f"Config file not found: {filepath}")

        logger.info("loading_config", file=str(filepath))

        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()

        # Substitute environment variables
        content = substitute_env_vars(content)

        config = yaml.safe_load(content)

        return config or {}

    def load_settings(self, filename: str = "settings.yml") -> Settings:
        """
        Load settings from YAML.

        Args:
            filename: Settings file name

        Returns:
            Settings object
        """
        return Settings.from_dict(self.load_file(filename))


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Convenience function to load settings.

    Args:
        config_path: Optional path to a settings YAML file

    Returns:
        Settings object
    """
    if config_path:
        loader = ConfigLoader(str(Path(config_path).parent))
        return loader.load_settings(Path(config_path).name)
    return ConfigLoader().load_settings()
