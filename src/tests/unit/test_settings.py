"""Unit tests for config/settings.py"""

from pathlib import Path

import pytest


def test_settings_import():
    """Test that settings module imports successfully."""
    from proxy_printer.config.settings import ProxyPrinterSettings, settings

    assert settings is not None
    assert isinstance(settings, ProxyPrinterSettings)


def test_settings_defaults(monkeypatch):
    """Test default settings values."""
    from proxy_printer.config.settings import ProxyPrinterSettings

    for name in ("PP_MAX_DOWNLOAD_WORKERS", "PP_LOG_LEVEL", "PP_MAX_LOOKUP_WORKERS"):
        monkeypatch.delenv(name, raising=False)
    settings = ProxyPrinterSettings(_env_file=None)

    assert settings.max_download_workers == 8
    assert settings.max_lookup_workers == 1
    assert settings.log_level == "INFO"
    assert settings.log_to_file is False
    assert settings.scryfall_api_base == "https://api.scryfall.com"
    assert settings.default_token_copies == 0


def test_settings_paths():
    """Test that path settings are Paths."""
    from proxy_printer.config.settings import settings

    assert isinstance(settings.output_dir, Path)
    assert isinstance(settings.logs_dir, Path)


def test_settings_env_var_override(monkeypatch):
    """Test that environment variables override defaults."""
    monkeypatch.setenv("PP_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("PP_MAX_DOWNLOAD_WORKERS", "16")

    from proxy_printer.config import settings as settings_module

    try:
        settings = settings_module.reload_settings()

        assert settings.log_level == "DEBUG"
        assert settings.max_download_workers == 16
        assert settings_module.settings is settings
    finally:
        monkeypatch.undo()
        settings_module.reload_settings()


def test_settings_validation():
    """Test that settings validation works."""
    from proxy_printer.config.settings import ProxyPrinterSettings

    valid_settings = ProxyPrinterSettings(max_download_workers=10, log_level="WARNING")
    assert valid_settings.max_download_workers == 10
    assert valid_settings.log_level == "WARNING"

    # Invalid max_download_workers (too high)
    with pytest.raises(Exception):  # Pydantic ValidationError
        ProxyPrinterSettings(max_download_workers=100)

    # Invalid log_level
    with pytest.raises(Exception):  # Pydantic ValidationError
        ProxyPrinterSettings(log_level="INVALID")


def test_lookup_worker_bounds():
    """Test that lookup concurrency stays within 1..8."""
    from proxy_printer.config.settings import ProxyPrinterSettings

    ProxyPrinterSettings(max_lookup_workers=8)

    with pytest.raises(Exception):  # Pydantic ValidationError
        ProxyPrinterSettings(max_lookup_workers=0)

    with pytest.raises(Exception):  # Pydantic ValidationError
        ProxyPrinterSettings(max_lookup_workers=9)


def test_base_urls_lose_trailing_slash():
    """Test that API base URLs are normalized."""
    from proxy_printer.config.settings import ProxyPrinterSettings

    settings = ProxyPrinterSettings(
        scryfall_api_base="https://api.scryfall.com/",
        archidekt_api_base="https://archidekt.com//",
    )

    assert settings.scryfall_api_base == "https://api.scryfall.com"
    assert settings.archidekt_api_base == "https://archidekt.com"


def test_log_file_rotation():
    """Test that log rotation settings are configured."""
    from proxy_printer.config.settings import ProxyPrinterSettings

    settings = ProxyPrinterSettings(_env_file=None)

    assert settings.log_rotation == "10 MB"
    assert settings.log_retention == "10 days"


def test_settings_repr():
    """Test that settings has a useful repr."""
    from proxy_printer.config.settings import settings

    repr_str = repr(settings)
    assert "ProxyPrinterSettings" in repr_str
    assert "max_download_workers" in repr_str
