"""
Tests for configuration and display formatting
"""

import pytest

from utils.config import Config
from utils.formatting import format_currency, format_percent


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("HOST", "PORT", "DEBUG", "LOG_LEVEL", "DATA_DIR", "USAGE_BUDGET_USD"):
            monkeypatch.delenv(name, raising=False)

        config = Config.load()

        assert config.host == "127.0.0.1"
        assert config.port == 8000
        assert config.debug is False
        assert config.log_level == "INFO"
        assert config.usage_budget_usd == 5.0

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("DEBUG", "TRUE")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("MAX_CALLS_PER_HOUR", "12")

        config = Config.load()

        assert config.port == 9000
        assert config.debug is True
        assert config.log_level == "DEBUG"
        assert config.max_calls_per_hour == 12

    def test_storage_paths(self, tmp_path):
        config = Config(data_dir=str(tmp_path), analyses_file="a.json", profiles_file="p.json")

        assert config.analyses_path == str(tmp_path / "a.json")
        assert config.profiles_path == str(tmp_path / "p.json")

    def test_to_dict(self):
        data = Config(port=8123).to_dict()

        assert data["port"] == 8123
        assert "max_calls_per_minute" in data


class TestFormatting:

    @pytest.mark.parametrize("amount,currency,expected", [
        (525000, "USD", "$525,000"),
        (1250.6, "GBP", "£1,251"),
        (99, "EUR", "€99"),
        (10, "CAD", "CAD 10"),
        (None, "USD", "N/A"),
    ])
    def test_format_currency(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    def test_format_percent(self):
        assert format_percent(12.345) == "12.3%"
        assert format_percent(30, decimals=0) == "30%"
        assert format_percent(4.2, signed=True) == "+4.2%"
        assert format_percent(-4.2, signed=True) == "-4.2%"
