"""Tests for Settings.from_env."""

from __future__ import annotations

import pytest

from retail_search.config import DEFAULT_SOURCES, Settings
from retail_search.infrastructure.delivery.postal_client import DEFAULT_LOOKUP_URL
from retail_search.shared.exceptions import ConfigurationError


class TestDefaults:
    def test_empty_environment(self):
        settings = Settings.from_env({})
        assert settings.sources == DEFAULT_SOURCES
        assert settings.source_timeout == 10.0
        assert settings.delivery_cache_ttl == 86400
        assert settings.delivery_cache_size == 10_000
        assert settings.lookup_url == DEFAULT_LOOKUP_URL
        assert settings.log_level == "INFO"

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("RETAIL_SEARCH_SOURCE_TIMEOUT", "2.5")
        assert Settings.from_env().source_timeout == 2.5


class TestOverrides:
    def test_all_values(self):
        settings = Settings.from_env(
            {
                "RETAIL_SEARCH_SOURCES": "Amazon, flipkart,,amazon",
                "RETAIL_SEARCH_SOURCE_TIMEOUT": "3",
                "RETAIL_SEARCH_DELIVERY_CACHE_TTL": "60",
                "RETAIL_SEARCH_DELIVERY_CACHE_SIZE": "100",
                "RETAIL_SEARCH_LOOKUP_URL": "https://lookup.test/pincode",
                "RETAIL_SEARCH_LOOKUP_TIMEOUT": "1.5",
                "RETAIL_SEARCH_LOG_LEVEL": "debug",
            }
        )
        assert settings.sources == ("amazon", "flipkart")
        assert settings.source_timeout == 3.0
        assert settings.delivery_cache_ttl == 60.0
        assert settings.delivery_cache_size == 100
        assert settings.lookup_url == "https://lookup.test/pincode"
        assert settings.lookup_timeout == 1.5
        assert settings.log_level == "DEBUG"

    def test_blank_values_use_defaults(self):
        assert Settings.from_env({"RETAIL_SEARCH_SOURCE_TIMEOUT": "  "}).source_timeout == 10.0


class TestInvalid:
    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("RETAIL_SEARCH_SOURCE_TIMEOUT", "soon"),
            ("RETAIL_SEARCH_SOURCE_TIMEOUT", "0"),
            ("RETAIL_SEARCH_SOURCE_TIMEOUT", "-5"),
            ("RETAIL_SEARCH_DELIVERY_CACHE_SIZE", "1.5"),
            ("RETAIL_SEARCH_LOOKUP_TIMEOUT", "nan?"),
            ("RETAIL_SEARCH_SOURCES", " , ,"),
            ("RETAIL_SEARCH_LOG_LEVEL", "LOUD"),
        ],
    )
    def test_raises_configuration_error(self, name, value):
        with pytest.raises(ConfigurationError):
            Settings.from_env({name: value})


def test_to_dict_is_plain():
    data = Settings().to_dict()
    assert data["sources"] == list(DEFAULT_SOURCES)
    assert data["source_timeout"] == 10.0
