"""
Tests for the source registry.

Run: python3 -m pytest sources/__tests__/test_registry.py -v
"""

from unittest.mock import MagicMock

import pytest

from sources.greenhouse import GreenhouseSource
from sources.registry import get_enabled_sources, get_source, list_sources
from sources.remotive import RemotiveSource


def mock_settings(enabled=None, api_keys=None):
    settings = MagicMock()
    settings.get_enabled_sources.return_value = enabled or []
    settings.get_api_key.side_effect = lambda key: (api_keys or {}).get(key, "")
    settings.MAX_POSTINGS_PER_SOURCE = 20
    settings.SOURCE_TIMEOUT_SECONDS = 5.0
    settings.SOURCE_FETCH_RETRIES = 2
    settings.SOURCE_RETRY_DELAY_SECONDS = 0.5
    settings.USER_AGENT = "test-agent"
    return settings


class TestGetSource:
    """Tests for get_source() and list_sources()."""

    def test_lists_every_adapter(self):
        assert list_sources() == [
            "remotive", "remoteok", "arbeitnow", "greenhouse", "lever",
            "themuse", "reed", "adzuna", "jsearch",
        ]

    def test_case_insensitive_lookup(self):
        assert isinstance(get_source(" Greenhouse "), GreenhouseSource)

    def test_unknown_source(self):
        with pytest.raises(ValueError, match="Unknown source"):
            get_source("monster")


class TestGetEnabledSources:
    """Tests for get_enabled_sources()."""

    def test_all_keyless_sources_by_default(self):
        sources = get_enabled_sources(mock_settings())

        assert [s.name for s in sources] == [
            "remotive", "remoteok", "arbeitnow", "greenhouse", "lever", "themuse",
        ]

    def test_keyed_source_included_when_configured(self):
        sources = get_enabled_sources(mock_settings(api_keys={"REED_API_KEY": "k"}))

        reed = [s for s in sources if s.name == "reed"]
        assert len(reed) == 1
        assert reed[0].config.api_key == "k"

    def test_two_part_credentials_require_both_keys(self):
        only_id = get_enabled_sources(mock_settings(api_keys={"ADZUNA_APP_ID": "id"}))
        both = get_enabled_sources(mock_settings(api_keys={"ADZUNA_APP_ID": "id", "ADZUNA_API_KEY": "key"}))

        assert "adzuna" not in [s.name for s in only_id]
        adzuna = [s for s in both if s.name == "adzuna"][0]
        assert adzuna.config.api_key == "id"
        assert adzuna.config.api_secret == "key"

    def test_optional_key_is_passed_when_configured(self):
        without = get_enabled_sources(mock_settings(enabled=["themuse"]))
        with_key = get_enabled_sources(mock_settings(enabled=["themuse"], api_keys={"MUSE_API_KEY": "m"}))

        assert without[0].config.api_key is None
        assert with_key[0].config.api_key == "m"

    def test_rapidapi_source_needs_key(self):
        sources = get_enabled_sources(mock_settings(enabled=["jsearch"], api_keys={"RAPIDAPI_KEY": "r"}))

        assert [s.name for s in sources] == ["jsearch"]
        assert get_enabled_sources(mock_settings(enabled=["jsearch"])) == []

    def test_enabled_list_narrows_and_ignores_unknown(self):
        sources = get_enabled_sources(mock_settings(enabled=["remotive", "monster"]))

        assert len(sources) == 1
        assert isinstance(sources[0], RemotiveSource)

    def test_config_comes_from_settings(self):
        source = get_enabled_sources(mock_settings(enabled=["remotive"]))[0]

        assert source.config.max_postings == 20
        assert source.config.timeout == 5.0
        assert source.config.retries == 2
        assert source.config.user_agent == "test-agent"
        assert source.config.api_key is None
