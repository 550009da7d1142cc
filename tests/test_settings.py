from scripture_search.app.settings import SearchSettings
from scripture_search.core.search_types import SearchType


def test_defaults():
    settings = SearchSettings()

    assert settings.default_version == "KJV"
    assert settings.page_size == 50
    assert settings.base_version_for(SearchType.ORIGINAL_GREEK_EXACT) == "WHNU"
    assert settings.base_version_for(SearchType.ORIGINAL_HEBREW_EXACT) == "OSMHB"


def test_from_env_reads_prefixed_variables():
    settings = SearchSettings.from_env(
        {
            "SCRIPTURE_SEARCH_DEFAULT_VERSION": "ESV",
            "SCRIPTURE_SEARCH_PAGE_SIZE": "25",
            "SCRIPTURE_SEARCH_GREEK_BASE": "SBLG",
            "SCRIPTURE_SEARCH_LOG_LEVEL": "DEBUG",
            "SCRIPTURE_SEARCH_INDEX_DIR": "/tmp/lexicon",
        }
    )

    assert settings.default_version == "ESV"
    assert settings.page_size == 25
    assert settings.base_version_for(SearchType.ORIGINAL_GREEK_EXACT) == "SBLG"
    assert settings.hebrew_base_version == "OSMHB"
    assert settings.log_level == "DEBUG"
    assert settings.index_dir == "/tmp/lexicon"


def test_from_env_ignores_invalid_values(monkeypatch):
    monkeypatch.setenv("SCRIPTURE_SEARCH_PAGE_SIZE", "-4")
    monkeypatch.setenv("SCRIPTURE_SEARCH_DEFAULT_VERSION", "   ")

    settings = SearchSettings.from_env()

    assert settings.page_size == 50
    assert settings.default_version == "KJV"
