import pytest

from scripture_search.core.query import build_main_range
from scripture_search.core.search_types import SearchType
from scripture_search.core.strongs import (
    canonical_strong,
    get_query_syntax_for_strongs,
    pad_strong_number,
    split_to_strongs,
    starts_like_strong_number,
    strip_accents,
    unaccent,
)


@pytest.mark.parametrize(
    "term, expected",
    [("G26", True), ("26", True), ("h157", True), ("agape", False), ("", False), ("a", False)],
)
def test_starts_like_strong_number(term, expected):
    assert starts_like_strong_number(term) is expected


def test_pad_strong_number_only_touches_prefixed_values():
    assert pad_strong_number("G26") == "G0026"
    assert pad_strong_number("H00157") == "H0157"
    assert pad_strong_number("G1234a") == "G1234a"
    assert pad_strong_number("26") == "26"


def test_bare_numbers_take_the_language_prefix():
    assert canonical_strong("26", SearchType.ORIGINAL_GREEK_FORMS) == "G0026"
    assert canonical_strong("157", SearchType.ORIGINAL_HEBREW_RELATED) == "H0157"
    assert canonical_strong("g26", SearchType.ORIGINAL_HEBREW_FORMS) == "G0026"
    assert canonical_strong("26", SearchType.ORIGINAL_MEANING) == "26"


def test_split_to_strongs_is_ordered_and_unique():
    strongs = split_to_strongs("26, G25;26  g0026", SearchType.ORIGINAL_GREEK_FORMS)

    assert strongs == ("G0026", "G0025")


def test_split_to_strongs_is_deterministic():
    first = split_to_strongs("G26 G25 5368", SearchType.ORIGINAL_GREEK_FORMS)
    second = split_to_strongs("G26 G25 5368", SearchType.ORIGINAL_GREEK_FORMS)

    assert first == second == ("G0026", "G0025", "G5368")


def test_query_syntax_for_strongs_without_range():
    assert get_query_syntax_for_strongs(["G0026", "G0025"]) == "lemma:g0026 lemma:g0025"


def test_query_syntax_for_strongs_with_range():
    query = get_query_syntax_for_strongs(["G0026", "G0025"], build_main_range("John 3"))

    assert query == "+[john 3] lemma:g0026 lemma:g0025"


def test_query_syntax_for_strongs_without_identifiers_keeps_only_the_range():
    assert get_query_syntax_for_strongs([], build_main_range("John")) == "+[john]"
    assert get_query_syntax_for_strongs([]) == ""


def test_strip_accents_keeps_base_letters():
    assert strip_accents("ἀγάπη") == "αγαπη"
    assert strip_accents("agapē") == "agape"


def test_unaccent_by_language():
    assert unaccent("ἀγάπη") == "αγαπη"
    assert unaccent("אָהַב", greek=False) == "אהב"
