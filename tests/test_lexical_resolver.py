from scripture_search.app.services.lexical_resolver import (
    LexicalResolver,
    NoMatch,
    Resolved,
    language_filter,
    simplify_transliteration,
)
from scripture_search.core.query import IndividualSearch, SearchQuery
from scripture_search.core.search_types import SearchType


def _query(search_type: SearchType, term: str, **kwargs) -> SearchQuery:
    return SearchQuery(searches=[IndividualSearch.create(search_type, ["KJV"], term, **kwargs)])


def _resolver(definitions_index, specific_forms_index) -> LexicalResolver:
    return LexicalResolver(definitions_index, specific_forms_index)


def test_simplify_transliteration_collapses_doubles_and_accents():
    assert simplify_transliteration("Agapē") == "agape"
    assert simplify_transliteration("agappe") == "agape"
    assert simplify_transliteration("agap%") == "agap%"


def test_language_filter():
    assert language_filter(True) == ("strongNumber", "G")
    assert language_filter(False) == ("strongNumber", "H")


def test_digits_resolve_without_touching_the_indexes(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)
    sq = _query(SearchType.ORIGINAL_GREEK_FORMS, "26, 25", references="John 3:16")

    resolution = resolver.resolve_forms(sq)

    assert isinstance(resolution, Resolved)
    assert resolution.strongs == ("G0026", "G0025")
    assert resolution.search.query == "+[john 3:16] lemma:g0026 lemma:g0025"
    assert resolution.definitions is None
    assert definitions_index.queries == []
    assert specific_forms_index.single_column_calls == []
    # the stage held by the query is not modified by resolution
    assert sq.current_search.query == "26, 25"


def test_original_form_resolves_through_specific_forms(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_forms(_query(SearchType.ORIGINAL_GREEK_FORMS, "ἀγάπην"))

    assert resolution.strongs == ("G0026",)
    assert resolution.search.query == "lemma:g0026"


def test_lemma_spelling_falls_back_to_the_lexicon(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_forms(_query(SearchType.ORIGINAL_GREEK_FORMS, "ἀγαπάω"))

    assert resolution.strongs == ("G0025",)


def test_transliteration_is_matched_per_language(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_forms(_query(SearchType.ORIGINAL_HEBREW_FORMS, "ahavta"))

    assert resolution.strongs == ("H0157",)
    field_name, value, prefix_filter = specific_forms_index.single_column_calls[-1]
    assert field_name == "simplifiedTransliteration"
    assert value == "ahavta"
    assert prefix_filter == ("strongNumber", "H")


def test_transliteration_falls_back_to_definitions(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_forms(_query(SearchType.ORIGINAL_GREEK_FORMS, "phileo"))

    assert resolution.strongs == ("G5368",)


def test_unknown_term_does_not_match(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_forms(_query(SearchType.ORIGINAL_GREEK_FORMS, "abc123"))

    assert isinstance(resolution, NoMatch)
    assert resolution.term == "abc123"


def test_restriction_filters_resolved_identifiers(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)
    sq = _query(SearchType.ORIGINAL_GREEK_FORMS, "G26 G25", original_filter=["G0025"])

    resolution = resolver.resolve_forms(sq)

    assert resolution.strongs == ("G0025",)
    assert resolution.search.query == "lemma:g0025"


def test_related_unions_direct_and_related_lemmas(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_related(_query(SearchType.ORIGINAL_GREEK_RELATED, "G26"))

    assert resolution.strongs == ("G0026", "G0025")
    assert [entry.strong_number for entry in resolution.definitions] == ["G0026", "G0025"]
    assert resolution.definitions[0].gloss == "love"
    assert resolution.search.query == "lemma:g0026 lemma:g0025"


def test_related_honours_restriction(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)
    sq = _query(SearchType.ORIGINAL_GREEK_RELATED, "G26", original_filter=["G0026"])

    resolution = resolver.resolve_related(sq)

    assert resolution.strongs == ("G0026",)


def test_meaning_matches_translations_and_skips_stop_words(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_meaning(_query(SearchType.ORIGINAL_MEANING, "love", references="Gen 22"))

    assert set(resolution.strongs) == {"G0026", "G0025", "H0157"}
    assert "G3588" not in resolution.strongs
    assert resolution.search.query.startswith("+[gen 22] lemma:")
    assert set(resolution.search.query.split()[1:]) == {"lemma:g0026", "lemma:g0025", "lemma:h0157"}
    assert {entry.strong_number for entry in resolution.definitions} == set(resolution.strongs)


def test_meaning_without_any_lemma_does_not_match(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_meaning(_query(SearchType.ORIGINAL_MEANING, "hatred"))

    assert isinstance(resolution, NoMatch)


def test_restriction_excluding_every_form_does_not_match(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)
    sq = _query(SearchType.ORIGINAL_GREEK_FORMS, "G26", references="John", original_filter=["G0025"])

    resolution = resolver.resolve_forms(sq)

    assert isinstance(resolution, NoMatch)
    assert resolution.term == "G26"


def test_restriction_excluding_every_related_lemma_does_not_match(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)
    sq = _query(SearchType.ORIGINAL_GREEK_RELATED, "G26", references="John", original_filter=["H0157"])

    resolution = resolver.resolve_related(sq)

    assert isinstance(resolution, NoMatch)


def test_meaning_ignores_escaped_query_characters(definitions_index, specific_forms_index):
    resolver = _resolver(definitions_index, specific_forms_index)

    resolution = resolver.resolve_meaning(_query(SearchType.ORIGINAL_MEANING, "kiss*"))

    assert definitions_index.queries[-1] == "-stopWord:true kiss\\* stepGlossStem:kiss\\*"
    assert isinstance(resolution, Resolved)
    assert resolution.strongs == ("G5368",)
