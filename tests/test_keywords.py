"""Tests for keynotes.keywords module."""
import pytest

from keynotes.keywords import KeywordMatch, KeywordSet, build_keyword_matcher


class TestKeywordSet:
    def test_case_insensitive_dedup(self) -> None:
        keywords = KeywordSet()
        first = keywords.add("wimd")
        second = keywords.add("Wimd")
        assert first == second == 0
        assert len(keywords) == 1
        assert keywords.index_of("WIMD") == 0

    def test_keeps_first_spelling(self) -> None:
        keywords = KeywordSet(["Dragon", "dragon"])
        assert list(keywords) == ["Dragon"]

    def test_insertion_order_and_indexes(self) -> None:
        keywords = KeywordSet(["zeta", "alpha", "Mid"])
        assert list(keywords) == ["zeta", "alpha", "Mid"]
        assert keywords[1] == "alpha"
        assert keywords.index_of("mid") == 2

    def test_sorted_is_case_insensitive(self) -> None:
        keywords = KeywordSet(["zeta", "Alpha", "beta"])
        assert keywords.sorted() == ["Alpha", "beta", "zeta"]

    def test_contains(self) -> None:
        keywords = KeywordSet(["Tavern"])
        assert "tavern" in keywords
        assert "inn" not in keywords
        assert 3 not in keywords

    def test_membership_agrees_with_matcher(self) -> None:
        keywords = KeywordSet(["Straße", "Hello"])
        assert "STRASSE" not in keywords
        assert "HELLO" in keywords
        assert "STRAßE" in keywords
        matcher = build_keyword_matcher(keywords)
        assert matcher is not None
        assert matcher.find_all("STRASSE") == []
        assert matcher.find_all("HELLO STRAßE") == [KeywordMatch(1, 0, 5), KeywordMatch(0, 6, 12)]

    def test_unknown_keyword_has_no_index(self) -> None:
        assert KeywordSet().index_of("anything") is None

    def test_empty_keyword_rejected(self) -> None:
        with pytest.raises(ValueError):
            KeywordSet().add("")


class TestBuildKeywordMatcher:
    def test_empty_vocabulary_has_no_matcher(self) -> None:
        assert build_keyword_matcher(KeywordSet()) is None

    def test_longest_keyword_wins(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["cat", "catalog"]))
        assert matcher is not None
        assert matcher.find_all("catalog") == [KeywordMatch(1, 0, 7)]

    def test_prefix_keyword_does_not_shadow(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["hell", "hello"]))
        assert matcher is not None
        matches = matcher.find_all("hello world, hell yes")
        assert matches == [KeywordMatch(1, 0, 5), KeywordMatch(0, 13, 17)]

    def test_word_boundaries(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["cat"]))
        assert matcher is not None
        assert matcher.find_all("concatenate") == []
        assert matcher.find_all("cats") == []
        assert matcher.find_all("a cat.") == [KeywordMatch(0, 2, 5)]

    def test_case_insensitive(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["wimd"]))
        assert matcher is not None
        matches = matcher.find_all("wimd a wimdaa hello Wimd")
        assert [(m.start, m.end) for m in matches] == [(0, 4), (20, 24)]

    def test_multi_word_keyword(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["red", "red dragon"]))
        assert matcher is not None
        assert matcher.find_all("The Red Dragon sleeps") == [KeywordMatch(1, 4, 14)]

    def test_special_characters_escaped(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["a.b"]))
        assert matcher is not None
        assert matcher.find_all("axb") == []
        assert matcher.find_all("see a.b here") == [KeywordMatch(0, 4, 7)]

    def test_matches_do_not_overlap(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["ab cd", "cd ef"]))
        assert matcher is not None
        matches = matcher.find_all("ab cd ef")
        assert matches == [KeywordMatch(0, 0, 5)]

    def test_alternatives_ordered_by_length_then_index(self) -> None:
        matcher = build_keyword_matcher(KeywordSet(["bb", "a", "cc", "dddd"]))
        assert matcher is not None
        pattern = matcher.pattern.pattern
        positions = [pattern.index(f"(?P<k{i}>") for i in (3, 0, 2, 1)]
        assert positions == sorted(positions)
