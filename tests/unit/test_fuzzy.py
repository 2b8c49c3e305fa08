"""Unit tests for src/devrun/core/fuzzy.py."""

from __future__ import annotations

import pytest

from devrun.core.fuzzy import (
    SUGGESTION_THRESHOLD,
    find_similar,
    is_exact_match,
    levenshtein_distance,
    similarity_score,
    suggest,
)

SCRIPTS = ["dev", "build", "test", "start"]


class TestLevenshteinDistance:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("", "", 0),
            ("abc", "", 3),
            ("", "abc", 3),
            ("abc", "abc", 0),
            ("abc", "abd", 1),
            ("test", "tset", 2),
            ("kitten", "sitting", 3),
            ("flaw", "lawn", 2),
        ],
    )
    def test_known_distances(self, a: str, b: str, expected: int):
        assert levenshtein_distance(a, b) == expected

    @pytest.mark.parametrize("a, b", [("build", "bild"), ("start", "tart"), ("", "x"), ("lint", "fmt")])
    def test_symmetric(self, a: str, b: str):
        assert levenshtein_distance(a, b) == levenshtein_distance(b, a)

    @pytest.mark.parametrize("a", ["", "a", "build", "dev:watch"])
    def test_identity_and_empty(self, a: str):
        assert levenshtein_distance(a, a) == 0
        assert levenshtein_distance(a, "") == len(a)

    def test_counts_code_points_not_bytes(self):
        # "é" is two bytes in UTF-8 but one character
        assert levenshtein_distance("café", "cafe") == 1
        assert levenshtein_distance("日本", "日") == 1


class TestSimilarityScore:
    def test_identical(self):
        assert similarity_score("abc", "abc") == 1.0

    def test_both_empty(self):
        assert similarity_score("", "") == 1.0

    def test_one_substitution(self):
        assert similarity_score("abc", "abd") == pytest.approx(2 / 3)

    def test_completely_different(self):
        assert similarity_score("abc", "xyz") == 0.0

    def test_uses_character_length(self):
        assert similarity_score("café", "cafe") == pytest.approx(0.75)


class TestFindSimilar:
    def test_typo_ranks_intended_first(self):
        matches = find_similar("tets", SCRIPTS, 0.5)
        assert matches
        assert matches[0][0] == "test"

        matches = find_similar("bild", SCRIPTS, 0.5)
        assert matches[0][0] == "build"

    def test_nothing_below_threshold(self):
        for threshold in (0.0, 0.3, 0.5, 0.8):
            for _, score in find_similar("strt", SCRIPTS, threshold):
                assert score >= threshold

    def test_sorted_descending(self):
        scores = [score for _, score in find_similar("tes", ["t", "tes", "test", "testing"], 0.0)]
        assert scores == sorted(scores, reverse=True)

    def test_ties_keep_input_order(self):
        matches = find_similar("ab", ["ax", "ay", "az"], 0.0)
        assert [name for name, _ in matches] == ["ax", "ay", "az"]

    def test_case_insensitive(self):
        matches = find_similar("BUILD", ["build"], 0.5)
        assert matches == [("build", 1.0)]

    def test_empty_candidates(self):
        assert find_similar("test", [], 0.5) == []


class TestSuggest:
    def test_suggests_test_for_tets(self):
        assert suggest("tets", SCRIPTS) == "test"

    def test_suggests_build_for_bld(self):
        assert suggest("bld", ["dev", "build", "test"]) == "build"

    def test_no_suggestion_when_too_different(self):
        assert suggest("xyz123", ["dev", "build", "test"]) is None

    def test_no_suggestion_for_empty_list(self):
        assert suggest("test", []) is None

    def test_threshold_is_half(self):
        assert SUGGESTION_THRESHOLD == 0.5


class TestIsExactMatch:
    def test_case_insensitive(self):
        scripts = ["dev", "Build"]
        assert is_exact_match("dev", scripts)
        assert is_exact_match("DEV", scripts)
        assert is_exact_match("build", scripts)
        assert not is_exact_match("test", scripts)

    def test_empty_list(self):
        assert not is_exact_match("dev", [])
