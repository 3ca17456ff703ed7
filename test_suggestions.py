"""
test_suggestions.py

Tests for close-match suggestions.
"""

from propath import levenshtein, suggest


class TestLevenshtein:
    """Edit distance."""

    def test_identical(self):
        assert levenshtein("age", "age") == 0

    def test_empty(self):
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3

    def test_classic(self):
        assert levenshtein("kitten", "sitting") == 3

    def test_single_insert(self):
        assert levenshtein("ag", "age") == 1


class TestSuggest:
    """Ranking and filtering of candidate names."""

    def test_single_close_match(self):
        assert suggest("ag", ["age", "name", "spouse"]) == ("age",)

    def test_plural(self):
        assert suggest("names", ["name", "myString", "myStriNg"]) == ("name",)

    def test_case_insensitive_matches(self):
        names = ["name", "myString", "myStrings", "myStriNg", "myStringss"]
        assert suggest("mystring", names) == ("myStriNg", "myString", "myStrings")

    def test_distance_two_still_matches(self):
        names = ["myString", "myStriNg", "myStringss"]
        assert suggest("mystring", names) == ("myStriNg", "myString", "myStringss")

    def test_nothing_close(self):
        assert suggest("zzz", ["name", "age"]) == ()

    def test_exact_name_is_not_suggested(self):
        assert suggest("name", ["name"]) == ()

    def test_other_case_is_suggested(self):
        assert suggest("NAME", ["name"]) == ("name",)

    def test_limit_and_alphabetical_ties(self):
        assert suggest("a", ["e", "d", "c", "b"]) == ("b", "c", "d")

    def test_custom_thresholds(self):
        assert suggest("ag", ["age", "tags"], max_distance=1) == ("age",)
        assert suggest("ag", ["age", "tags"], limit=1) == ("age",)
        assert suggest("ag", ["age", "tags"]) == ("age", "tags")

    def test_empty_name(self):
        assert suggest("", ["a"]) == ()

    def test_duplicates_collapse(self):
        assert suggest("ag", ["age", "age"]) == ("age",)
