from vebitor_docs.matching import NullMatcher, PlainMatcher, RegexMatcher, build_matcher
from vebitor_docs.models import SearchMode


def test_plain_reports_overlapping_matches():
    assert PlainMatcher("aa", case_sensitive=True).find("aaaa") == [(0, 2), (1, 3), (2, 4)]


def test_plain_case_insensitive():
    assert PlainMatcher("Hello").find("say hello there") == [(4, 9)]


def test_plain_case_sensitive_misses_other_case():
    assert PlainMatcher("Hello", case_sensitive=True).find("say hello there") == []


def test_plain_offsets_are_utf8_bytes():
    # "é" is two bytes, so "cafe" after "café " starts at byte 6.
    assert PlainMatcher("cafe", case_sensitive=True).find("café cafe") == [(6, 10)]


def test_plain_width_uses_original_query_length():
    # "İ" (2 bytes) lowercases to "i̇" (3 bytes); the span width stays 2.
    spans = PlainMatcher("İ").find("xİ")
    assert spans == [(1, 3)]


def test_plain_empty_query_matches_nothing():
    assert PlainMatcher("").find("anything") == []


def test_regex_non_overlapping():
    assert RegexMatcher("aa", case_sensitive=True).find("aaaa") == [(0, 2), (2, 4)]


def test_regex_case_flag():
    assert RegexMatcher("h.llo").find("HELLO hallo") == [(0, 5), (6, 11)]
    assert RegexMatcher("h.llo", case_sensitive=True).find("HELLO hallo") == [(6, 11)]


def test_regex_offsets_are_utf8_bytes():
    assert RegexMatcher(r"\d+", case_sensitive=True).find("é1 ü22") == [(2, 3), (6, 8)]


def test_regex_invalid_pattern_matches_nothing():
    matcher = RegexMatcher("(unbalanced")
    assert matcher.find("(unbalanced") == []
    assert matcher.find("anything") == []


def test_build_matcher_dispatch():
    assert isinstance(build_matcher("plain", "x"), PlainMatcher)
    assert isinstance(build_matcher(SearchMode.REGEX, "x"), RegexMatcher)
    assert isinstance(build_matcher("fuzzy", "x"), NullMatcher)
    assert build_matcher("fuzzy", "x").find("x") == []
