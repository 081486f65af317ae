"""Tests for delimiter scanning."""

import re

import pytest

from pagerule.errors import InvalidPattern
from pagerule.scanner import DelimiterSpan, compile_pattern, find_backward, iter_spans, next_after, scan


FF = compile_pattern(r"^\f")


def test_scan_finds_first_occurrence():
    text = "a\n\fb\n\f"
    assert scan(text, FF) == DelimiterSpan(2, 3)


def test_scan_from_position():
    text = "a\n\fb\n\f"
    assert scan(text, FF, 3) == DelimiterSpan(5, 6)
    assert scan(text, FF, 6) is None


def test_caret_anchors_at_line_start_only():
    # A form feed in the middle of a line is not a delimiter
    text = "x\fy\n\f"
    assert list(iter_spans(text, FF)) == [DelimiterSpan(4, 5)]


def test_scan_from_mid_line_does_not_anchor_at_start():
    text = "ab\fc"
    assert scan(text, FF, 2) is None


def test_repeated_scan_enumerates_all_occurrences_in_order():
    text = "\f\nA\n\f\nB\n\f"
    spans = []
    span = scan(text, FF)
    while span is not None:
        spans.append(span)
        span = scan(text, FF, span.end)
    assert spans == [DelimiterSpan(0, 1), DelimiterSpan(4, 5), DelimiterSpan(8, 9)]
    assert list(iter_spans(text, FF)) == spans


def test_iter_spans_non_overlapping():
    pattern = compile_pattern("aa")
    assert list(iter_spans("aaaaa", pattern)) == [DelimiterSpan(0, 2), DelimiterSpan(2, 4)]


def test_iter_spans_respects_end_bound():
    text = "\f\n\f\n\f"
    assert [s.start for s in iter_spans(text, FF, 0, 2)] == [0, 2]


def test_iter_spans_is_restartable():
    text = "\f\nA\n\f"
    gen = iter_spans(text, FF)
    assert next(gen) == DelimiterSpan(0, 1)
    assert list(iter_spans(text, FF)) == [DelimiterSpan(0, 1), DelimiterSpan(4, 5)]


def test_zero_width_matches_are_skipped():
    pattern = compile_pattern(r"(?=b)|c")
    assert list(iter_spans("abc", pattern)) == [DelimiterSpan(2, 3)]


def test_empty_text():
    assert scan("", FF) is None
    assert list(iter_spans("", FF)) == []


def test_find_backward():
    text = "a\n\fb\n\fc"
    assert find_backward(text, FF, 0) is None
    assert find_backward(text, FF, 2) == DelimiterSpan(2, 3)
    assert find_backward(text, FF, 4) == DelimiterSpan(2, 3)
    assert find_backward(text, FF, 7) == DelimiterSpan(5, 6)


def test_next_after():
    text = "\f\na\n\f"
    assert next_after(text, FF, 0) == DelimiterSpan(4, 5)
    assert next_after(text, FF, 4) is None


def test_span_contains_and_len():
    span = DelimiterSpan(3, 5)
    assert 3 in span
    assert 4 in span
    assert 5 not in span
    assert len(span) == 2


def test_compile_accepts_precompiled_pattern():
    pattern = re.compile("x")
    assert compile_pattern(pattern) is pattern


@pytest.mark.parametrize("bad", ["(", "[a-", "a*", "^", ""])
def test_invalid_patterns_raise(bad):
    with pytest.raises(InvalidPattern) as excinfo:
        compile_pattern(bad)
    assert excinfo.value.pattern == bad
