"""Tests for rule overrides and their resync after edits."""

import pytest
from unittest.mock import Mock

from pagerule.document import Document
from pagerule.errors import HostError, InvalidPattern
from pagerule.overrides import CursorPolicy, DisplayOverride, OverrideManager, RuleStyle, select_rule_style
from pagerule.scanner import DelimiterSpan


def make(text, **kwargs):
    doc = Document(text)
    manager = OverrideManager(doc, **kwargs)
    manager.enable()
    return doc, manager


def override_starts(doc):
    return [start for start, _, _ in doc.sorted_overrides()]


def test_enable_installs_one_override_per_delimiter():
    doc, manager = make("a\n\fb\n\fc\n")
    assert override_starts(doc) == [2, 5]
    assert manager.spans == [DelimiterSpan(2, 3), DelimiterSpan(5, 6)]
    start, end, override = doc.sorted_overrides()[0]
    assert (start, end) == (2, 3)
    assert isinstance(override, DisplayOverride)


def test_enable_is_idempotent():
    doc, manager = make("\f\n\f")
    manager.enable()
    assert len(doc.overrides) == 2
    assert len(doc._edit_listeners) == 1


def test_disable_removes_everything():
    doc, manager = make("\f\nx\n\f", kick_cursor=True)
    manager.disable()
    assert doc.overrides == {}
    assert doc._edit_listeners == {}
    assert doc._point_listeners == {}
    assert not manager.enabled


def test_invalid_pattern_installs_nothing():
    doc = Document("\f\n")
    manager = OverrideManager(doc, pattern="(")
    with pytest.raises(InvalidPattern):
        manager.enable()
    assert doc.overrides == {}
    assert doc._edit_listeners == {}


def test_style_follows_display_capability():
    assert select_rule_style(Document(graphical=True)) is RuleStyle.STRIKE_THROUGH
    assert select_rule_style(Document(graphical=False)) is RuleStyle.UNDERLINE
    assert select_rule_style(Document(graphical=True), "underline") is RuleStyle.UNDERLINE


def test_explicit_style_and_cursor_policy():
    doc, _ = make("\f", style=RuleStyle.STRIKE_THROUGH, kick_cursor=True)
    _, _, override = doc.sorted_overrides()[0]
    assert override.style is RuleStyle.STRIKE_THROUGH
    assert override.cursor_policy is CursorPolicy.KICK


def test_insert_before_delimiter_shifts_override():
    doc, manager = make("a\n\fb")
    doc.insert("XYZ", 0)
    assert override_starts(doc) == [5]
    assert manager.spans == [DelimiterSpan(5, 6)]


def test_new_delimiter_gets_override():
    doc, manager = make("a\nb\n")
    doc.insert("\f", 2)
    assert override_starts(doc) == [2]


def test_deleted_delimiter_loses_override():
    doc, manager = make("a\n\fb\n\fc")
    doc.delete(2, 3)
    assert override_starts(doc) == [4]


def test_delimiter_pushed_off_line_start_loses_override():
    doc, manager = make("a\n\fb")
    doc.insert("x", 2)
    assert override_starts(doc) == []


def test_joining_lines_removes_override():
    doc, manager = make("a\n\fb")
    doc.delete(1, 2)
    assert doc.text == "a\fb"
    assert override_starts(doc) == []


def test_edit_after_delimiter_keeps_handle():
    doc, manager = make("\f\nabc")
    handle = next(iter(doc.overrides))
    doc.insert("zzz", 4)
    assert list(doc.overrides) == [handle]


def test_full_rescan_when_no_range_given():
    doc, manager = make("a\n")
    doc._text = "\f\n\f"
    manager.on_edit(None)
    assert override_starts(doc) == [0, 2]


def test_edits_before_enable_are_ignored():
    doc = Document("\f\n")
    manager = OverrideManager(doc)
    assert manager.style is RuleStyle.UNDERLINE
    manager.on_edit(None)
    manager._rescan(0, len(doc.text))
    assert doc.overrides == {}


def test_activate_calls_handler_with_span_start():
    handler = Mock()
    doc, manager = make("x\n\f\n", on_activate=handler)
    assert manager.activate(2)
    handler.assert_called_once_with(2)
    assert not manager.activate(0)


def test_activate_without_handler():
    doc, manager = make("\f\n")
    assert not manager.activate(0)


def test_host_failure_during_edit_reported():
    failures = []
    doc, manager = make("a\n", on_failure=failures.append)
    doc.add_override = Mock(side_effect=HostError("no overlays"))
    doc.insert("\f", 2)
    assert len(failures) == 1
    assert isinstance(failures[0], HostError)


def test_host_failure_during_edit_raises_without_callback():
    doc, manager = make("a\n")
    doc.add_override = Mock(side_effect=HostError("no overlays"))
    with pytest.raises(HostError):
        doc.insert("\f", 2)


def test_host_failure_during_enable_leaves_no_state():
    doc = Document("\f\n\f")
    real_add = doc.add_override
    calls = []

    def flaky(start, end, override):
        calls.append(start)
        if len(calls) == 2:
            raise HostError("out of overlays")
        return real_add(start, end, override)

    doc.add_override = flaky
    manager = OverrideManager(doc)
    with pytest.raises(HostError):
        manager.enable()
    assert doc.overrides == {}
    assert doc._edit_listeners == {}
    assert not manager.enabled
