"""Tests for the Textual viewer."""

import asyncio
import sys

from unittest.mock import patch

from pagerule.mode import get_registry
from pagerule.overrides import RuleStyle
from pagerule.settings import RuleSettings
from pagerule.textual_app import PageRuleApp, RULE_STYLES
from pagerule.textual_app import main as textual_main


SAMPLE = "head\n\x0C\n;; Section A\ncode1\n\x0C\n;; Section B\ncode2"


def test_app_creation():
    app = PageRuleApp()
    assert app.filename is None
    assert app.document.text == ""
    assert app.document.is_graphical()


def test_app_with_filename():
    app = PageRuleApp(filename="notes.txt")
    assert app.filename == "notes.txt"


def test_rule_styles_cover_every_style():
    assert set(RULE_STYLES) == set(RuleStyle)
    assert RULE_STYLES[RuleStyle.STRIKE_THROUGH].strike
    assert RULE_STYLES[RuleStyle.UNDERLINE].underline


def test_fold_actions():
    async def scenario():
        app = PageRuleApp(text=SAMPLE)
        async with app.run_test() as pilot:
            doc = app.document
            mode = get_registry().mode_for(doc)
            assert mode is not None
            assert mode.overrides.style is RuleStyle.STRIKE_THROUGH

            app.action_hide_all()
            await pilot.pause()
            assert len(mode.folds.ranges) == 2
            rendered = app.doc_view.render()
            assert ";; Section A..." in rendered.plain.splitlines()

            app.action_show_all()
            await pilot.pause()
            assert mode.folds.ranges == []

            doc.set_point(22)
            app.action_toggle_section()
            assert [r.outer_start for r in mode.folds.ranges] == [5]

            app.action_toggle_mode()
            assert get_registry().mode_for(doc) is None
            assert doc.overrides == {}
            assert doc.invisible == {}

            app.action_toggle_mode()
            assert get_registry().is_enabled(doc)

    asyncio.run(scenario())


def test_save_and_load_file(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_text(SAMPLE, encoding="utf-8")

    async def scenario():
        app = PageRuleApp(filename=str(path))
        async with app.run_test() as pilot:
            assert app.document.text == SAMPLE
            app.document.insert("new\n", 0)
            app.action_save()
            await pilot.pause()

    asyncio.run(scenario())
    assert path.read_text(encoding="utf-8") == "new\n" + SAMPLE


def test_next_section_action():
    async def scenario():
        app = PageRuleApp(text=SAMPLE)
        async with app.run_test():
            app.action_next_section()
            assert app.document.point == 5
            app.action_next_section()
            assert app.document.point == 26
            app.action_next_section()
            assert app.document.point == 26

    asyncio.run(scenario())


def test_cycle_style_saves_settings():
    async def scenario():
        app = PageRuleApp(text=SAMPLE)
        async with app.run_test():
            with patch("pagerule.textual_app.save_settings", return_value=True) as save:
                app.action_cycle_style()
                assert app.settings.rule_style == "strike-through"
                save.assert_called_once_with(app.settings)
                app.action_cycle_style()
            mode = get_registry().mode_for(app.document)
            assert app.settings.rule_style == "underline"
            assert mode.overrides.style is RuleStyle.UNDERLINE

    asyncio.run(scenario())


def test_main_loads_user_settings():
    settings = RuleSettings(rule_style="underline")
    with patch.object(sys, "argv", ["pagerule", "notes.txt"]), \
            patch("pagerule.textual_app.load_settings", return_value=settings), \
            patch("pagerule.textual_app.PageRuleApp") as app_class:
        textual_main()
    app_class.assert_called_once_with(filename="notes.txt", settings=settings)
    app_class.return_value.run.assert_called_once_with()
