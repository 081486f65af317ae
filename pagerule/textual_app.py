"""Textual app showing a document with page rules and foldable sections."""

from dataclasses import replace
from pathlib import Path

from rich.style import Style
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widget import Widget
from textual.widgets import Footer, Header

from .constants import RuleConstants
from .document import Document
from .errors import PageRuleError
from .mode import (
    disable_mode,
    enable_mode,
    forward_section,
    hide_all_sections,
    is_enabled,
    show_all_sections,
    toggle_section_at,
)
from .overrides import RuleStyle
from .settings import RuleSettings, load_settings, save_settings
from .view import TerminalRuleView

RULE_STYLES = {
    RuleStyle.STRIKE_THROUGH: Style(strike=True),
    RuleStyle.UNDERLINE: Style(underline=True),
}


class RuleDocumentView(Widget, can_focus=True):
    """Renders a Document through TerminalRuleView and edits it from keys."""

    DEFAULT_CSS = """
    RuleDocumentView {
        height: 1fr;
    }
    """

    def __init__(self, document: Document, **kwargs):
        super().__init__(**kwargs)
        self.document = document
        self.view = TerminalRuleView(document)

    def render(self) -> Text:
        self.view.num_columns = max(1, self.size.width)
        self.view.render()
        cursor_row, cursor_col = self.view.cursor_location()
        text = Text()
        for row, line in enumerate(self.view.lines):
            line_text = Text(line)
            for seg in self.view.rules.get(row, []):
                line_text.stylize(RULE_STYLES[seg.style], seg.start, seg.end)
            if row == cursor_row and self.has_focus:
                if cursor_col >= len(line):
                    line_text.append(" ")
                line_text.stylize("reverse", cursor_col, cursor_col + 1)
            if row:
                text.append("\n")
            text.append_text(line_text)
        return text

    def on_key(self, event: events.Key) -> None:
        doc = self.document
        handlers = {
            "left": doc.left_char,
            "right": doc.right_char,
            "up": doc.previous_line,
            "down": doc.next_line,
            "home": doc.move_beginning_of_line,
            "end": doc.move_end_of_line,
            "backspace": doc.backspace,
            "delete": doc.delete_char,
            "enter": lambda: doc.insert("\n"),
        }
        if event.key in handlers:
            handlers[event.key]()
        elif event.is_printable and event.character:
            doc.insert(event.character)
        else:
            return
        event.stop()
        self.refresh()

    def on_click(self, event: events.Click) -> None:
        position = self.view.position_at(event.y, event.x)
        if position is None:
            return
        # Clicking a rule folds or unfolds its section
        if not self.document.activate(position):
            self.document.set_point(position, interactive=True)
        self.refresh()


class PageRuleApp(App):
    """Textual app hosting one document."""

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+s", "save", "Save"),
        Binding("ctrl+t", "toggle_section", "Fold"),
        Binding("ctrl+o", "hide_all", "Fold all"),
        Binding("ctrl+e", "show_all", "Unfold all"),
        Binding("ctrl+r", "toggle_mode", "Rules"),
        Binding("ctrl+n", "next_section", "Next page"),
        Binding("ctrl+y", "cycle_style", "Rule style"),
    ]

    def __init__(self, filename=None, text=None, settings=None):
        super().__init__()
        self.filename = filename
        self.settings = settings or RuleSettings()
        # Textual can strike text through, so "auto" rules are struck-through blanks
        self.document = Document(text or "", graphical=True)
        self.doc_view = None

    def compose(self) -> ComposeResult:
        """Create widgets."""
        yield Header()
        self.doc_view = RuleDocumentView(self.document)
        yield self.doc_view
        yield Footer()

    def on_mount(self) -> None:
        """Load the file and turn page rules on."""
        if self.filename and Path(self.filename).exists():
            try:
                content = Path(self.filename).read_text(encoding="utf-8")
                self.document.replace(0, len(self.document.text), content)
                self.sub_title = f"Editing: {self.filename}"
            except OSError as e:
                self.notify(f"Error loading file: {e}", severity="error")
        self._enable()
        self.doc_view.focus()

    def _enable(self) -> None:
        try:
            enable_mode(self.document, self.settings)
        except PageRuleError as e:
            self.notify(str(e), severity="error")

    def _redraw(self) -> None:
        if self.doc_view is not None:
            self.doc_view.refresh()

    def action_toggle_section(self) -> None:
        toggle_section_at(self.document, self.document.point)
        self._redraw()

    def action_hide_all(self) -> None:
        hide_all_sections(self.document)
        self._redraw()

    def action_show_all(self) -> None:
        show_all_sections(self.document)
        self._redraw()

    def action_toggle_mode(self) -> None:
        if is_enabled(self.document):
            disable_mode(self.document)
        else:
            self._enable()
        self._redraw()

    def action_next_section(self) -> None:
        if forward_section(self.document) is None:
            self.notify("No more pages")
        self._redraw()

    def action_cycle_style(self) -> None:
        """Switch to the next rule style and remember it."""
        choices = RuleConstants.RULE_STYLE_CHOICES
        current = choices.index(self.settings.rule_style)
        self.settings = replace(self.settings, rule_style=choices[(current + 1) % len(choices)])
        if not save_settings(self.settings):
            self.notify("Could not save settings", severity="warning")
        if is_enabled(self.document):
            disable_mode(self.document)
            self._enable()
        self.sub_title = f"Rules: {self.settings.rule_style}"
        self._redraw()

    def action_save(self) -> None:
        """Save the file."""
        if not self.filename:
            self.notify("No filename set", severity="warning")
            return

        try:
            Path(self.filename).write_text(self.document.text, encoding="utf-8")
            self.notify(f"Saved to {self.filename}")
        except OSError as e:
            self.notify(f"Error saving: {e}", severity="error")


def main():
    """Run the Textual app."""
    import sys
    filename = sys.argv[1] if len(sys.argv) > 1 else None
    app = PageRuleApp(filename=filename, settings=load_settings())
    app.run()


if __name__ == "__main__":
    main()
