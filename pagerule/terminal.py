"""Terminal output using Blessed."""

from typing import Optional, TextIO
import sys

import blessed

from .constants import RuleConstants
from .overrides import RuleStyle
from .view import RuleSegment, TerminalRuleView


class TerminalInterface:
    """Draws rule views on a text terminal."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()

    def is_graphical(self) -> bool:
        """Text terminals cannot strike blanks through, so rules are underlined."""
        return False

    @property
    def width(self) -> int:
        """Terminal width in columns."""
        return self.term.width

    def compose_line(self, line: str, rules: list[RuleSegment], view_width: int) -> str:
        """Compose a display line, drawing rule segments in their style."""
        text = line[:view_width]
        out = []
        last = 0
        for seg in rules:
            if seg.start >= len(text):
                break
            out.append(text[last:seg.start])
            width = min(seg.end, len(text)) - seg.start
            if seg.style is RuleStyle.UNDERLINE and self.term.does_styling:
                out.append(self.term.underline(" " * width))
            else:
                # No strike-through capability on terminals; draw the line itself
                out.append(RuleConstants.RULE_GLYPH * width)
            last = seg.start + width
        out.append(text[last:])
        return "".join(out)

    def draw_view(self, view: TerminalRuleView, stream: Optional[TextIO] = None) -> None:
        """Print every line of a rendered view."""
        stream = stream or sys.stdout
        view_width = view.num_columns
        if not self.term.does_styling:
            for line in view.plain_lines():
                print(line[:view_width], file=stream)
            return
        for row, line in enumerate(view.lines):
            print(self.compose_line(line, view.rules.get(row, []), view_width), file=stream)
