from typing import NamedTuple, Optional

from .constants import RuleConstants
from .document import Document
from .overrides import RuleStyle


class RuleSegment(NamedTuple):
    """Columns [start, end) of a display row drawn as a rule."""
    start: int
    end: int
    style: RuleStyle


class TerminalRuleView:
    """Lays a document out as display rows.

    Invisible text is left out and marked with an ellipsis. A delimiter
    with an override is drawn as blanks stretching to the right edge,
    recorded in ``rules`` so renderers can style them as a rule.
    """
    num_columns: int
    lines: list[str]
    rules: dict[int, list[RuleSegment]]
    positions: list[list[int]]

    def __init__(self, document: Document, num_columns: int = RuleConstants.DEFAULT_WIDTH):
        self.document = document
        self.num_columns = num_columns
        self.lines = []
        self.rules = {}
        self.positions = []

    def render(self):
        """Rebuild lines, rules and the column-to-position map."""
        doc = self.document
        text = doc.text
        hidden = doc.invisible_ranges()
        overrides = {start: (end, override) for start, end, override in doc.sorted_overrides()}
        self.lines, self.rules, self.positions = [], {}, []

        row_chars: list[str] = []
        row_positions: list[int] = []
        row_rules: list[tuple[int, int, RuleStyle]] = []  # (column, span start, style)

        def commit(end_position: int):
            self._commit_row(row_chars, row_positions, row_rules, end_position)
            row_chars.clear()
            row_positions.clear()
            row_rules.clear()

        pos = 0
        hidden_index = 0
        while pos < len(text):
            while hidden_index < len(hidden) and hidden[hidden_index][1] <= pos:
                hidden_index += 1
            if hidden_index < len(hidden) and hidden[hidden_index][0] <= pos:
                row_chars.extend(RuleConstants.ELLIPSIS)
                row_positions.extend([pos] * len(RuleConstants.ELLIPSIS))
                pos = hidden[hidden_index][1]
                continue
            if pos in overrides:
                end, override = overrides[pos]
                row_rules.append((len(row_chars), pos, override.style))
                pos = max(end, pos + 1)
                continue
            ch = text[pos]
            if ch == "\n":
                commit(pos)
            else:
                row_chars.append(ch)
                row_positions.append(pos)
            pos += 1
        commit(len(text))

    def _commit_row(self, chars, positions, rules, end_position: int):
        chars = list(chars)
        positions = list(positions)
        segments = []
        # Insert from the right so earlier columns stay valid
        for i, (column, span_start, style) in reversed(list(enumerate(rules))):
            if i == 0:
                width = max(1, self.num_columns - len(chars))
            else:
                width = 1
            chars[column:column] = [" "] * width
            positions[column:column] = [span_start] * width
            segments.append((column, width, style))
        row = len(self.lines)
        if segments:
            # Each rule moves right by the widths of the rules before it
            placed = []
            offset = 0
            for column, width, style in reversed(segments):
                placed.append(RuleSegment(column + offset, column + offset + width, style))
                offset += width
            self.rules[row] = placed
        positions.append(end_position)
        self.lines.append("".join(chars))
        self.positions.append(positions)

    def plain_lines(self) -> list[str]:
        """Lines with rules drawn as box-drawing glyphs, for unstyled output."""
        out = []
        for row, line in enumerate(self.lines):
            for seg in self.rules.get(row, []):
                line = line[:seg.start] + RuleConstants.RULE_GLYPH * (seg.end - seg.start) + line[seg.end:]
            out.append(line)
        return out

    def position_at(self, row: int, column: int) -> Optional[int]:
        """Buffer position shown at a display cell, or None outside the document."""
        if row < 0 or row >= len(self.positions):
            return None
        positions = self.positions[row]
        return positions[max(0, min(column, len(positions) - 1))]

    def cursor_location(self) -> tuple[int, int]:
        """Display (row, column) of the document's point."""
        point = self.document.point
        for row, positions in enumerate(self.positions):
            for column, position in enumerate(positions):
                if position >= point:
                    return (row, column)
        last = len(self.positions) - 1
        return (last, len(self.positions[last]) - 1)
