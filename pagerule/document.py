"""In-memory buffer implementing the host interface.

Markers (overrides and invisible ranges) are plain position ranges keyed
by handle. The document never shifts them on edits; their owners re-key
them from the edit notifications they receive.
"""

import itertools
import re
from typing import Any, Hashable, Optional

from .constants import RuleConstants
from .host import BufferHost, EditCallback, EditEvent, PointCallback


class Document(BufferHost):
    """A mutable text buffer with an edit point."""

    def __init__(self, text: str = "", graphical: bool = False,
                 comment_start: Optional[str] = RuleConstants.DEFAULT_COMMENT_START):
        self._text = text
        self._point = 0
        self._graphical = graphical
        self._comment_re = re.compile(comment_start) if comment_start else None
        self._tokens = itertools.count(1)
        self._edit_listeners: dict[int, EditCallback] = {}
        self._point_listeners: dict[int, PointCallback] = {}
        self.overrides: dict[int, tuple[int, int, Any]] = {}
        self.invisible: dict[int, tuple[int, int]] = {}
        self.desired_column: Optional[int] = None  # Column kept across up/down moves

    # --- Host interface ---

    @property
    def text(self) -> str:
        return self._text

    @property
    def point(self) -> int:
        return self._point

    def set_point(self, position: int, interactive: bool = False) -> None:
        old = self._point
        new = self._point = max(0, min(position, len(self._text)))
        if interactive:
            self.desired_column = None
        # Listeners may move the point again; each sees this move as it happened
        for token, callback in list(self._point_listeners.items()):
            if token in self._point_listeners:
                callback(old, new, interactive)

    def subscribe(self, callback: EditCallback) -> Hashable:
        token = next(self._tokens)
        self._edit_listeners[token] = callback
        return token

    def subscribe_point(self, callback: PointCallback) -> Hashable:
        token = next(self._tokens)
        self._point_listeners[token] = callback
        return token

    def unsubscribe(self, token: Hashable) -> None:
        self._edit_listeners.pop(token, None)
        self._point_listeners.pop(token, None)

    def add_override(self, start: int, end: int, override: Any) -> Hashable:
        handle = next(self._tokens)
        self.overrides[handle] = (start, end, override)
        return handle

    def move_override(self, handle: Hashable, start: int, end: int) -> None:
        _, _, override = self.overrides[handle]
        self.overrides[handle] = (start, end, override)

    def remove_override(self, handle: Hashable) -> None:
        self.overrides.pop(handle, None)

    def add_invisible(self, start: int, end: int) -> Hashable:
        handle = next(self._tokens)
        self.invisible[handle] = (start, end)
        return handle

    def move_invisible(self, handle: Hashable, start: int, end: int) -> None:
        self.invisible[handle] = (start, end)

    def remove_invisible(self, handle: Hashable) -> None:
        self.invisible.pop(handle, None)

    def is_invisible(self, position: int) -> bool:
        return any(start <= position < end for start, end in self.invisible.values())

    def is_graphical(self) -> bool:
        return self._graphical

    def is_comment_line(self, position: int) -> bool:
        if self._comment_re is None:
            return False
        line = self._text[position:self.line_end(position)]
        return self._comment_re.match(line) is not None

    # --- Queries used by views ---

    def override_at(self, position: int) -> Optional[tuple[int, int, Any]]:
        for start, end, override in self.overrides.values():
            if start <= position < end:
                return (start, end, override)
        return None

    def sorted_overrides(self) -> list[tuple[int, int, Any]]:
        return sorted(self.overrides.values(), key=lambda item: item[0])

    def invisible_ranges(self) -> list[tuple[int, int]]:
        return sorted(r for r in self.invisible.values() if r[0] < r[1])

    def activate(self, position: int) -> bool:
        """Run the interaction handler of the override at position, if any."""
        found = self.override_at(position)
        if found is None:
            return False
        start, _, override = found
        handler = getattr(override, "on_activate", None)
        if handler is None:
            return False
        handler(start)
        return True

    # --- Editing ---

    def replace(self, start: int, end: int, text: str) -> EditEvent:
        """Replace [start, end) with text and notify edit listeners."""
        start = max(0, min(start, len(self._text)))
        end = max(start, min(end, len(self._text)))
        event = EditEvent(start, end - start, len(text))
        self._text = self._text[:start] + text + self._text[end:]
        if self._point >= event.old_end:
            self._point += event.delta
        elif self._point > start:
            self._point = start
        for token, callback in list(self._edit_listeners.items()):
            if token in self._edit_listeners:
                callback(event)
        return event

    def insert(self, text: str, position: Optional[int] = None) -> EditEvent:
        if position is None:
            position = self._point
        return self.replace(position, position, text)

    def delete(self, start: int, end: int) -> Optional[EditEvent]:
        if end <= start:
            return None
        return self.replace(start, end, "")

    def backspace(self) -> Optional[EditEvent]:
        if self._point == 0:
            return None
        return self.delete(self._point - 1, self._point)

    def delete_char(self) -> Optional[EditEvent]:
        return self.delete(self._point, self._point + 1)

    # --- Interactive navigation ---

    def left_char(self):
        if self._point > 0:
            self.set_point(self._point - 1, interactive=True)

    def right_char(self):
        if self._point < len(self._text):
            self.set_point(self._point + 1, interactive=True)

    def move_beginning_of_line(self):
        self.set_point(self.line_start(self._point), interactive=True)

    def move_end_of_line(self):
        self.set_point(self.line_end(self._point), interactive=True)

    def previous_line(self):
        start = self.line_start(self._point)
        if start == 0:
            return
        self._move_to_line(self.line_start(start - 1))

    def next_line(self):
        end = self.line_end(self._point)
        if end >= len(self._text):
            return
        self._move_to_line(end + 1)

    def _move_to_line(self, target_start: int):
        # Preserve desired column on vertical move
        column = self.desired_column
        if column is None:
            column = self._point - self.line_start(self._point)
        target = min(target_start + column, self.line_end(target_start))
        self.set_point(target, interactive=True)
        self.desired_column = column
