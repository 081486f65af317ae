"""Capabilities the page rule core needs from the editor hosting a buffer."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Hashable


@dataclass(frozen=True)
class EditEvent:
    """One text mutation: deleted characters at start replaced by inserted ones."""
    start: int
    deleted: int = 0
    inserted: int = 0

    @property
    def old_end(self) -> int:
        """End of the replaced region in the text before the edit."""
        return self.start + self.deleted

    @property
    def new_end(self) -> int:
        """End of the inserted region in the text after the edit."""
        return self.start + self.inserted

    @property
    def delta(self) -> int:
        return self.inserted - self.deleted

    def touches(self, start: int, end: int) -> bool:
        """Whether the edit reaches into the closed range [start, end]."""
        return self.start <= end and self.old_end >= start


EditCallback = Callable[[EditEvent], None]
PointCallback = Callable[[int, int, bool], None]


class BufferHost(ABC):
    """A text buffer as seen by the page rule core.

    The core only reads text through this interface. Everything it writes
    is display metadata: overrides that draw a span as a rule, and
    invisible ranges. Both are identified by the handles the host returns.
    """

    @property
    @abstractmethod
    def text(self) -> str:
        """The whole buffer contents."""

    @property
    @abstractmethod
    def point(self) -> int:
        """The edit point (cursor) position."""

    @abstractmethod
    def set_point(self, position: int, interactive: bool = False) -> None:
        """Move the edit point. Point listeners see the interactive flag."""

    def line_start(self, position: int) -> int:
        return self.text.rfind("\n", 0, position) + 1

    def line_end(self, position: int) -> int:
        text = self.text
        end = text.find("\n", position)
        return len(text) if end == -1 else end

    @abstractmethod
    def subscribe(self, callback: EditCallback) -> Hashable:
        """Call callback synchronously after every edit; return a token."""

    @abstractmethod
    def subscribe_point(self, callback: PointCallback) -> Hashable:
        """Call callback(old, new, interactive) after every point move."""

    @abstractmethod
    def unsubscribe(self, token: Hashable) -> None:
        """Cancel an edit or point subscription."""

    @abstractmethod
    def add_override(self, start: int, end: int, override: Any) -> Hashable:
        """Attach a display override to [start, end)."""

    @abstractmethod
    def move_override(self, handle: Hashable, start: int, end: int) -> None:
        """Re-key an existing override to a new range."""

    @abstractmethod
    def remove_override(self, handle: Hashable) -> None:
        """Detach an override."""

    @abstractmethod
    def add_invisible(self, start: int, end: int) -> Hashable:
        """Stop rendering [start, end)."""

    @abstractmethod
    def move_invisible(self, handle: Hashable, start: int, end: int) -> None:
        """Re-key an invisible range."""

    @abstractmethod
    def remove_invisible(self, handle: Hashable) -> None:
        """Render a previously invisible range again."""

    @abstractmethod
    def is_invisible(self, position: int) -> bool:
        """Whether position falls inside an invisible range."""

    @abstractmethod
    def is_graphical(self) -> bool:
        """True for surfaces that can strike text through, False for text terminals."""

    @abstractmethod
    def is_comment_line(self, position: int) -> bool:
        """Whether the line starting at position begins with a comment."""
