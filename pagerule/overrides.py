"""Draw page delimiters as full-width rules.

The manager keeps exactly one display override per delimiter occurrence.
Overrides are derived from scans and recomputed after edits; none of them
outlive an edit to the delimiter they belong to.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Hashable, Optional, Pattern, Union

from .constants import RuleConstants
from .errors import HostError
from .host import BufferHost, EditEvent
from .scanner import DelimiterSpan, compile_pattern, iter_spans

logger = logging.getLogger(__name__)


class RuleStyle(Enum):
    """How a rule is drawn."""
    STRIKE_THROUGH = "strike-through"
    UNDERLINE = "underline"


class CursorPolicy(Enum):
    """What happens when the point lands on a rule."""
    KICK = "kick"
    NONE = "none"


@dataclass
class DisplayOverride:
    style: RuleStyle
    on_activate: Optional[Callable[[int], None]] = None
    cursor_policy: CursorPolicy = CursorPolicy.NONE


def select_rule_style(host: BufferHost, preference: str = RuleConstants.RULE_STYLE_AUTO) -> RuleStyle:
    """Pick a rule style from the setting, or from the host's capability on "auto"."""
    if preference != RuleConstants.RULE_STYLE_AUTO:
        return RuleStyle(preference)
    return RuleStyle.STRIKE_THROUGH if host.is_graphical() else RuleStyle.UNDERLINE


class OverrideManager:
    """Keeps rule overrides in sync with the delimiters in one buffer."""

    def __init__(
        self,
        host: BufferHost,
        pattern: Union[str, Pattern[str]] = RuleConstants.DEFAULT_DELIMITER,
        style: Optional[RuleStyle] = None,
        kick_cursor: bool = False,
        on_activate: Optional[Callable[[int], None]] = None,
        on_failure: Optional[Callable[[HostError], None]] = None,
    ):
        self.host = host
        self.style = style if style is not None else select_rule_style(host)
        self.kick_cursor = kick_cursor
        self._pattern_source = pattern
        self._pattern: Optional[Pattern[str]] = None
        self._on_activate = on_activate
        self._on_failure = on_failure
        # Installed overrides keyed by span start
        self._installed: dict[int, tuple[DelimiterSpan, Hashable]] = {}
        self._edit_token: Optional[Hashable] = None
        self._point_token: Optional[Hashable] = None

    @property
    def enabled(self) -> bool:
        return self._edit_token is not None

    @property
    def spans(self) -> list[DelimiterSpan]:
        return [self._installed[pos][0] for pos in sorted(self._installed)]

    def enable(self) -> None:
        if self.enabled:
            return
        # Compile first so an invalid pattern leaves nothing behind
        self._pattern = compile_pattern(self._pattern_source)
        self._edit_token = self.host.subscribe(self.on_edit)
        if self.kick_cursor:
            self._point_token = self.host.subscribe_point(self.on_point_moved)
        try:
            self._rescan(0, len(self.host.text))
        except HostError:
            self.disable()
            raise
        logger.debug(f"Installed {len(self._installed)} rule overrides")

    def disable(self) -> None:
        for span, handle in self._installed.values():
            try:
                self.host.remove_override(handle)
            except HostError as e:
                logger.warning(f"Could not remove rule override at {span.start}: {e}")
        self._installed.clear()
        if self._edit_token is not None:
            self.host.unsubscribe(self._edit_token)
            self._edit_token = None
        if self._point_token is not None:
            self.host.unsubscribe(self._point_token)
            self._point_token = None

    def on_edit(self, event: Optional[EditEvent]) -> None:
        """Resync overrides after an edit; event None means "anything may have changed"."""
        if not self.enabled:
            return
        try:
            if event is None:
                self._rescan(0, len(self.host.text))
            else:
                self._shift(event)
                self._rescan(self.host.line_start(event.start), self.host.line_end(event.new_end))
        except HostError as e:
            if self._on_failure is None:
                raise
            self._on_failure(e)

    def override_at(self, position: int) -> Optional[DelimiterSpan]:
        for span, _ in self._installed.values():
            if position in span:
                return span
        return None

    def activate(self, position: int) -> bool:
        """Run the interaction handler for the rule under position."""
        span = self.override_at(position)
        if span is None or self._on_activate is None:
            return False
        self._on_activate(span.start)
        return True

    def on_point_moved(self, old: int, new: int, interactive: bool) -> None:
        """Kick the point off a rule it was moved onto interactively."""
        if not (interactive and self.kick_cursor) or new == old:
            return
        span = self.override_at(new)
        if span is None:
            return
        target = span.end if new > old else span.start - 1
        target = max(0, min(target, len(self.host.text)))
        if target != new:
            # Non-interactive, so this move is never kicked again
            self.host.set_point(target, interactive=False)

    def _make_override(self) -> DisplayOverride:
        policy = CursorPolicy.KICK if self.kick_cursor else CursorPolicy.NONE
        return DisplayOverride(self.style, self._on_activate, policy)

    def _install(self, span: DelimiterSpan) -> None:
        handle = self.host.add_override(span.start, span.end, self._make_override())
        self._installed[span.start] = (span, handle)

    def _shift(self, event: EditEvent) -> None:
        installed: dict[int, tuple[DelimiterSpan, Hashable]] = {}
        for span, handle in self._installed.values():
            if span.end <= event.start:
                installed[span.start] = (span, handle)
            elif span.start >= event.old_end:
                moved = DelimiterSpan(span.start + event.delta, span.end + event.delta)
                self.host.move_override(handle, moved.start, moved.end)
                installed[moved.start] = (moved, handle)
            else:
                # The delimiter itself was edited
                self.host.remove_override(handle)
        self._installed = installed

    def _rescan(self, start: int, end: int) -> None:
        if self._pattern is None:
            return
        found = {span.start: span for span in iter_spans(self.host.text, self._pattern, start, end)}
        for pos in [p for p in self._installed if start <= p <= end]:
            span, handle = self._installed[pos]
            if found.get(pos) != span:
                self.host.remove_override(handle)
                del self._installed[pos]
        for pos, span in found.items():
            if pos not in self._installed:
                self._install(span)
