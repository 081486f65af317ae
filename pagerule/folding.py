"""Fold the sections between page delimiters.

A section runs from a delimiter to the newline before the next delimiter,
or to the end of the buffer. Folding a section hides its body and leaves
the delimiter line and the comment lines directly after it visible as a
title. Hidden ranges are dropped as soon as an edit touches them, so a
folded section never hides text that changed since it was folded.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Hashable, Optional, Pattern, Union

from .constants import RuleConstants
from .errors import HostError, InconsistentRangeState
from .host import BufferHost, EditEvent
from .scanner import compile_pattern, find_backward, iter_spans, next_after, scan

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class FoldRange:
    """A hidden section; text in [inner_start, end) is not rendered."""
    outer_start: int
    inner_start: int
    end: int
    hidden: bool = True
    handle: Optional[Hashable] = field(default=None, repr=False)

    @property
    def bounds(self) -> tuple[int, int, int]:
        return (self.outer_start, self.inner_start, self.end)

    def contains(self, position: int) -> bool:
        return self.outer_start <= position <= self.end

    def overlaps(self, other: "FoldRange") -> bool:
        return self.outer_start <= other.end and other.outer_start <= self.end

    def shift(self, delta: int) -> None:
        self.outer_start += delta
        self.inner_start += delta
        self.end += delta


class FoldController:
    """Owns the hidden sections of one buffer."""

    def __init__(
        self,
        host: BufferHost,
        pattern: Union[str, Pattern[str]] = RuleConstants.DEFAULT_DELIMITER,
        on_failure: Optional[Callable[[HostError], None]] = None,
    ):
        self.host = host
        self._pattern = compile_pattern(pattern)
        self._on_failure = on_failure
        self._ranges: list[FoldRange] = []
        self._token: Optional[Hashable] = None

    @property
    def ranges(self) -> list[FoldRange]:
        """Hidden ranges in buffer order."""
        return sorted(self._ranges, key=lambda r: r.outer_start)

    def attach(self) -> None:
        if self._token is None:
            self._token = self.host.subscribe(self.on_edit)

    def detach(self) -> None:
        try:
            self.show_all()
        finally:
            if self._token is not None:
                self.host.unsubscribe(self._token)
                self._token = None

    def range_at(self, position: int) -> Optional[FoldRange]:
        for rng in self._ranges:
            if rng.contains(position):
                return rng
        return None

    def hide_all(self, point: Optional[int] = None) -> list[FoldRange]:
        """Fold every section except the ones around point.

        Sections are compared by their closed extent from delimiter to the
        next delimiter, so a point sitting on a delimiter keeps both the
        section it starts and the section before it open.
        """
        if point is None:
            point = self.host.point
        self.show_all()
        text = self.host.text
        spans = list(iter_spans(text, self._pattern))
        for i, span in enumerate(spans):
            next_start = spans[i + 1].start if i + 1 < len(spans) else None
            section_end = len(text) if next_start is None else next_start
            if span.start <= point <= section_end:
                continue
            self._adopt(self._build_range(span.start, next_start))
        logger.debug(f"Folded {len(self._ranges)} of {len(spans)} sections")
        return self.ranges

    def show_all(self) -> None:
        ranges, self._ranges = self._ranges, []
        for rng in ranges:
            self._release(rng)

    def show(self, rng: FoldRange) -> bool:
        """Unfold one range. Returns False if it was not folded."""
        for i, existing in enumerate(self._ranges):
            if existing is rng:
                del self._ranges[i]
                self._release(rng)
                return True
        return False

    def toggle_at(self, position: int) -> Optional[FoldRange]:
        """Unfold the range at position, or fold the section around it.

        Returns the new range when one was created.
        """
        existing = self.range_at(position)
        if existing is not None:
            self.show(existing)
            return None
        rng = self.section_at(position)
        return self._adopt(rng)

    def section_at(self, position: int) -> FoldRange:
        """Compute (without folding) the section enclosing position."""
        text = self.host.text
        position = max(0, min(position, len(text)))
        delimiter = find_backward(text, self._pattern, position)
        if delimiter is None:
            # Text before the first delimiter forms a section of its own
            following = scan(text, self._pattern, 0)
            outer = 0
        else:
            following = scan(text, self._pattern, delimiter.end)
            outer = delimiter.start
        return self._build_range(outer, following.start if following else None)

    def next_section(self, position: int) -> Optional[int]:
        """Start of the first delimiter after position, or None past the last one."""
        span = next_after(self.host.text, self._pattern, position)
        return span.start if span else None

    def on_edit(self, event: Optional[EditEvent]) -> None:
        try:
            if event is None:
                self.show_all()
                return
            survivors = []
            for rng in self._ranges:
                if event.touches(rng.outer_start, rng.end):
                    logger.debug(f"Edit at {event.start} revealed section at {rng.outer_start}")
                    self._release(rng)
                    continue
                if rng.outer_start > event.old_end:
                    rng.shift(event.delta)
                    if rng.handle is not None:
                        self.host.move_invisible(rng.handle, rng.inner_start, rng.end)
                elif self.section_at(rng.outer_start).bounds != rng.bounds:
                    # The delimiter closing this section was edited
                    logger.debug(f"Edit at {event.start} moved the end of section at {rng.outer_start}")
                    self._release(rng)
                    continue
                survivors.append(rng)
            self._ranges = survivors
        except HostError as e:
            if self._on_failure is None:
                raise
            self._on_failure(e)

    def _build_range(self, outer: int, next_start: Optional[int]) -> FoldRange:
        text = self.host.text
        end = len(text) if next_start is None else next_start
        # Leave the newline before the next delimiter visible
        if next_start is not None and end > outer and text[end - 1] == "\n":
            end -= 1
        return FoldRange(outer, self._title_end(outer, end), end)

    def _title_end(self, outer: int, end: int) -> int:
        inner = self.host.line_end(outer)
        while inner < end:
            line = inner + 1
            if line >= end or not self.host.is_comment_line(line):
                break
            inner = self.host.line_end(line)
        return min(inner, end)

    def _check_consistency(self, candidate: FoldRange) -> None:
        for rng in self._ranges:
            if rng.overlaps(candidate):
                raise InconsistentRangeState(
                    f"Fold range {rng.bounds} overlaps {candidate.bounds}", offending=rng)

    def _adopt(self, rng: FoldRange) -> FoldRange:
        while True:
            try:
                self._check_consistency(rng)
                break
            except InconsistentRangeState as e:
                logger.warning(f"{e}; discarding it and rescanning")
                self.show(e.offending)
                rng = self.section_at(rng.outer_start)
        if rng.inner_start < rng.end:
            rng.handle = self.host.add_invisible(rng.inner_start, rng.end)
        self._ranges.append(rng)
        return rng

    def _release(self, rng: FoldRange) -> None:
        rng.hidden = False
        if rng.handle is not None:
            self.host.remove_invisible(rng.handle)
            rng.handle = None
