"""Locate page delimiter occurrences in buffer text.

Everything here is a pure function of the text and the pattern. Results
carry absolute positions, so they go stale after any edit; callers scan
again instead of keeping spans around.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional, Pattern, Union

from .errors import InvalidPattern


@dataclass(frozen=True)
class DelimiterSpan:
    start: int
    end: int

    def __contains__(self, position: int) -> bool:
        return self.start <= position < self.end

    def __len__(self) -> int:
        return self.end - self.start


def compile_pattern(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    """Compile a delimiter pattern with MULTILINE so '^' anchors at line starts.

    Raises:
        InvalidPattern: if the pattern does not compile or matches the empty
            string (such a pattern would match everywhere).
    """
    if isinstance(pattern, re.Pattern):
        compiled = pattern
    else:
        try:
            compiled = re.compile(pattern, re.MULTILINE)
        except (re.error, TypeError) as e:
            raise InvalidPattern(pattern, str(e)) from e
    if compiled.fullmatch("") is not None:
        raise InvalidPattern(pattern, "matches the empty string")
    return compiled


def scan(text: str, pattern: Pattern[str], start: int = 0) -> Optional[DelimiterSpan]:
    """Return the first delimiter occurrence starting at or after start."""
    pos = max(0, start)
    while pos <= len(text):
        m = pattern.search(text, pos)
        if m is None:
            return None
        if m.end() > m.start():
            return DelimiterSpan(m.start(), m.end())
        # Zero-width match (e.g. a lookahead); keep looking past it
        pos = m.start() + 1
    return None


def iter_spans(text: str, pattern: Pattern[str], start: int = 0,
               end: Optional[int] = None) -> Iterator[DelimiterSpan]:
    """Yield non-overlapping occurrences in position order.

    Stops at the first occurrence starting after end, when end is given.
    """
    span = scan(text, pattern, start)
    while span is not None:
        if end is not None and span.start > end:
            return
        yield span
        span = scan(text, pattern, span.end)


def find_backward(text: str, pattern: Pattern[str], position: int) -> Optional[DelimiterSpan]:
    """Return the last occurrence starting at or before position."""
    found = None
    for span in iter_spans(text, pattern, 0, position):
        found = span
    return found


def next_after(text: str, pattern: Pattern[str], position: int) -> Optional[DelimiterSpan]:
    """Return the first occurrence starting strictly after position."""
    return scan(text, pattern, position + 1)
