"""Per-buffer page rule mode and the commands exposed to hosts.

Every buffer gets its own PageRuleMode, so enabling, disabling and folding
in one buffer never affects another.
"""

import logging
import weakref
from typing import Callable, Optional

from .errors import HostError
from .folding import FoldController, FoldRange
from .host import BufferHost
from .overrides import OverrideManager, select_rule_style
from .settings import RuleSettings

logger = logging.getLogger(__name__)


class PageRuleMode:
    """Rule overrides and fold state for one buffer."""

    def __init__(self, host: BufferHost, settings: Optional[RuleSettings] = None,
                 on_failure: Optional[Callable[["PageRuleMode"], None]] = None):
        self.host = host
        self.settings = settings or RuleSettings()
        self.overrides: Optional[OverrideManager] = None
        self.folds: Optional[FoldController] = None
        self._on_failure = on_failure

    @property
    def enabled(self) -> bool:
        return self.overrides is not None

    def enable(self) -> None:
        """Install rules and start tracking edits.

        Raises:
            InvalidPattern: the delimiter does not compile; nothing is installed.
            HostError: the host refused an override; nothing is left installed.
        """
        if self.enabled:
            return
        s = self.settings
        folds = FoldController(self.host, s.delimiter, on_failure=self._host_failed)
        overrides = OverrideManager(
            self.host,
            s.delimiter,
            style=select_rule_style(self.host, s.rule_style),
            kick_cursor=s.kick_cursor,
            on_activate=self.toggle_section_at if s.fold_on_click else None,
            on_failure=self._host_failed,
        )
        overrides.enable()
        # Subscribed after the overrides so rules are current when folds resync
        folds.attach()
        self.overrides, self.folds = overrides, folds
        logger.debug(f"Page rule mode enabled ({overrides.style.value} rules)")

    def disable(self) -> None:
        """Remove every rule and hidden range; the buffer displays literally again."""
        overrides, folds = self.overrides, self.folds
        if overrides is None or folds is None:
            return
        try:
            folds.detach()
        except HostError as e:
            logger.warning(f"Could not reveal folded sections: {e}")
        overrides.disable()
        self.overrides = None
        self.folds = None
        logger.debug("Page rule mode disabled")

    def toggle_section_at(self, position: int) -> Optional[FoldRange]:
        if self.folds is None:
            return None
        try:
            return self.folds.toggle_at(position)
        except HostError as e:
            self._host_failed(e)
            return None

    def hide_all_sections(self) -> list[FoldRange]:
        if self.folds is None:
            return []
        try:
            return self.folds.hide_all()
        except HostError as e:
            self._host_failed(e)
            return []

    def show_all_sections(self) -> None:
        if self.folds is None:
            return
        try:
            self.folds.show_all()
        except HostError as e:
            self._host_failed(e)

    def forward_section(self) -> Optional[int]:
        """Move the point to the next delimiter; returns the new point or None."""
        if self.folds is None:
            return None
        target = self.folds.next_section(self.host.point)
        if target is not None:
            self.host.set_point(target)
        return target

    def _host_failed(self, error: HostError) -> None:
        logger.error(f"Host display primitive failed, disabling page rules for this buffer: {error}")
        self.disable()
        if self._on_failure is not None:
            self._on_failure(self)


class ModeRegistry:
    """Tracks which buffers have page rule mode enabled."""

    def __init__(self):
        self._modes: "weakref.WeakKeyDictionary[BufferHost, PageRuleMode]" = weakref.WeakKeyDictionary()

    def enable_mode(self, host: BufferHost, settings: Optional[RuleSettings] = None) -> PageRuleMode:
        """Enable the mode for host; returns the existing mode if already enabled."""
        mode = self._modes.get(host)
        if mode is not None and mode.enabled:
            return mode
        mode = PageRuleMode(host, settings, on_failure=self._forget)
        mode.enable()
        self._modes[host] = mode
        return mode

    def disable_mode(self, host: BufferHost) -> bool:
        mode = self._modes.pop(host, None)
        if mode is None:
            return False
        mode.disable()
        return True

    def mode_for(self, host: BufferHost) -> Optional[PageRuleMode]:
        return self._modes.get(host)

    def is_enabled(self, host: BufferHost) -> bool:
        return host in self._modes

    def _forget(self, mode: PageRuleMode) -> None:
        if self._modes.get(mode.host) is mode:
            del self._modes[mode.host]


# Global instance
_registry: Optional[ModeRegistry] = None


def get_registry() -> ModeRegistry:
    """Get the global mode registry."""
    global _registry
    if _registry is None:
        _registry = ModeRegistry()
    return _registry


# Convenience functions
def enable_mode(host: BufferHost, settings: Optional[RuleSettings] = None) -> PageRuleMode:
    return get_registry().enable_mode(host, settings)


def disable_mode(host: BufferHost) -> bool:
    return get_registry().disable_mode(host)


def is_enabled(host: BufferHost) -> bool:
    return get_registry().is_enabled(host)


def toggle_section_at(host: BufferHost, position: int) -> Optional[FoldRange]:
    mode = get_registry().mode_for(host)
    return mode.toggle_section_at(position) if mode else None


def hide_all_sections(host: BufferHost) -> list[FoldRange]:
    mode = get_registry().mode_for(host)
    return mode.hide_all_sections() if mode else []


def show_all_sections(host: BufferHost) -> None:
    mode = get_registry().mode_for(host)
    if mode:
        mode.show_all_sections()


def forward_section(host: BufferHost) -> Optional[int]:
    mode = get_registry().mode_for(host)
    return mode.forward_section() if mode else None
