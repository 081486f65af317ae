"""Pagerule - draw page delimiters as rules and fold the sections between them."""

from .document import Document
from .errors import HostError, InconsistentRangeState, InvalidPattern, PageRuleError
from .folding import FoldController, FoldRange
from .host import BufferHost, EditEvent
from .mode import (
    PageRuleMode,
    disable_mode,
    enable_mode,
    forward_section,
    hide_all_sections,
    is_enabled,
    show_all_sections,
    toggle_section_at,
)
from .overrides import CursorPolicy, DisplayOverride, OverrideManager, RuleStyle
from .scanner import DelimiterSpan, scan
from .settings import RuleSettings

__all__ = [
    'BufferHost',
    'CursorPolicy',
    'DelimiterSpan',
    'DisplayOverride',
    'Document',
    'EditEvent',
    'FoldController',
    'FoldRange',
    'HostError',
    'InconsistentRangeState',
    'InvalidPattern',
    'OverrideManager',
    'PageRuleError',
    'PageRuleMode',
    'RuleSettings',
    'RuleStyle',
    'disable_mode',
    'enable_mode',
    'forward_section',
    'hide_all_sections',
    'is_enabled',
    'scan',
    'show_all_sections',
    'toggle_section_at',
]
