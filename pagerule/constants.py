"""Constants and configuration defaults for page rules."""

class RuleConstants:
    """Central configuration constants for rule rendering and folding."""
    
    # Delimiter
    DEFAULT_DELIMITER = r"^\f"  # Form feed at the start of a line
    
    # Comment lines kept visible as section titles
    DEFAULT_COMMENT_START = r"\s*(?:;+|#+|//+|--+)"
    
    # Rendering
    DEFAULT_WIDTH = 65  # Columns used when the host does not say otherwise
    RULE_GLYPH = "─"  # Glyph used when a rule cannot be styled
    ELLIPSIS = "..."  # Marker appended where hidden text starts
    
    # Settings
    RULE_STYLE_AUTO = "auto"
    RULE_STYLE_CHOICES = ("auto", "strike-through", "underline")
    SETTINGS_APP_NAME = "pagerule"
    SETTINGS_FILENAME = "settings.json"
