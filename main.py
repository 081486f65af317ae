#!/usr/bin/env python3
"""Pagerule - view a file with page delimiters drawn as rules.

Usage:
    python main.py [filename]

Controls:
    Arrow keys: Navigate (the cursor steps over rules)
    Click a rule / Ctrl-T: Fold or unfold the section after it
    Ctrl-O: Fold all sections except the current one
    Ctrl-E: Unfold all sections
    Ctrl-N: Jump to the next page delimiter
    Ctrl-R: Turn rules on or off
    Ctrl-Y: Cycle the rule style (saved to your settings)
    Ctrl-S: Save file
    Ctrl-Q: Quit
"""

from pagerule.textual_app import main


if __name__ == "__main__":
    main()
