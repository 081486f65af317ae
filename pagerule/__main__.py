"""Pagerule CLI entry point.

Allows running via `python -m pagerule` and provides the console script
defined in `pyproject.toml`.

Usage:
    pagerule [--debug] [FILE]        Open FILE in the interactive viewer
    pagerule [--debug] --dump FILE   Print FILE once with rules drawn
    pagerule --version
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from .version import get_version_string


def dump_file(filename: str, width: Optional[int] = None) -> int:
    """Render a file once to stdout; returns a process exit code."""
    from .document import Document
    from .errors import PageRuleError
    from .mode import disable_mode, enable_mode
    from .settings import load_settings
    from .terminal import TerminalInterface
    from .view import TerminalRuleView

    try:
        with open(filename, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        print(f"Error loading file: {e}", file=sys.stderr)
        return 1

    terminal = TerminalInterface()
    document = Document(content, graphical=terminal.is_graphical())
    try:
        enable_mode(document, load_settings())
    except PageRuleError as e:
        print(str(e), file=sys.stderr)
        return 1
    view = TerminalRuleView(document, width or terminal.width)
    view.render()
    terminal.draw_view(view)
    disable_mode(document)
    return 0


def main() -> None:
    # Very small arg parsing to support version, dump mode, and optional filename
    args = sys.argv[1:]
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] == "--debug":
        logging.basicConfig(level=logging.DEBUG, filename="pagerule.log")
        args = args[1:]
    if args and args[0] == "--dump":
        if len(args) < 2:
            print("Usage: pagerule --dump FILE", file=sys.stderr)
            sys.exit(2)
        sys.exit(dump_file(args[1]))

    # Lazy import to avoid importing UI deps for --version
    from .settings import load_settings
    from .textual_app import PageRuleApp
    app = PageRuleApp(filename=args[0] if args else None, settings=load_settings())
    app.run()


if __name__ == "__main__":  # pragma: no cover
    main()
