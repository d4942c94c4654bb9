#!/usr/bin/env python3
"""
SCC C++ workspace (Tkinter)

Features:
- New project: <base>.cpp / <base>.in / <base>.out in a three-pane layout
- Compile & run the current .cpp in a floating terminal, stdin from .in,
  stdout to .out
- Snippets (cpptemplate plus bundled VS Code-format packages), Tab to expand
- Pygments syntax highlighting

Usage:
    python3 cpp_editor.py [DIR] [--new BASE] [--settings FILE]
                          [--snippets DIR ...] [--no-snippets] [-v]
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from cp_setup import CppSetup
from settings import Settings
from snippet_engine import BUNDLED_SNIPPETS_DIR, SnippetRegistry

log = logging.getLogger("scc")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='scc-cp', description='C++ competitive-programming workspace')
    parser.add_argument('directory', nargs='?', default='.', help='working directory (default: .)')
    parser.add_argument('--new', metavar='BASE', help='create BASE.cpp/.in/.out and open them')
    parser.add_argument('--settings', type=Path, help='settings JSON file')
    parser.add_argument('--snippets', metavar='DIR', action='append', default=[],
                        help='extra VS Code snippet package directory (repeatable)')
    parser.add_argument('--no-snippets', action='store_true', help='start without snippet support')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')
    return parser


def load_snippets(settings: Settings, extra: List[str]) -> SnippetRegistry:
    registry = SnippetRegistry()
    registry.lazy_load([BUNDLED_SNIPPETS_DIR, *settings.get('snippet_paths'), *extra])
    return registry


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)-7s %(name)s: %(message)s',
    )

    try:
        os.chdir(args.directory)
    except OSError as exc:
        log.error('Cannot enter %s: %s', args.directory, exc)
        return 2

    settings = Settings(args.settings) if args.settings else Settings()
    snippets = None if args.no_snippets else load_snippets(settings, args.snippets)

    import tkinter as tk
    from tk_host import TkHost

    root = tk.Tk()
    root.minsize(640, 480)
    root.geometry('1100x700')
    host = TkHost(root, snippets=snippets)
    workspace = CppSetup(host, settings, snippets)
    workspace.setup()
    if args.new:
        root.after(100, lambda: workspace.scaffolder.create_project(args.new))
    root.mainloop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
