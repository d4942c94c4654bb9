"""
syntax_highlighter.py

Pygments-based highlighting for the Tkinter Text panes.  The lexer is
picked from the pane's filetype; ``.in`` / ``.out`` panes have no filetype
and are left plain.
"""
from typing import Dict, Optional

from pygments import lex
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

# Map pygments token types (by suffix) to tag names, most specific first
TOKEN_TAGS = [
    ('Keyword.Type', 'type'),
    ('Keyword', 'keyword'),
    ('Name.Builtin', 'builtin'),
    ('Name.Function', 'function'),
    ('Name.Class', 'class'),
    ('Comment.Preproc', 'preproc'),
    ('Comment', 'comment'),
    ('Literal.String', 'string'),
    ('Literal.Number', 'number'),
    ('Operator', 'operator'),
]

TAG_COLOURS: Dict[str, str] = {
    'type': '#1c9d00',
    'keyword': 'blue',
    'builtin': '#6b6',
    'function': '#6a5acd',
    'class': '#008fb3',
    'preproc': '#b35900',
    'comment': '#888',
    'string': '#d14',
    'number': '#b000b0',
    'operator': '#333',
}

# Editor filetypes (as used by the snippet registry) -> pygments aliases
_LEXER_ALIASES = {'cpp': 'cpp', 'c': 'c'}


def tag_for_token(ttype) -> Optional[str]:
    name = str(ttype)
    for suffix, tag in TOKEN_TAGS:
        if suffix in name:
            return tag
    return None


class SyntaxHighlighter:
    def __init__(self, text_widget, filetype: Optional[str]):
        self.text = text_widget
        self.lexer = None
        alias = _LEXER_ALIASES.get(filetype or '')
        if alias:
            try:
                self.lexer = get_lexer_by_name(alias)
            except ClassNotFound:
                self.lexer = None
        for tag, colour in TAG_COLOURS.items():
            self.text.tag_configure(tag, foreground=colour)

    @property
    def enabled(self) -> bool:
        return self.lexer is not None

    def highlight_all(self):
        """Re-tag the whole buffer."""
        if not self.enabled:
            return
        content = self.text.get('1.0', 'end-1c')
        for tag in TAG_COLOURS:
            self.text.tag_remove(tag, '1.0', 'end')
        pos = 0
        for ttype, value in lex(content, self.lexer):
            if not value:
                continue
            start, pos = pos, pos + len(value)
            tag = tag_for_token(ttype)
            if tag:
                self.text.tag_add(tag, f'1.0+{start}c', f'1.0+{pos}c')
