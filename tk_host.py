"""
tk_host.py

Tkinter implementation of ``EditorHost``.

Panes live in columns: a horizontal PanedWindow holds one vertical
PanedWindow per column, so ``vsplit`` adds a column to the right and
``split`` adds a pane below inside the current column.  Build output runs
in a floating ``Toplevel`` fed by a ``TerminalJob``.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, List, Optional, Tuple

import tkinter as tk
from tkinter import filedialog, messagebox, simpledialog

from editor_host import EditorHost, FloatGeometry, LogLevel
from snippet_engine import SnippetRegistry, filetype_for_path, trigger_before
from syntax_highlighter import SyntaxHighlighter
from terminal import TerminalJob

log = logging.getLogger("scc.host")

FONT = ('Consolas', 12)
TERM_BG = '#111111'
TERM_FG = '#ffffff'
TOAST_COLOURS = {
    LogLevel.DEBUG: '#45475a',
    LogLevel.INFO: '#89b4fa',
    LogLevel.WARN: '#f9e2af',
    LogLevel.ERROR: '#f38ba8',
}


class Pane:
    """One text buffer shown inside a column."""

    def __init__(self, host: "TkHost", column: tk.PanedWindow):
        self.host = host
        self.column = column
        self.path: Optional[str] = None
        self.dirty = False
        self.highlight_timer = None

        self.frame = tk.Frame(column)
        self.header = tk.Label(self.frame, text='[No Name]', anchor='w', bg='#e6e6e6')
        self.header.pack(side='top', fill='x')
        self.text = tk.Text(self.frame, wrap='none', undo=True, font=FONT, width=40, height=10)
        self.text.pack(side='left', fill='both', expand=True)
        self.highlighter = SyntaxHighlighter(self.text, None)

        self.text.bind('<FocusIn>', lambda e: host._set_current(self))
        self.text.bind('<KeyRelease>', self._on_key_release)
        self.text.bind('<Tab>', self._on_tab)

    @property
    def filetype(self) -> Optional[str]:
        return filetype_for_path(self.path)

    def load(self, path: str):
        self.path = os.path.abspath(path)
        try:
            with open(self.path, 'r', encoding='utf-8', errors='ignore') as f:
                content = f.read()
        except FileNotFoundError:
            content = ''
        self.text.delete('1.0', 'end')
        self.text.insert('1.0', content)
        self.text.edit_reset()
        self.highlighter = SyntaxHighlighter(self.text, self.filetype)
        self.highlighter.highlight_all()
        self.set_dirty(False)

    def save(self):
        with open(self.path, 'w', encoding='utf-8') as f:
            f.write(self.text.get('1.0', 'end-1c'))
        self.set_dirty(False)

    def set_dirty(self, v: bool):
        self.dirty = v
        self.text.edit_modified(bool(v))
        name = os.path.basename(self.path) if self.path else '[No Name]'
        self.header.config(text=name + (' [+]' if v else ''))

    def _on_key_release(self, event):
        if event.keysym in ('Shift_L', 'Shift_R', 'Control_L', 'Control_R', 'Alt_L', 'Alt_R'):
            return
        if self.text.edit_modified():
            self.set_dirty(True)
        if self.highlight_timer:
            self.text.after_cancel(self.highlight_timer)
        self.highlight_timer = self.text.after(150, self._highlight)

    def _highlight(self):
        self.highlight_timer = None
        self.highlighter.highlight_all()

    def _on_tab(self, event):
        registry = self.host.snippets
        filetype = self.filetype
        if registry is None or filetype is None:
            return None
        cursor = self.text.index('insert')
        line_text = self.text.get(f'{cursor} linestart', cursor)
        word = trigger_before(line_text)
        snippet = registry.get(filetype, word) if word else None
        if snippet is None:
            return None
        body, offset = snippet.expand()
        start = self.text.index(f'insert - {len(word)}c')
        self.text.delete(start, 'insert')
        self.text.insert(start, body)
        self.text.mark_set('insert', f'{start} + {offset}c')
        self.set_dirty(True)
        self.highlighter.highlight_all()
        log.debug('Expanded %s snippet %r', filetype, word)
        return 'break'


class FloatTerminal:
    """Bordered floating window streaming a shell command's output."""

    def __init__(self, host: "TkHost", command: str, geometry: FloatGeometry,
                 title: str, cwd: Optional[str]):
        self.host = host
        root = host.root
        self.window = tk.Toplevel(root)
        self.window.title(title or 'Terminal')
        self.window.transient(root)
        x = root.winfo_rootx() + geometry.col
        y = root.winfo_rooty() + geometry.row
        self.window.geometry(f'{geometry.width}x{geometry.height}+{x}+{y}')
        self.window.configure(bg=TERM_BG, highlightthickness=2, highlightbackground='#89b4fa')
        tk.Label(self.window, text=title, bg=TERM_BG, fg=TERM_FG, anchor='center').pack(fill='x')
        self.output = tk.Text(self.window, bg=TERM_BG, fg=TERM_FG, font=('Consolas', 11),
                              insertbackground=TERM_FG, state='disabled')
        self.output.pack(fill='both', expand=True)
        self.window.protocol('WM_DELETE_WINDOW', self.close)
        self.window.focus_set()
        self.closed = False

        self.job = TerminalJob(command, cwd=cwd, on_output=self._post_output, on_exit=self._post_exit)
        self.job.start()

    # called from the job thread
    def _post_output(self, text: str):
        self._post(lambda: self._write(text))

    def _post_exit(self, code: int):
        self._post(lambda: self._exited(code))

    def _post(self, callback):
        if self.closed:
            return
        try:
            self.host.root.after(0, callback)
        except (RuntimeError, tk.TclError) as exc:
            # the main window is already gone
            log.debug("Dropping terminal update: %s", exc)

    def _write(self, text: str):
        if self.closed:
            return
        self.output.config(state='normal')
        self.output.insert('end', text)
        self.output.see('end')
        self.output.config(state='disabled')

    def _exited(self, code: int):
        if self.closed:
            return
        self._write(f'\n[Process exited {code}]\n')
        # dismissed on the next key press, as in a terminal buffer
        self.window.bind('<Key>', lambda e: self.close())
        self.host._reload_clean_panes()

    def close(self):
        if self.closed:
            return
        self.closed = True
        # closing the surface interrupts whatever is still running
        self.job.kill()
        self.window.destroy()


class TkHost(EditorHost):
    def __init__(self, root: tk.Tk, snippets: Optional[SnippetRegistry] = None):
        self.root = root
        self.root.title('SCC C++ Workspace')
        self.snippets = snippets
        self.columns: List[tk.PanedWindow] = []
        self.panes: List[Pane] = []
        self.current: Optional[Pane] = None
        self.terminals: List[FloatTerminal] = []
        self.keymaps: Dict[str, Tuple[Callable[[], Any], str]] = {}
        self._build_ui()
        self._add_column(after=None)

    # ── UI ───────────────────────────────────────────────────────────
    def _build_ui(self):
        menubar = tk.Menu(self.root)
        filemenu = tk.Menu(menubar, tearoff=False)
        filemenu.add_command(label='Open', command=self._open_dialog)
        filemenu.add_command(label='Save', command=self.save_current)
        filemenu.add_separator()
        filemenu.add_command(label='Exit', command=self.on_close)
        menubar.add_cascade(label='File', menu=filemenu)
        self.keymenu = tk.Menu(menubar, tearoff=False)
        menubar.add_cascade(label='Workspace', menu=self.keymenu)
        self.root.config(menu=menubar)

        self.status_var = tk.StringVar(value='Ready')
        status = tk.Label(self.root, textvariable=self.status_var, relief='sunken', anchor='w')
        status.pack(side='bottom', fill='x')

        self.body = tk.PanedWindow(self.root, orient='horizontal', sashwidth=4)
        self.body.pack(fill='both', expand=True)
        self.root.protocol('WM_DELETE_WINDOW', self.on_close)

    def _add_column(self, after: Optional[tk.PanedWindow]) -> Pane:
        column = tk.PanedWindow(self.body, orient='vertical', sashwidth=4)
        if after is None:
            self.body.add(column, stretch='always')
            self.columns.append(column)
        else:
            self.body.add(column, after=after, stretch='always')
            self.columns.insert(self.columns.index(after) + 1, column)
        pane = Pane(self, column)
        column.add(pane.frame, stretch='always')
        self.panes.append(pane)
        self._set_current(pane)
        return pane

    def _set_current(self, pane: Pane):
        self.current = pane

    def _focus(self, pane: Pane):
        self._set_current(pane)
        pane.text.focus_set()

    def _open_dialog(self):
        path = filedialog.askopenfilename(title='Open file', filetypes=[
            ('C++ Files', '*.cpp *.hpp *.h *.cc *.c'), ('Data', '*.in *.out'), ('All Files', '*.*')])
        if path:
            self.edit(path)

    def _reload_clean_panes(self):
        """Refresh panes whose file changed on disk (e.g. the .out file)."""
        for pane in self.panes:
            if pane.path and not pane.dirty and os.path.exists(pane.path):
                pane.load(pane.path)

    def _confirm_discard(self, pane: Pane) -> bool:
        if not pane.dirty:
            return True
        resp = messagebox.askyesnocancel('Unsaved changes', 'You have unsaved changes. Save before continuing?')
        if resp is None:
            return False
        if resp is True:
            self._save_pane(pane)
        return True

    def _save_pane(self, pane: Pane) -> bool:
        if pane.path is None:
            path = filedialog.asksaveasfilename(defaultextension='.cpp')
            if not path:
                return False
            pane.path = os.path.abspath(path)
        pane.save()
        self.status_var.set(f'Saved {os.path.basename(pane.path)}')
        return True

    def _show_toast(self, message: str, level: LogLevel, duration_ms: int = 3000):
        toast = tk.Label(self.root, text=message, bg=TOAST_COLOURS.get(level, '#89b4fa'),
                         fg='#1e1e2e', padx=10, pady=4)
        toast.place(relx=1.0, rely=1.0, x=-12, y=-28, anchor='se')
        self.root.after(duration_ms, toast.destroy)

    def on_close(self):
        if all(self._confirm_discard(p) for p in self.panes):
            for term in list(self.terminals):
                term.close()
            self.root.destroy()

    # ── EditorHost ───────────────────────────────────────────────────
    def edit(self, path: str) -> bool:
        pane = self.current
        if not self._confirm_discard(pane):
            return False
        pane.load(path)
        self._focus(pane)
        return True

    def vsplit(self, path: str) -> None:
        pane = self._add_column(after=self.current.column)
        pane.load(path)
        self._focus(pane)

    def split(self, path: str) -> None:
        column = self.current.column
        pane = Pane(self, column)
        column.add(pane.frame, after=self.current.frame, stretch='always')
        self.panes.append(pane)
        pane.load(path)
        self._focus(pane)

    def focus_left(self) -> None:
        idx = self.columns.index(self.current.column)
        if idx == 0:
            return
        left = self.columns[idx - 1]
        for pane in self.panes:
            if pane.column is left:
                self._focus(pane)
                return

    def current_file(self) -> Optional[str]:
        return self.current.path if self.current else None

    def save_current(self) -> None:
        if self.current is not None:
            self._save_pane(self.current)

    def notify(self, message: str, level: LogLevel = LogLevel.INFO) -> None:
        log.log(int(level), message)
        self.status_var.set(message)
        self._show_toast(message, level)

    def prompt(self, question: str) -> Optional[str]:
        return simpledialog.askstring('SCC', question, parent=self.root)

    def set_keymap(self, lhs: str, callback: Callable[[], Any], desc: str = "") -> None:
        if lhs in self.keymaps:
            log.warning('Rebinding %s (was: %s)', lhs, self.keymaps[lhs][1])
        self.keymaps[lhs] = (callback, desc)

        def _handler(event):
            callback()
            return 'break'

        self.root.bind_all(lhs, _handler)
        self.keymenu.add_command(label=desc or lhs, accelerator=lhs, command=callback)
        log.debug('Bound %s -> %s', lhs, desc)

    def screen_size(self) -> Tuple[int, int]:
        self.root.update_idletasks()
        return self.root.winfo_height(), self.root.winfo_width()

    def open_float_terminal(self, command: str, geometry: FloatGeometry,
                            title: str = "", cwd: Optional[str] = None) -> FloatTerminal:
        term = FloatTerminal(self, command, geometry, title, cwd)
        self.terminals = [t for t in self.terminals if not t.closed]
        self.terminals.append(term)
        return term
