import os

import pytest

from editor_host import EditorHost, LogLevel
from settings import Settings


class FakeHost(EditorHost):
    """Records every call made through the host interface."""

    def __init__(self, current=None, answer=None, size=(50, 200), keep_buffer=False):
        self.calls = []
        self.notifications = []
        self.keymaps = {}
        self.terminals = []
        self._current = current
        self._left = current
        self._answer = answer
        self._size = size
        self._keep_buffer = keep_buffer

    def edit(self, path):
        self.calls.append(("edit", path))
        if self._keep_buffer:
            return False
        self._current = os.path.abspath(path)
        self._left = self._current
        return True

    def vsplit(self, path):
        self.calls.append(("vsplit", path))
        self._current = os.path.abspath(path)

    def split(self, path):
        self.calls.append(("split", path))
        self._current = os.path.abspath(path)

    def focus_left(self):
        self.calls.append(("focus_left",))
        self._current = self._left

    def current_file(self):
        return self._current

    def save_current(self):
        self.calls.append(("save",))

    def notify(self, message, level=LogLevel.INFO):
        self.notifications.append((level, message))

    def prompt(self, question):
        self.calls.append(("prompt", question))
        return self._answer

    def set_keymap(self, lhs, callback, desc=""):
        self.keymaps[lhs] = (callback, desc)

    def screen_size(self):
        return self._size

    def open_float_terminal(self, command, geometry, title="", cwd=None):
        handle = {"command": command, "geometry": geometry, "title": title, "cwd": cwd}
        self.calls.append(("terminal", command))
        self.terminals.append(handle)
        return handle

    # helpers
    def layout_calls(self):
        return [c for c in self.calls if c[0] in ("edit", "vsplit", "split", "focus_left")]

    def levels(self):
        return [level for level, _ in self.notifications]


@pytest.fixture
def host():
    return FakeHost()


@pytest.fixture
def settings(tmp_path_factory):
    return Settings(tmp_path_factory.mktemp("settings") / "cp.json")


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_host():
    return FakeHost
