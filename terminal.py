"""
terminal.py

Runs a shell command in the background and streams its merged
stdout/stderr, line by line, to a callback.  Each job owns its own process
and reader thread; jobs never share state.
"""
from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
from typing import Callable, Optional

log = logging.getLogger("scc.terminal")

# Status reported when the shell itself cannot be started
NOT_STARTED = 127


class TerminalJob:
    def __init__(
        self,
        command: str,
        cwd: Optional[str] = None,
        on_output: Optional[Callable[[str], None]] = None,
        on_exit: Optional[Callable[[int], None]] = None,
    ):
        self.command = command
        self.cwd = cwd
        self.on_output = on_output or (lambda text: None)
        self.on_exit = on_exit or (lambda code: None)
        self.process: Optional[subprocess.Popen] = None
        self.returncode: Optional[int] = None
        self._thread: Optional[threading.Thread] = None
        self._done = threading.Event()
        self._killed = False

    @property
    def running(self) -> bool:
        return self._thread is not None and not self._done.is_set()

    def start(self) -> "TerminalJob":
        if self._thread is not None:
            raise RuntimeError("job already started")
        log.info("Starting: %s", self.command)
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()
        return self

    def wait(self, timeout: Optional[float] = None) -> Optional[int]:
        """Block until the job finishes; returns the exit status (or None on timeout)."""
        self._done.wait(timeout)
        return self.returncode

    def kill(self) -> None:
        """Kill the shell and everything it started (compiler, program)."""
        self._killed = True
        proc = self.process
        if proc is None:
            return
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            return
        log.info("Killed process group %s", proc.pid)

    def _run(self) -> None:
        try:
            proc = subprocess.Popen(
                self.command,
                shell=True,
                cwd=self.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
                start_new_session=True,
            )
        except OSError as exc:
            log.error("Could not start %r: %s", self.command, exc)
            self.on_output(f"[failed to start: {exc}]\n")
            self._finish(NOT_STARTED)
            return
        self.process = proc
        if self._killed:
            # kill() arrived before the process existed
            self.kill()
        assert proc.stdout is not None
        with proc.stdout:
            for line in proc.stdout:
                self.on_output(line)
        self._finish(proc.wait())

    def _finish(self, code: int) -> None:
        self.returncode = code
        log.debug("Job exited with %s: %s", code, self.command)
        try:
            self.on_exit(code)
        finally:
            self._done.set()
