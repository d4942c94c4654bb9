"""
cp_setup.py

Competitive-programming workflow for SCC:

- ``Scaffolder.create_project`` makes ``<base>.cpp``, ``<base>.in`` and
  ``<base>.out`` and arranges three panes (source | input / output).
- ``Runner.run_current_file`` saves the focused ``.cpp`` buffer, then
  compiles and runs it in a floating terminal, feeding ``<base>.in`` and
  writing ``<base>.out``.
- ``CppSetup`` binds both to keys and registers the ``cpptemplate`` snippet.

Pre-existing sibling files are reused as-is, even if they are left over
from an earlier problem with the same base name.
"""
from __future__ import annotations

import logging
import os
import shlex
from dataclasses import dataclass, field
from typing import List, Optional

from editor_host import EditorHost, LogLevel, centered_float
from settings import Settings
from snippet_engine import InsertNode, Snippet, SnippetRegistry, TextNode

log = logging.getLogger("scc.cp")

COMPLETION_MARKER = "--- Execution Complete ---"
NEW_PROJECT_PROMPT = "Enter base filename (e.g., 'problem_a'): "


# ── Data model ───────────────────────────────────────────────────────
@dataclass(frozen=True)
class ProjectTriple:
    """Source, input and output paths sharing one base name."""

    base: str
    source_ext: str = ".cpp"
    input_ext: str = ".in"
    output_ext: str = ".out"

    @classmethod
    def from_settings(cls, base: str, settings: Settings) -> "ProjectTriple":
        return cls(
            base,
            settings.get("source_ext"),
            settings.get("input_ext"),
            settings.get("output_ext"),
        )

    @property
    def source(self) -> str:
        return self.base + self.source_ext

    @property
    def input(self) -> str:
        return self.base + self.input_ext

    @property
    def output(self) -> str:
        return self.base + self.output_ext

    def paths(self) -> List[str]:
        return [self.source, self.input, self.output]


@dataclass(frozen=True)
class BuildInvocation:
    """Compile-then-run shell command for one ``ProjectTriple``."""

    project: ProjectTriple
    compiler: str = "g++"
    flags: List[str] = field(default_factory=lambda: ["-std=c++17", "-Wall", "-Wextra", "-O2"])
    exec_name: str = "a.out"

    @classmethod
    def from_settings(cls, project: ProjectTriple, settings: Settings) -> "BuildInvocation":
        return cls(
            project,
            settings.get("compiler"),
            list(settings.get("compiler_flags")),
            settings.get("exec_name"),
        )

    @property
    def compile_command(self) -> str:
        argv = [self.compiler, *self.flags, self.project.source, "-o", self.exec_name]
        return " ".join(shlex.quote(a) for a in argv)

    @property
    def run_command(self) -> str:
        exe = shlex.quote("./" + self.exec_name)
        return f"{exe} < {shlex.quote(self.project.input)} > {shlex.quote(self.project.output)}"

    @property
    def command(self) -> str:
        # the run step only happens after a successful compile
        return " && ".join([
            self.compile_command,
            self.run_command,
            f"printf '\\n{COMPLETION_MARKER}\\n'",
        ])


# ── Scaffolder ───────────────────────────────────────────────────────
class Scaffolder:
    def __init__(self, host: EditorHost, settings: Settings):
        self.host = host
        self.settings = settings

    def create_project(self, base_name: str) -> Optional[ProjectTriple]:
        """Ensure the three files exist, then lay out the panes.

        Stops at the first file that cannot be created; files made before
        that point are left in place.  Returns the triple on success.
        """
        project = ProjectTriple.from_settings(base_name, self.settings)
        for path in project.paths():
            if not self._touch(path):
                return None

        if not self.host.edit(project.source):
            log.info("Layout for %s cancelled", base_name)
            return None
        self.host.vsplit(project.input)
        self.host.split(project.output)
        self.host.focus_left()

        self.host.notify(f"Project files created and layout set for: {base_name}", LogLevel.INFO)
        return project

    def prompt_and_create(self) -> Optional[ProjectTriple]:
        answer = self.host.prompt(NEW_PROJECT_PROMPT)
        base_name = (answer or "").strip()
        if not base_name:
            log.debug("New project cancelled")
            return None
        return self.create_project(base_name)

    def _touch(self, path: str) -> bool:
        try:
            # append mode creates the file but never truncates it
            with open(path, "a", encoding="utf-8"):
                pass
        except OSError as exc:
            log.error("Could not create %s: %s", path, exc)
            self.host.notify(f"Error: Could not create {path}", LogLevel.ERROR)
            return False
        return True


# ── Runner ───────────────────────────────────────────────────────────
class Runner:
    def __init__(self, host: EditorHost, settings: Settings):
        self.host = host
        self.settings = settings

    def run_current_file(self):
        """Compile and run the focused source file in a floating terminal.

        Returns the terminal handle, or ``None`` when the buffer is not a
        C++ source file.
        """
        source_ext = self.settings.get("source_ext")
        current = self.host.current_file()
        base, ext = os.path.splitext(os.path.abspath(current)) if current else ("", "")
        if not current or ext != source_ext:
            self.host.notify(
                f"Not in a {source_ext} file. Please navigate to your C++ source file.",
                LogLevel.WARN,
            )
            return None

        project = ProjectTriple.from_settings(base, self.settings)
        invocation = BuildInvocation.from_settings(project, self.settings)

        self.host.save_current()

        lines, columns = self.host.screen_size()
        geometry = centered_float(lines, columns, self.settings.get("float_ratio"))
        log.info("Build & run %s", project.source)
        return self.host.open_float_terminal(
            invocation.command,
            geometry,
            title=self.settings.get("terminal_title"),
            cwd=os.path.dirname(project.source),
        )


# ── Snippet ──────────────────────────────────────────────────────────
def cpp_template() -> Snippet:
    return Snippet(
        "cpptemplate",
        [
            TextNode([
                "#include <iostream>",
                "#include <vector>",
                "#include <string>",
                "#include <algorithm>",
                "#include <map>",
                "#include <set>",
                "",
                "// You can add more common headers here, e.g., <cmath>, <queue>, <stack>",
                "",
                "using namespace std;",
                "",
                "void solve() {",
                "    ",
            ]),
            InsertNode(1),
            TextNode([
                "}",
                "",
                "int main() {",
                "    ios_base::sync_with_stdio(false);",
                "    cin.tie(NULL);",
                "    solve();",
                "    return 0;",
                "}",
            ]),
        ],
        description="Basic C++ competitive programming template",
    )


def register_cpp_template(registry: SnippetRegistry) -> None:
    registry.add_snippets("cpp", [cpp_template()])


# ── Integration ──────────────────────────────────────────────────────
class CppSetup:
    """Wires the workflow into a host.

    *snippets* is the already-resolved snippet registry, or ``None`` when
    no snippet support is available.
    """

    def __init__(
        self,
        host: EditorHost,
        settings: Optional[Settings] = None,
        snippets: Optional[SnippetRegistry] = None,
    ):
        self.host = host
        self.settings = settings or Settings()
        self.snippets = snippets
        self.scaffolder = Scaffolder(host, self.settings)
        self.runner = Runner(host, self.settings)

    def setup(self) -> bool:
        """Bind keys and register the template; ``False`` if snippets are missing."""
        self.host.set_keymap(
            self.settings.get("keymap_new_project"),
            self.scaffolder.prompt_and_create,
            desc="Create C++ project files and setup layout",
        )
        self.host.set_keymap(
            self.settings.get("keymap_run"),
            self.runner.run_current_file,
            desc="Compile and Run C++ Code",
        )

        if self.snippets is None:
            self.host.notify(
                "Snippet registry not available. C++ template snippet will not work.",
                LogLevel.WARN,
            )
            return False

        register_cpp_template(self.snippets)
        self.host.notify("C++ setup loaded successfully!", LogLevel.INFO)
        return True
