import os
import shutil

import pytest

from cp_setup import COMPLETION_MARKER, BuildInvocation, ProjectTriple, Runner
from editor_host import FloatGeometry, LogLevel
from terminal import TerminalJob


def test_non_cpp_buffer_warns_once_and_does_nothing(tmp_path, make_host, settings):
    host = make_host(current=str(tmp_path / "notes.txt"))

    assert Runner(host, settings).run_current_file() is None

    assert host.levels() == [LogLevel.WARN]
    assert "Not in a .cpp file" in host.notifications[0][1]
    assert host.calls == []
    assert os.listdir(tmp_path) == []


def test_unnamed_buffer_warns(make_host, settings):
    host = make_host(current=None)

    Runner(host, settings).run_current_file()

    assert host.levels() == [LogLevel.WARN]
    assert host.terminals == []


def test_saves_before_spawning(tmp_path, make_host, settings):
    host = make_host(current=str(tmp_path / "a.cpp"))

    Runner(host, settings).run_current_file()

    assert [c[0] for c in host.calls] == ["save", "terminal"]


def test_command_compiles_then_runs_with_redirection(tmp_path, make_host, settings):
    base = str(tmp_path / "prob")
    host = make_host(current=base + ".cpp")

    handle = Runner(host, settings).run_current_file()
    cmd = handle["command"]

    compile_at = cmd.index(f"g++ -std=c++17 -Wall -Wextra -O2 {base}.cpp -o a.out")
    and_at = cmd.index("&&", compile_at)
    run_at = cmd.index(f"./a.out < {base}.in > {base}.out", and_at)
    assert compile_at < and_at < run_at
    assert cmd.rstrip("'").endswith(f"{COMPLETION_MARKER}\\n")
    assert handle["cwd"] == str(tmp_path)
    assert handle["title"] == "C++ Build & Run Output"


def test_terminal_is_centred_at_eighty_percent(tmp_path, make_host, settings):
    host = make_host(current=str(tmp_path / "a.cpp"), size=(50, 200))

    handle = Runner(host, settings).run_current_file()

    assert handle["geometry"] == FloatGeometry(row=5, col=20, width=160, height=40)


def test_two_runs_give_two_terminals(tmp_path, make_host, settings):
    host = make_host(current=str(tmp_path / "a.cpp"))
    runner = Runner(host, settings)

    first = runner.run_current_file()
    second = runner.run_current_file()

    assert first is not second
    assert len(host.terminals) == 2
    assert [c[0] for c in host.calls] == ["save", "terminal", "save", "terminal"]


def test_paths_with_spaces_are_quoted():
    inv = BuildInvocation(ProjectTriple("/tmp/my dir/p"))

    assert "'/tmp/my dir/p.cpp'" in inv.compile_command
    assert inv.run_command == "./a.out < '/tmp/my dir/p.in' > '/tmp/my dir/p.out'"


def test_compiler_settings_are_used(tmp_path, make_host, settings):
    settings.set("compiler", "clang++")
    settings.set("compiler_flags", ["-std=c++20"])
    settings.set("exec_name", "prog")
    host = make_host(current=str(tmp_path / "a.cpp"))

    cmd = Runner(host, settings).run_current_file()["command"]

    assert cmd.startswith(f"clang++ -std=c++20 {tmp_path}/a.cpp -o prog && ./prog < ")


def _build_and_run(tmp_path, source):
    if shutil.which("g++") is None:
        pytest.skip("g++ not installed")
    project = ProjectTriple(str(tmp_path / "sum"))
    (tmp_path / "sum.cpp").write_text(source)
    (tmp_path / "sum.in").write_text("2 3\n")
    out = []
    job = TerminalJob(BuildInvocation(project).command, cwd=str(tmp_path), on_output=out.append)
    return job.start().wait(120), "".join(out), project


def test_end_to_end_build_and_run(tmp_path):
    code, text, project = _build_and_run(
        tmp_path, "#include <iostream>\nint main() { int a, b; std::cin >> a >> b; std::cout << a + b << '\\n'; }\n")

    assert code == 0
    assert COMPLETION_MARKER in text
    assert open(project.output).read() == "5\n"


def test_compile_error_skips_run(tmp_path):
    code, text, project = _build_and_run(tmp_path, "int main() { return x; }\n")

    assert code != 0
    assert "error" in text
    assert COMPLETION_MARKER not in text
    assert not os.path.exists(project.output)
