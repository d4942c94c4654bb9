import os

from cp_setup import NEW_PROJECT_PROMPT, ProjectTriple, Scaffolder
from editor_host import LogLevel


def test_creates_three_files_and_layout(workdir, host, settings):
    project = Scaffolder(host, settings).create_project("problem_a")

    assert project == ProjectTriple("problem_a")
    assert sorted(os.listdir(workdir)) == ["problem_a.cpp", "problem_a.in", "problem_a.out"]
    assert host.layout_calls() == [
        ("edit", "problem_a.cpp"),
        ("vsplit", "problem_a.in"),
        ("split", "problem_a.out"),
        ("focus_left",),
    ]
    assert host.notifications == [
        (LogLevel.INFO, "Project files created and layout set for: problem_a")
    ]


def test_existing_files_are_not_touched(workdir, host, settings):
    for name, body in (("b.cpp", "int main() {}\n"), ("b.in", "3\n1 2 3\n"), ("b.out", "6\n")):
        (workdir / name).write_text(body)
    before = set(os.listdir(workdir))

    Scaffolder(host, settings).create_project("b")

    assert set(os.listdir(workdir)) == before
    assert (workdir / "b.cpp").read_text() == "int main() {}\n"
    assert (workdir / "b.in").read_text() == "3\n1 2 3\n"
    assert (workdir / "b.out").read_text() == "6\n"
    assert len(host.layout_calls()) == 4


def test_missing_directory_reports_one_error(workdir, host, settings):
    result = Scaffolder(host, settings).create_project("nowhere/x")

    assert result is None
    assert host.layout_calls() == []
    assert host.notifications == [(LogLevel.ERROR, "Error: Could not create nowhere/x.cpp")]


def test_stops_at_first_failure_without_rollback(workdir, host, settings):
    # a directory in the way of the input file
    (workdir / "c.in").mkdir()

    assert Scaffolder(host, settings).create_project("c") is None

    assert (workdir / "c.cpp").is_file()
    assert not (workdir / "c.out").exists()
    assert host.layout_calls() == []
    assert host.notifications == [(LogLevel.ERROR, "Error: Could not create c.in")]


def test_prompt_creates_project(workdir, make_host, settings):
    host = make_host(answer="  d  ")

    Scaffolder(host, settings).prompt_and_create()

    assert ("prompt", NEW_PROJECT_PROMPT) in host.calls
    assert (workdir / "d.cpp").exists()


def test_empty_or_cancelled_prompt_does_nothing(workdir, make_host, settings):
    for answer in ("", None, "   "):
        host = make_host(answer=answer)
        assert Scaffolder(host, settings).prompt_and_create() is None
        assert host.layout_calls() == []
        assert host.notifications == []
    assert os.listdir(workdir) == []


def test_extensions_follow_settings(workdir, host, settings):
    settings.set("input_ext", ".txt")

    Scaffolder(host, settings).create_project("e")

    assert (workdir / "e.txt").exists()
    assert ("vsplit", "e.txt") in host.layout_calls()


def test_cancelled_edit_stops_layout(workdir, make_host, settings):
    host = make_host(keep_buffer=True)

    assert Scaffolder(host, settings).create_project("f") is None

    assert (workdir / "f.cpp").exists()
    assert host.layout_calls() == [("edit", "f.cpp")]
    assert host.notifications == []
