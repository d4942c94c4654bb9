import json

import pytest

from settings import Settings


def test_defaults_without_file(tmp_path):
    s = Settings(tmp_path / "cp.json")

    assert s.get("compiler") == "g++"
    assert s.get("compiler_flags") == ["-std=c++17", "-Wall", "-Wextra", "-O2"]
    assert s.get("exec_name") == "a.out"
    assert s.as_dict() == Settings.default_settings()


def test_set_persists(tmp_path):
    path = tmp_path / "nested" / "cp.json"
    Settings(path).set("keymap_run", "<F9>")

    assert json.loads(path.read_text()) == {"keymap_run": "<F9>"}
    assert Settings(path).get("keymap_run") == "<F9>"


def test_unknown_keys_ignored_and_rejected(tmp_path):
    path = tmp_path / "cp.json"
    path.write_text(json.dumps({"exec_name": "sol", "colour": "red"}))
    s = Settings(path)

    assert s.get("exec_name") == "sol"
    with pytest.raises(KeyError):
        s.get("colour")
    with pytest.raises(KeyError):
        s.set("colour", "blue")


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_bad_file_falls_back_to_defaults(tmp_path, content):
    path = tmp_path / "cp.json"
    path.write_text(content)

    assert Settings(path).get("source_ext") == ".cpp"
