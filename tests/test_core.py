import shutil
from pathlib import Path

from jshellpanel import core


def test_java_home_argument_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("JAVA_HOME", "/elsewhere")
    exe = Path(core.jshell_executable(str(tmp_path)))
    assert exe.parent == tmp_path / "bin"
    assert exe.name in ("jshell", "jshell.exe")


def test_java_home_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("JAVA_HOME", str(tmp_path))
    assert Path(core.jshell_executable()).parent == tmp_path / "bin"


def test_path_lookup(monkeypatch):
    monkeypatch.delenv("JAVA_HOME", raising=False)
    monkeypatch.setattr(shutil, "which", lambda name: "/usr/local/bin/" + name)
    assert core.jshell_executable().startswith("/usr/local/bin/jshell")


def test_bare_name_when_nothing_found(monkeypatch):
    monkeypatch.delenv("JAVA_HOME", raising=False)
    monkeypatch.setattr(shutil, "which", lambda name: None)
    assert core.jshell_executable() in ("jshell", "jshell.exe")
    assert not core.cmd_exists("jshell")


def test_state_lives_under_app_home():
    assert core.CONFIG_PATH.parent == core.APP_HOME
    assert core.LOG_DIR.parent == core.APP_HOME
