from ethkit.cli import main, run
from ethkit.version import get_version


def test_version_command_prints_version(capsys):
    assert run(["version"]) == 0
    out = capsys.readouterr().out
    assert out.strip() == get_version()


def test_no_arguments_shows_help(capsys):
    assert run([]) == 127
    err = capsys.readouterr().err
    assert "Usage: ethgo" in err
    assert "version" in err


def test_unknown_command(capsys):
    assert run(["no-such-command"]) == 127
    assert "Available commands are:" in capsys.readouterr().err


def test_help_flag_without_command(capsys):
    assert run(["--help"]) == 127
    assert "Usage: ethgo" in capsys.readouterr().err


def test_command_help(capsys):
    assert run(["version", "-h"]) == 0
    captured = capsys.readouterr()
    assert "Usage: ethgo version" in captured.err
    assert captured.out == ""


def test_main_with_arguments(capsys):
    assert main(["version"]) == 0
    assert capsys.readouterr().out.strip() == "0.1.3"


def test_main_reads_sys_argv(capsys, monkeypatch):
    monkeypatch.setattr("sys.argv", ["ethgo", "version"])
    assert main() == 0
    assert capsys.readouterr().out.strip() == get_version()