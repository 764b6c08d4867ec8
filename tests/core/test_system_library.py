# tests/core/test_system_library.py
import base64
import hashlib
import logging
import sys

import pytest

from pluginshell.core.command_registry import CommandRegistry
from pluginshell.core.core import Shell, ShellOptions
from pluginshell.core.discovery import load_library_dir, register_builtin_commands
from pluginshell.core.utils.path_utils import PathUtils


@pytest.fixture
def shell(tmp_path):
    """A shell with the built-in commands and the bundled libraries."""
    registry = CommandRegistry()
    register_builtin_commands(registry)
    load_library_dir(registry, PathUtils.get_library_dir())
    options = ShellOptions(no_logo=True, no_startup_script=True)
    return Shell(registry, options, input_fn=lambda prompt: "", temp_root=tmp_path)


def run(shell, capsys, line):
    ok = shell.input_command_line(line)
    captured = capsys.readouterr()
    return ok, captured.out.splitlines(), captured.err


def b64_digest(algorithm, data):
    return base64.b64encode(hashlib.new(algorithm, data).digest()).decode("ascii")


def test_library_is_registered(shell):
    names = [lib.name for lib in shell.registry.libraries]
    assert "system_commands" in names
    assert '"system_commands, 1.0.0";' in shell.environment.get("LIBS")


def test_encode_and_decode_base64(shell, capsys):
    assert run(shell, capsys, 'encb64 "hello world"')[1] == ["aGVsbG8gd29ybGQ="]
    assert run(shell, capsys, "decb64 aGVsbG8gd29ybGQ=")[1] == ["hello world"]


def test_decode_invalid_base64(shell, capsys):
    ok, _, err = run(shell, capsys, "decb64 not*base64")
    assert not ok
    assert "Invalid base64 data" in err


def test_hash_defaults_to_sha256(shell, capsys, tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"abc")
    assert run(shell, capsys, f"System\\hash {path}")[1] == [f"SHA256: {b64_digest('sha256', b'abc')}"]


def test_hash_several_algorithms_and_files(shell, capsys, tmp_path):
    first, second = tmp_path / "one.txt", tmp_path / "two.txt"
    first.write_bytes(b"1")
    second.write_bytes(b"2")

    _, out, _ = run(shell, capsys, f"System\\hash -MD5 -sha1 {first} {second}")

    assert out == [
        f"MD5: {b64_digest('md5', b'1')}  one.txt",
        f"SHA1: {b64_digest('sha1', b'1')}  one.txt",
        f"MD5: {b64_digest('md5', b'2')}  two.txt",
        f"SHA1: {b64_digest('sha1', b'2')}  two.txt",
    ]


def test_hash_without_valid_file(shell, capsys, tmp_path):
    ok, _, err = run(shell, capsys, f"System\\hash {tmp_path / 'missing'}")
    assert not ok
    assert "You must provide a valid path" in err


def test_getvar(shell, capsys, monkeypatch):
    monkeypatch.setenv("PLUGINSHELL_TEST_VAR", "some value")
    assert run(shell, capsys, "System\\getvar PLUGINSHELL_TEST_VAR")[1] == ["some value"]


def test_log_commands_write_to_log(shell, capsys, caplog):
    with caplog.at_level(logging.DEBUG, logger="pluginshell.script"):
        run(shell, capsys, 'Log\\warn "disk almost full"')
        run(shell, capsys, "Log\\debug details")

    records = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "pluginshell.script"]
    assert records == [(logging.WARNING, "disk almost full"), (logging.DEBUG, "details")]


def test_log_requires_a_message(shell, capsys):
    ok, _, err = run(shell, capsys, "Log\\info")
    assert not ok
    assert "A message is required" in err


def test_exec_waits_for_process(shell, capsys, tmp_path):
    marker = tmp_path / "marker.txt"
    code = f"open({str(marker)!r}, 'w').write('done')"
    assert shell.engine.interpret_line(["System\\exec", "-w", sys.executable, "-c", code]) is None
    assert marker.read_text() == "done"
