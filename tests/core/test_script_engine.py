# tests/core/test_script_engine.py
import types

import pytest

from pluginshell.core.command_registry import CommandRegistry
from pluginshell.core.commands.base import CommandBase
from pluginshell.core.core import Shell, ShellOptions
from pluginshell.core.discovery import register_builtin_commands
from pluginshell.core.script_engine import ScriptEngine, ScriptState, is_comment
from pluginshell.model import RunningMode, ScriptLine, ScriptStatus


class CancelCommand(CommandBase):
    def execute_command(self, context):
        context.environment.cancellation.signal_cancel()


class TickCommand(CommandBase):
    """Appends its argument to the 'seen' variable and cancels after five calls."""

    def execute_command(self, context):
        env = context.environment
        env.set("seen", (env.get("seen") or "") + context.arguments[0])
        if len(env.get("seen")) >= 5:
            env.cancellation.signal_cancel()


def _register_test_commands(registrar):
    registrar.add(CancelCommand, category="*", keyword="cancel")
    registrar.add(TickCommand, category="*", keyword="tick")


@pytest.fixture
def shell(tmp_path):
    """A shell with the built-in commands and a 'cancel' test command."""
    registry = CommandRegistry()
    register_builtin_commands(registry)
    module = types.ModuleType("script_test_commands")
    module.register = _register_test_commands
    registry.load_module(module)
    options = ShellOptions(no_logo=True, no_startup_script=True)
    return Shell(registry, options, input_fn=lambda prompt: "", library_dir=tmp_path, temp_root=tmp_path)


@pytest.fixture
def write_script(tmp_path):
    def _write(text, name="script.pshell"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


# --- ScriptState ---

def test_load_keeps_source_line_numbers(write_script):
    path = write_script("echo one\n\n   \necho two\n")
    script = ScriptState.load(path)

    assert [(l.number, l.text) for l in script.lines] == [(1, "echo one"), (4, "echo two")]
    assert script.current is None
    assert script.move_next()
    assert script.current.number == 1


def test_goto_counts_kept_lines():
    script = ScriptState("x.pshell", [ScriptLine(number=n, text=f"l{n}") for n in (1, 3, 5)])
    script.goto(2)
    assert script.move_next()
    assert script.current.number == 3


def test_goto_first_line_restarts():
    script = ScriptState("x.pshell", [ScriptLine(number=n, text=f"l{n}") for n in (1, 3, 5)])
    script.move_next()
    script.move_next()
    for target in (1, 0):
        script.goto(target)
        assert script.move_next()
        assert script.current.number == 1


def test_goto_past_the_end_finishes_the_script():
    script = ScriptState("x.pshell", [ScriptLine(number=1, text="l1")])
    script.goto(99)
    assert not script.move_next()


def test_goto_requires_an_integer():
    script = ScriptState("x.pshell", [])
    with pytest.raises(ValueError):
        script.goto("two")


@pytest.mark.parametrize("text,expected", [
    ("rem", True),
    ("REM a comment", True),
    ("   rem\tindented", True),
    ("remove file", False),
    ("echo rem", False),
])
def test_is_comment(text, expected):
    assert is_comment(text) is expected


# --- Running scripts through the shell ---

def test_run_executes_every_line(shell, write_script):
    path = write_script("set a 1\nset b 2\n")
    assert shell.input_command_line(f"run {path}")
    assert shell.environment.get("a") == "1"
    assert shell.environment.get("b") == "2"


def test_run_without_existing_file(shell, tmp_path, capsys):
    assert not shell.input_command_line(f"run {tmp_path / 'missing.pshell'}")
    assert "Cannot find script file" in capsys.readouterr().err


def test_goto_skips_lines(shell, write_script):
    path = write_script("set a 1\ngoto 4\nset a 2\nset b 3\n")
    shell.input_command_line(f"run {path}")
    assert shell.environment.get("a") == "1"
    assert shell.environment.get("b") == "3"


def test_rem_lines_are_not_interpreted(shell, write_script, capsys):
    path = write_script("rem nosuchcommand\nset x 1\n")
    assert shell.input_command_line(f"run {path}")
    assert shell.environment.get("x") == "1"
    assert capsys.readouterr().err == ""


def test_errors_continue_by_default(shell, write_script, capsys):
    path = write_script("nosuchcommand\nset after yes\n")
    assert shell.input_command_line(f"run {path}")

    assert shell.environment.get("after") == "yes"
    err = capsys.readouterr().err
    assert "ERROR - Error in script" in err
    assert "line 1" in err


def test_onerror_break_stops_the_script(shell, write_script, capsys):
    path = write_script("onerror break\nnosuchcommand\nset after yes\n")
    assert not shell.input_command_line(f"run {path}")

    assert shell.environment.get("after") is None
    assert "Error in line 2 in script" in capsys.readouterr().err


def test_onerror_rejects_unknown_policy(shell, write_script, capsys):
    path = write_script("onerror break\nonerror sometimes\n")
    assert not shell.input_command_line(f"run {path}")
    assert "expected break or continue" in capsys.readouterr().err


def test_nested_scripts(shell, write_script):
    inner = write_script("set inner done\n", name="inner.pshell")
    outer = write_script(f"run {inner}\nset outer done\n", name="outer.pshell")
    assert shell.input_command_line(f"run {outer}")
    assert shell.environment.get("inner") == "done"
    assert shell.environment.get("outer") == "done"


def test_cancellation_aborts_the_script(shell, write_script):
    path = write_script("cancel\nset x 1\n")
    script = ScriptState.load(path)
    engine = ScriptEngine(shell.environment)
    command = shell.registry.resolve("", "run").create()

    with shell.cancellation.scope():
        status = engine.run(script, command)

    assert status == ScriptStatus.ABORTED
    assert shell.environment.get("x") is None


def test_script_commands_print_help_outside_a_script(shell, capsys):
    shell.input_command_line("sleep 1")
    assert "Example:...... sleep 10" in capsys.readouterr().out


def test_sleep_in_script_returns(shell, write_script, monkeypatch):
    slept = []
    monkeypatch.setattr("pluginshell.core.handlers.script_handler.time.sleep", slept.append)
    path = write_script("sleep 0\nset done yes\n")
    shell.input_command_line(f"run {path}")
    assert shell.environment.get("done") == "yes"


def test_pause_waits_in_interactive_mode_only(shell, write_script):
    prompts = []
    shell.environment.input_fn = lambda prompt: prompts.append(prompt) or ""
    path = write_script("pause\n")

    shell.environment.running_mode = RunningMode.INTERACTIVE
    shell.input_command_line(f"run {path}")
    assert prompts == ["Press Enter to continue..."]

    shell.environment.running_mode = RunningMode.BATCH
    shell.input_command_line(f"run {path}")
    assert len(prompts) == 1


def test_goto_skips_blank_lines_when_counting(shell, write_script):
    path = write_script("goto 3\n\nset a jumped\nset b reached\n")
    shell.input_command_line(f"run {path}")
    assert shell.environment.get("a") is None
    assert shell.environment.get("b") == "reached"


def test_goto_loop_repeats_in_order_until_cancelled(shell, write_script):
    path = write_script("tick A\ntick B\ngoto 1\ntick Z\n")
    assert shell.input_command_line(f"run {path}")
    assert shell.environment.get("seen") == "ABABA"
    assert not shell.cancellation.is_cancel_pending()


def test_sleep_returns_early_on_cancellation(shell, write_script, monkeypatch):
    naps = []

    def fake_sleep(seconds):
        naps.append(seconds)
        shell.cancellation.signal_cancel()

    monkeypatch.setattr("pluginshell.core.handlers.script_handler.time.sleep", fake_sleep)
    path = write_script("sleep 5\nset after yes\n")

    shell.input_command_line(f"run {path}")

    assert len(naps) == 1
    assert naps[0] < 5
    assert shell.environment.get("after") is None
