# tests/core/test_shell.py
import os
import types

import pytest

from pluginshell.core.client_proxy import ClientProxy, ClientProxyFactory
from pluginshell.core.command_registry import CommandRegistry
from pluginshell.core.core import Shell, ShellOptions, describe_error
from pluginshell.core.discovery import register_builtin_commands
from pluginshell.core.exceptions import CommandExecutionError, UnknownCommandError
from pluginshell.model import RunningMode


class FakeProxy(ClientProxy):
    def __init__(self):
        self.user = ""
        self.connect_calls = []

    @property
    def is_logged_in(self):
        return bool(self.user)

    @property
    def connected_user(self):
        return self.user

    @property
    def server_list(self):
        return "srv1" if self.user else ""

    def connect(self, args):
        self.connect_calls.append(list(args))
        self.user = "alice"

    def disconnect(self):
        self.user = ""


class FakeProxyFactory(ClientProxyFactory):
    def __init__(self):
        self.proxy = FakeProxy()

    def create_proxy(self):
        return self.proxy


@pytest.fixture
def registry():
    reg = CommandRegistry()
    register_builtin_commands(reg)
    return reg


@pytest.fixture
def make_shell(registry, tmp_path):
    """Builds a shell without banner or startup script; keyword args override the options."""
    def _make(arguments=None, **flags):
        flags.setdefault("no_logo", True)
        flags.setdefault("no_startup_script", True)
        options = ShellOptions(arguments=list(arguments or []), **flags)
        return Shell(registry, options, input_fn=lambda prompt: "", library_dir=tmp_path, temp_root=tmp_path)
    return _make


@pytest.fixture
def shell(make_shell):
    return make_shell()


def lines_reader(lines):
    """A read_line function returning the given lines, then signaling end of input."""
    iterator = iter(lines)

    def _read(prompt):
        try:
            return next(iterator)
        except StopIteration:
            raise EOFError
    return _read


# --- Options ---

def test_options_from_argv_are_case_insensitive():
    options = ShellOptions.from_argv(["-NOLOGO", "-forceinteractive", "echo", "hi", "-login:bob"])
    assert options.no_logo and options.force_interactive
    assert not options.no_startup_script
    assert options.arguments == ["echo", "hi", "-login:bob"]
    assert options.command_arguments == ["echo", "hi"]
    assert options.login_arguments == ["-login:bob"]


@pytest.mark.parametrize("flag", ["-?", "-h", "--help"])
def test_usage_flags(flag):
    assert ShellOptions.from_argv([flag]).show_usage


# --- Environment ---

def test_initial_variables(shell, tmp_path):
    env = shell.environment
    assert env.get("LIBDIR") == str(tmp_path)
    assert env.get("TEMP") == str(tmp_path)
    assert env.get("cd") == os.getcwd()
    assert env.get("LIBS").startswith('"pluginshell, ')


def test_prompt_shows_current_category(shell):
    assert shell.prompt == "@\\>"
    assert shell.input_command_line("cc Servers")
    assert shell.prompt == "@\\Servers>"
    assert shell.input_command_line("cc ..")
    assert shell.prompt == "@\\>"


def test_global_category_can_be_entered(shell, capsys):
    assert shell.input_command_line("cc *")
    assert shell.prompt == "@\\*>"
    shell.input_command_line("help")
    assert "@\\*\\>" in capsys.readouterr().out


def test_help_for_command(shell, capsys):
    assert shell.input_command_line("help cc")
    out = capsys.readouterr().out
    assert "_[*\\cc]" in out
    assert "cc [CategoryName]" in out


def test_help_for_command_of_another_category(shell, capsys):
    assert shell.input_command_line("help login")
    assert "_[Servers\\login]" in capsys.readouterr().out


def test_help_at_root_lists_categories(shell, capsys):
    shell.input_command_line("help")
    out = capsys.readouterr().out
    assert "LINE SYNTAX" in out
    assert "@\\Servers\\>" in out
    # hidden aliases are not listed
    assert "quit:" not in out


def test_unknown_category_is_reported_and_not_fatal(shell, capsys):
    assert not shell.input_command_line("cc NoSuchCategory")
    err = capsys.readouterr().err
    assert 'An exception occurred while processing command "*\\cc"' in err
    assert "Command category NoSuchCategory does not exist" in err
    assert shell.environment.current_category == ""
    assert shell.input_command_line("echo still alive")


def test_unknown_command_message(shell, capsys):
    assert not shell.input_command_line("frobnicate")
    assert capsys.readouterr().err.strip() == "Unknown command"


def test_describe_error_lists_cause_chain():
    try:
        try:
            raise ValueError("inner problem")
        except ValueError as e:
            raise CommandExecutionError(None, "outer problem") from e
    except CommandExecutionError as exc:
        text = describe_error(exc)

    assert text.startswith('An exception occurred while processing command "???"')
    assert "=> CommandExecutionError: outer problem" in text
    assert "=> ValueError: inner problem" in text
    assert describe_error(UnknownCommandError(["x"])) == "Unknown command"


def test_command_requiring_connection_without_login(shell, capsys):
    assert not shell.input_command_line("Servers\\logout")
    assert "A connection to a server is required" in capsys.readouterr().err


# --- Batch mode ---

def test_run_success(make_shell, capsys):
    shell = make_shell(["echo", "%TEMP%"])
    assert shell.args_contain_commands
    assert shell.run() == 0
    assert shell.environment.running_mode == RunningMode.BATCH
    assert capsys.readouterr().out.strip() == shell.environment.get("TEMP")


def test_run_failure_exit_code(make_shell, capsys):
    shell = make_shell(["limit", "notanumber"])
    assert shell.run() == 1
    assert "Argument must be a valid integer value" in capsys.readouterr().err


def test_args_without_command(make_shell):
    assert not make_shell(["just", "words"]).args_contain_commands


def test_force_interactive_runs_in_interactive_mode(make_shell):
    shell = make_shell(["echo", "x"], force_interactive=True)
    shell.run()
    assert shell.environment.running_mode == RunningMode.INTERACTIVE


# --- Interactive loop ---

def test_exit_stops_the_loop(shell, capsys):
    shell.start(lines_reader(["echo first", "exit", "echo never"]))
    out = capsys.readouterr().out
    assert "first" in out
    assert "never" not in out


def test_quit_alias(shell):
    shell.start(lines_reader(["quit", "echo never"]))
    assert shell.environment.exit_pending


def test_end_of_input_stops_the_loop(shell, capsys):
    shell.start(lines_reader(["echo only"]))
    assert "only" in capsys.readouterr().out
    assert not shell.environment.exit_pending


def test_keyboard_interrupt_skips_the_line(shell, capsys):
    calls = iter([KeyboardInterrupt, "echo after", EOFError])

    def read(prompt):
        item = next(calls)
        if isinstance(item, type) and issubclass(item, BaseException):
            raise item
        return item

    shell.start(read)
    assert "after" in capsys.readouterr().out


def test_errors_do_not_stop_the_loop(shell, capsys):
    shell.start(lines_reader(["nosuchcommand", "echo next"]))
    captured = capsys.readouterr()
    assert "Unknown command" in captured.err
    assert "next" in captured.out


# --- Startup script ---

def test_startup_script_runs_once(make_shell, tmp_path, monkeypatch):
    startup = tmp_path / "startup.pshell"
    startup.write_text("set counter %counter%x\n")
    monkeypatch.setattr("pluginshell.core.core._configured_startup_script", lambda: startup)

    shell = make_shell(["echo", "batch"], no_startup_script=False, force_interactive=True)
    shell.environment.set("counter", "")
    shell.run()
    shell.start(lines_reader([]))

    assert shell.environment.get("counter") == "x"


def test_startup_script_skipped_with_flag(make_shell, tmp_path, monkeypatch):
    startup = tmp_path / "startup.pshell"
    startup.write_text("set ran yes\n")
    monkeypatch.setattr("pluginshell.core.core._configured_startup_script", lambda: startup)

    shell = make_shell(no_startup_script=True)
    shell.start(lines_reader([]))
    assert shell.environment.get("ran") is None


def test_failing_startup_script_is_reported(make_shell, tmp_path, monkeypatch, capsys):
    startup = tmp_path / "startup.pshell"
    startup.write_text("onerror break\nnosuchcommand\n")
    monkeypatch.setattr("pluginshell.core.core._configured_startup_script", lambda: startup)

    shell = make_shell(no_startup_script=False)
    shell.start(lines_reader(["echo alive"]))

    captured = capsys.readouterr()
    assert "An exception occurred while executing startup script" in captured.err
    assert "alive" in captured.out


# --- Connection proxy ---

def test_login_from_arguments_and_prompt(tmp_path):
    factory = FakeProxyFactory()
    registry = CommandRegistry()
    register_builtin_commands(registry)
    module = types.ModuleType("fake_server_commands")
    module.register = lambda registrar: registrar.set_client_proxy_factory(factory)
    registry.load_module(module)

    options = ShellOptions(no_logo=True, no_startup_script=True, arguments=["-login:alice"])
    shell = Shell(registry, options, library_dir=tmp_path, temp_root=tmp_path)

    assert factory.proxy.connect_calls == [["-login:alice"]]
    assert shell.prompt == "alice@srv1\\>"

    assert shell.input_command_line("Servers\\logout")
    assert not factory.proxy.is_logged_in


def test_close_releases_temp_folders(shell):
    folder = shell.environment.get_temp_folder()
    assert folder.path.is_dir()
    shell.close()
    assert not folder.path.exists()
