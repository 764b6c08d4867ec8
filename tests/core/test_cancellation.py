# tests/core/test_cancellation.py
import logging
import signal
import threading

from pluginshell.core.cancellation import CancellationState
from pluginshell.core.command_registry import CommandRegistry
from pluginshell.core.core import Shell, ShellOptions


def test_nothing_pending_by_default():
    state = CancellationState()
    assert not state.is_cancel_pending()
    assert state.active_scopes == 0


def test_signal_stays_pending_until_outermost_scope_closes():
    state = CancellationState()
    with state.scope():
        with state.scope():
            state.signal_cancel()
            assert state.is_cancel_pending()
        # inner scope closed, outer still running
        assert state.is_cancel_pending()
        assert state.active_scopes == 1
    assert not state.is_cancel_pending()
    assert state.active_scopes == 0


def test_stale_request_is_cleared_on_entry():
    """A request signaled while nothing runs must not cancel the next command."""
    state = CancellationState()
    state.signal_cancel()
    assert state.is_cancel_pending()
    with state.scope():
        assert not state.is_cancel_pending()


def test_several_requests_count_as_one_pending_state():
    state = CancellationState()
    with state.scope():
        state.signal_cancel()
        state.signal_cancel()
        assert state.cancel_requests == 2
        assert state.is_cancel_pending()


def test_abort_warning_is_logged(caplog):
    state = CancellationState()
    with caplog.at_level(logging.WARNING, logger="pluginshell.core.cancellation"):
        with state.scope():
            state.signal_cancel()
    assert "Command execution aborted!" in caplog.text


def test_scope_is_closed_when_body_raises():
    state = CancellationState()
    try:
        with state.scope():
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert state.active_scopes == 0


def test_signal_from_another_thread_is_observed():
    state = CancellationState()
    with state.scope():
        worker = threading.Thread(target=state.signal_cancel)
        worker.start()
        worker.join()
        assert state.is_cancel_pending()


def test_signal_while_lock_is_held_by_same_thread():
    """A signal handler may run while the main thread is inside a critical section."""
    state = CancellationState()
    with state.scope():
        with state._lock:
            assert state.signal_cancel()
        assert state.is_cancel_pending()


def test_sigint_handler_while_lock_is_held(tmp_path):
    previous = signal.getsignal(signal.SIGINT)
    shell = Shell(CommandRegistry(), ShellOptions(no_logo=True, no_startup_script=True),
                  library_dir=tmp_path, temp_root=tmp_path)
    try:
        shell.install_signal_handler()
        handler = signal.getsignal(signal.SIGINT)
        with shell.cancellation.scope():
            with shell.cancellation._lock:
                handler(signal.SIGINT, None)
                handler(signal.SIGINT, None)
            assert shell.cancellation.cancel_requests == 2
    finally:
        signal.signal(signal.SIGINT, previous)
