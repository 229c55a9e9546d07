"""Unit tests for the signal handler module in the chunkreader CLI."""

import os
import signal
import sys
from unittest.mock import MagicMock, patch

import pytest

from chunkreader.cli.signal_handler import SignalHandler, cleanup, setup_signal_handling, signal_handler

requires_sigpipe = pytest.mark.skipif(not hasattr(signal, "SIGPIPE"), reason="SIGPIPE not available")


@pytest.fixture
def mock_signal():
    """Create a mock for signal.signal."""
    with patch("signal.signal", autospec=True) as mock:
        yield mock


@pytest.fixture
def mock_os():
    """Create a mock for os module functions used in signal handling."""
    with patch("chunkreader.cli.signal_handler.os", autospec=True) as mock:
        mock.open.return_value = 123  # Mock file descriptor
        mock.dup2 = MagicMock()
        mock.devnull = "/dev/null"
        mock.O_WRONLY = os.O_WRONLY
        yield mock


@pytest.fixture
def fresh_signal_handler():
    """Create a fresh SignalHandler instance for tests."""
    return SignalHandler()


@pytest.fixture
def restore_singleton():
    """Restore the flags of the module-level signal handler after a test."""
    sigpipe = signal_handler.sigpipe_received.is_set()
    sigint = signal_handler.sigint_received.is_set()
    yield signal_handler
    for event, was_set in ((signal_handler.sigpipe_received, sigpipe), (signal_handler.sigint_received, sigint)):
        if was_set:
            event.set()
        else:
            event.clear()


def test_signal_handler_initialization(fresh_signal_handler):
    """Test SignalHandler initialization."""
    assert not fresh_signal_handler.sigpipe_received.is_set()
    assert not fresh_signal_handler.sigint_received.is_set()
    assert not fresh_signal_handler.interrupted()
    assert fresh_signal_handler.exit_code() is None
    assert fresh_signal_handler.original_sigint_handler is not None


@requires_sigpipe
def test_handle_sigpipe(fresh_signal_handler, mock_signal):
    """Test the SIGPIPE handler function."""
    fresh_signal_handler.handle_sigpipe(signal.SIGPIPE, MagicMock())

    assert fresh_signal_handler.sigpipe_received.is_set()
    assert fresh_signal_handler.interrupted()
    assert fresh_signal_handler.exit_code() == 141
    mock_signal.assert_called_once_with(signal.SIGPIPE, fresh_signal_handler.original_sigpipe_handler)


def test_handle_sigint(fresh_signal_handler, mock_signal):
    """Test the SIGINT handler function."""
    fresh_signal_handler.handle_sigint(signal.SIGINT, MagicMock())

    assert fresh_signal_handler.sigint_received.is_set()
    assert fresh_signal_handler.exit_code() == 130
    mock_signal.assert_called_once_with(signal.SIGINT, fresh_signal_handler.original_sigint_handler)


def test_sigpipe_exit_code_takes_precedence(fresh_signal_handler):
    fresh_signal_handler.sigint_received.set()
    fresh_signal_handler.sigpipe_received.set()
    assert fresh_signal_handler.exit_code() == 141


@requires_sigpipe
def test_setup_signal_handling(mock_signal):
    """Test signal handler setup function."""
    setup_signal_handling()

    assert mock_signal.call_count == 2
    mock_signal.assert_any_call(signal.SIGPIPE, signal_handler.handle_sigpipe)
    mock_signal.assert_any_call(signal.SIGINT, signal_handler.handle_sigint)


def test_cleanup_with_no_signals(mock_os, restore_singleton):
    """Test cleanup function when no signals were received."""
    restore_singleton.sigpipe_received.clear()
    restore_singleton.sigint_received.clear()

    cleanup()

    mock_os.open.assert_not_called()
    mock_os.dup2.assert_not_called()


@pytest.mark.parametrize("received", ["sigpipe_received", "sigint_received"])
def test_cleanup_after_signal(mock_os, restore_singleton, received):
    """Test that stdout is redirected to the null device after a signal."""
    restore_singleton.sigpipe_received.clear()
    restore_singleton.sigint_received.clear()
    getattr(restore_singleton, received).set()

    with patch.object(sys, "stdout") as mock_stdout:
        mock_stdout.fileno.return_value = 1
        cleanup()

    mock_os.open.assert_called_once_with("/dev/null", os.O_WRONLY)
    mock_os.dup2.assert_called_once_with(123, 1)
