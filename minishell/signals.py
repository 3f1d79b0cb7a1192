"""Interrupt handling and shell start-up."""

from __future__ import annotations

import signal
import sys
from collections.abc import Iterable
from typing import Optional

from .environment import Environment

INTERRUPTED_STATUS = 130

_pending_signal = 0


def _on_interrupt(signum: int, frame: object) -> None:
    global _pending_signal
    _pending_signal = signum
    sys.stdout.write("\n")
    sys.stdout.flush()


def _quit_signal() -> Optional[int]:
    return getattr(signal, "SIGQUIT", None)


def install_handlers() -> None:
    """Record Ctrl-C instead of dying, and ignore the quit signal."""
    signal.signal(signal.SIGINT, _on_interrupt)
    quit_signal = _quit_signal()
    if quit_signal is not None:
        signal.signal(quit_signal, signal.SIG_IGN)


def restore_default_handlers() -> None:
    """Give both signals their default behaviour again."""
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    quit_signal = _quit_signal()
    if quit_signal is not None:
        signal.signal(quit_signal, signal.SIG_DFL)


def take_interrupt(status: int) -> int:
    """Return 130 and clear the flag if Ctrl-C arrived, else ``status``."""
    global _pending_signal
    if _pending_signal == signal.SIGINT:
        _pending_signal = 0
        return INTERRUPTED_STATUS
    return status


def initialize(envp: Optional[Iterable[str]]) -> Environment:
    """Build the environment from ``envp`` and install the signal handlers."""
    env = Environment.from_envp(envp)
    install_handlers()
    return env