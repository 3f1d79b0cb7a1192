"""The interactive read-eval loop and the command-line entry point."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import Optional, TextIO

from .builtins import ShellExit
from .environment import Environment
from .executor import execute_command_list
from .lexer import LexerError, lex
from .parser import parse_commands
from .signals import initialize, take_interrupt

PROMPT = "minishell🔥66🔥$ "
SYNTAX_ERROR_STATUS = 2

_MAX_LINE = 4095


def _stdin_is_tty() -> bool:
    try:
        return sys.stdin.isatty()
    except (AttributeError, ValueError):
        return False


def _add_history(line: str) -> None:
    try:
        import readline
    except ImportError:
        return
    readline.add_history(line)


def read_line(stream: Optional[TextIO] = None) -> Optional[str]:
    """Read one line of at most 4095 characters, without its newline.

    Returns None at end of input when nothing was read.
    """
    source = sys.stdin if stream is None else stream
    line = source.readline(_MAX_LINE)
    if not line:
        return None
    return line[:-1] if line.endswith("\n") else line


def run_line(line: Optional[str], env: Environment, last_status: int) -> int:
    """Lex, parse and execute one input line and return the new status.

    An empty line keeps ``last_status``; a syntax error gives 2. ShellExit
    raised by ``exit`` propagates to the caller.
    """
    if not line:
        return last_status
    if _stdin_is_tty():
        _add_history(line)
    try:
        tokens = lex(line, env.as_mapping(), last_status)
    except LexerError as exc:
        sys.stderr.write(f"{exc}\n")
        return SYNTAX_ERROR_STATUS
    commands = parse_commands(tokens)
    if not commands:
        return last_status
    return execute_command_list(commands, env, last_status)


def _next_line(interactive: bool, stream: Optional[TextIO]) -> Optional[str]:
    if not interactive:
        return read_line(stream)
    try:
        return input(PROMPT)
    except EOFError:
        return None


def run_loop(env: Environment, stream: Optional[TextIO] = None) -> int:
    """Read and run lines until end of input or ``exit``; return the status.

    With no ``stream`` and a terminal on standard input, lines are read
    with a prompt and ``exit`` is printed at end of input.
    """
    interactive = stream is None and _stdin_is_tty()
    last_status = 0
    while True:
        line = _next_line(interactive, stream)
        if line is None:
            if interactive:
                sys.stdout.write("exit\n")
                sys.stdout.flush()
            break
        last_status = take_interrupt(last_status)
        try:
            last_status = run_line(line, env, last_status)
        except ShellExit as exc:
            return exc.status
    return last_status


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the shell with the process environment; return its exit status."""
    envp = [f"{key}={value}" for key, value in os.environ.items()]
    try:
        env = initialize(envp)
    except ValueError:
        return 1
    status = run_loop(env)
    sys.stdout.flush()
    return status


if __name__ == "__main__":
    sys.exit(main())