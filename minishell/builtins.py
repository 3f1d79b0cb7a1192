"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import Optional, TextIO

from .environment import Environment

_LONG_MAX = 2**63 - 1
_DIGITS = "0123456789"
_BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "env", "exit"})
_NUMERIC_REQUIRED = "exit: numeric argument required\n"


class ShellExit(Exception):
    """Raised by ``exit``: the shell should stop with ``status``."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def _out(stream: Optional[TextIO]) -> TextIO:
    return sys.stdout if stream is None else stream


def _err(stream: Optional[TextIO]) -> TextIO:
    return sys.stderr if stream is None else stream


def is_builtin(name: Optional[str]) -> bool:
    """Return True if ``name`` is one of the shell's own commands."""
    return name in _BUILTINS


def is_valid_number(text: Optional[str]) -> bool:
    """Return True for an optional sign followed by at least one digit."""
    if not text:
        return False
    digits = text[1:] if text[0] in "+-" else text
    return bool(digits) and all(char in _DIGITS for char in digits)


def parse_exit_code(text: str) -> int:
    """Return the signed 64-bit value of ``text``; ValueError if it does not fit."""
    if not is_valid_number(text):
        raise ValueError(f"not a number: {text!r}")
    negative = text[0] == "-"
    digits = text[1:] if text[0] in "+-" else text
    magnitude = int(digits)
    if magnitude > _LONG_MAX + negative:
        raise ValueError(f"number out of range: {text!r}")
    return -magnitude if negative else magnitude


def is_valid_name(text: Optional[str]) -> bool:
    """Return True if ``text`` can name a variable."""
    if not text or text[0] in _DIGITS:
        return False
    return all(char == "_" or (char.isascii() and char.isalnum()) for char in text)


def is_n_flag(text: Optional[str]) -> bool:
    """Return True for ``-n``, ``-nn``, ``-nnn`` and so on."""
    if not text or len(text) < 2 or text[0] != "-":
        return False
    return all(char == "n" for char in text[1:])


def builtin_echo(argv: Sequence[str], stdout: Optional[TextIO] = None) -> int:
    """Print the arguments separated by spaces; ``-n`` drops the newline."""
    out = _out(stdout)
    words = list(argv[1:])
    newline = True
    while words and is_n_flag(words[0]):
        newline = False
        words.pop(0)
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def builtin_pwd(
    stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None
) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        _err(stderr).write(f"pwd: {exc.strerror}\n")
        return 1
    _out(stdout).write(cwd + "\n")
    return 0


def builtin_env(env: Environment, stdout: Optional[TextIO] = None) -> int:
    """Print every variable, one per line."""
    out = _out(stdout)
    for entry in env.to_envp():
        out.write(entry + "\n")
    return 0


def builtin_exit(argv: Sequence[str], stderr: Optional[TextIO] = None) -> int:
    """Raise ShellExit with the requested status.

    Returns 1 without exiting when given more than one argument.
    """
    err = _err(stderr)
    if len(argv) < 2:
        raise ShellExit(0)
    if not is_valid_number(argv[1]):
        err.write(_NUMERIC_REQUIRED)
        raise ShellExit(2)
    if len(argv) > 2:
        err.write("exit: too many arguments\n")
        return 1
    try:
        value = parse_exit_code(argv[1])
    except ValueError:
        err.write(_NUMERIC_REQUIRED)
        raise ShellExit(2) from None
    raise ShellExit(value & 0xFF)


def builtin_cd(
    argv: Sequence[str], env: Environment, stderr: Optional[TextIO] = None
) -> int:
    """Change directory and update PWD and OLDPWD."""
    err = _err(stderr)
    if len(argv) < 2:
        err.write("cd: missing argument\n")
        return 1
    old_pwd = env.get("PWD")
    try:
        os.chdir(argv[1])
    except OSError as exc:
        err.write(f"cd: {exc.strerror}\n")
        return 1
    env.set("OLDPWD", old_pwd)
    try:
        cwd = os.getcwd()
    except OSError:
        return 1
    env.set("PWD", cwd)
    return 0


def _export_error(arg: str, stderr: TextIO) -> int:
    stderr.write(f"export: '{arg}': not a valid identifier\n")
    return 1


def _export_assignment(arg: str, sep: int, env: Environment) -> bool:
    append = sep > 0 and arg[sep - 1] == "+"
    key = arg[: sep - append]
    if not is_valid_name(key):
        return False
    value = arg[sep + 1 :]
    if append:
        env.set(key, (env.get(key) or "") + value)
    else:
        env.set(key, value)
    return True


def builtin_export(
    argv: Sequence[str],
    env: Environment,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Set variables from ``NAME=value`` or ``NAME+=value`` arguments."""
    if len(argv) < 2:
        return builtin_env(env, stdout)
    err = _err(stderr)
    status = 0
    for arg in argv[1:]:
        sep = arg.find("=")
        if sep != -1:
            if not _export_assignment(arg, sep, env):
                status = _export_error(arg, err)
        elif not is_valid_name(arg):
            status = _export_error(arg, err)
    return status


def builtin_unset(argv: Sequence[str], env: Environment) -> int:
    """Remove each named variable."""
    for name in argv[1:]:
        env.unset(name)
    return 0


def run_builtin(
    argv: Sequence[str],
    env: Environment,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its status."""
    if not argv:
        return 1
    name = argv[0]
    if name == "echo":
        return builtin_echo(argv, stdout)
    if name == "cd":
        return builtin_cd(argv, env, stderr)
    if name == "pwd":
        return builtin_pwd(stdout, stderr)
    if name == "export":
        return builtin_export(argv, env, stdout, stderr)
    if name == "unset":
        return builtin_unset(argv, env)
    if name == "env":
        return builtin_env(env, stdout)
    if name == "exit":
        return builtin_exit(argv, stderr)
    return 1