"""Running parsed commands: builtins in-process, programs as child processes."""

from __future__ import annotations

import os
import stat
import subprocess
import sys
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from contextlib import suppress
from typing import Optional, TextIO

from .builtins import ShellExit, is_builtin, run_builtin
from .environment import Environment
from .redirections import RedirectedIO, RedirectionError, apply_redirections
from .tokens import Command

_NOT_FOUND = 127
_NOT_EXECUTABLE = 126
_ENCODING = "utf-8"


def is_path_command(cmd: Optional[str]) -> bool:
    """Return True if ``cmd`` names a file directly, that is contains ``/``."""
    return bool(cmd) and "/" in cmd


def join_command_path(directory: str, cmd: str) -> str:
    """Return ``directory/cmd``."""
    return f"{directory}/{cmd}"


def find_command_path(cmd: Optional[str], env: Environment) -> Optional[str]:
    """Return the executable file that ``cmd`` resolves to, or None.

    A command containing ``/`` is checked as given. Otherwise each
    directory of PATH is tried in order; without PATH the current
    directory is searched.
    """
    if not cmd:
        return None
    if is_path_command(cmd):
        return cmd if os.access(cmd, os.X_OK) else None
    path_value = env.get("PATH")
    directories = ["."] if path_value is None else path_value.split(":")
    for directory in directories:
        if not directory:
            continue
        candidate = join_command_path(directory, cmd)
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def _fileno(stream: TextIO) -> Optional[int]:
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError):
        return None


def _exec_failure_status(name: str, path: str) -> int:
    try:
        info = os.stat(path)
    except OSError:
        return _NOT_FOUND
    if not stat.S_ISDIR(info.st_mode):
        return _NOT_EXECUTABLE
    if is_path_command(name):
        return _NOT_EXECUTABLE
    return _NOT_FOUND


def run_external(
    argv: Sequence[str],
    env: Environment,
    stdin: Optional[TextIO] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    """Run the program named by ``argv[0]`` and return its exit status.

    Returns 127 when the command is not found and 126 when it exists but
    cannot be executed. A program killed by a signal gives 1.
    """
    if not argv:
        return 1
    name = argv[0]
    path = find_command_path(name, env)
    if path is None:
        sys.stderr.write(f"{name}: command not found\n")
        return _NOT_FOUND
    options: dict = {}
    if stdin is not None:
        fd = _fileno(stdin)
        if fd is None:
            options["input"] = stdin.read().encode(_ENCODING)
        else:
            options["stdin"] = fd
    capture = False
    if stdout is None:
        sys.stdout.flush()
    else:
        fd = _fileno(stdout)
        if fd is None:
            options["stdout"] = subprocess.PIPE
            capture = True
        else:
            stdout.flush()
            options["stdout"] = fd
    try:
        completed = subprocess.run(
            list(argv),
            executable=path,
            env=env.as_mapping(),
            check=False,
            **options,
        )
    except OSError as exc:
        sys.stderr.write(f"{name}: {exc.strerror or exc}\n")
        return _exec_failure_status(name, path)
    if capture and completed.stdout:
        stdout.write(completed.stdout.decode(_ENCODING, errors="replace"))
    return completed.returncode if completed.returncode >= 0 else 1


def execute_command(
    argv: Sequence[str], env: Environment, io: Optional[RedirectedIO] = None
) -> int:
    """Run one command with the given I/O, as a builtin or as a program.

    An empty command succeeds. ShellExit raised by ``exit`` propagates.
    """
    if not argv:
        return 0
    streams = io if io is not None else RedirectedIO()
    if is_builtin(argv[0]):
        return run_builtin(argv, env, streams.stdout, None)
    return run_external(argv, env, streams.stdin, streams.stdout)


def _execute_single(command: Command, env: Environment) -> int:
    try:
        redirected = apply_redirections(command.redirections)
    except RedirectionError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    with redirected:
        return execute_command(command.args, env, redirected)


def _copy_environment(env: Environment) -> Environment:
    copy = Environment()
    for key in env:
        copy.set(key, env.get(key))
    return copy


def _close_quietly(stream: Optional[TextIO]) -> None:
    if stream is not None:
        with suppress(OSError, ValueError):
            stream.close()


def _run_stage(
    command: Command, env: Environment, in_fd: Optional[int], out_fd: Optional[int]
) -> int:
    stdin = os.fdopen(in_fd, "r", encoding=_ENCODING) if in_fd is not None else None
    stdout = (
        os.fdopen(out_fd, "w", encoding=_ENCODING) if out_fd is not None else None
    )
    try:
        try:
            redirected = apply_redirections(command.redirections, stdin)
        except RedirectionError as exc:
            sys.stderr.write(f"{exc}\n")
            return 1
        with redirected:
            if not command.args:
                return 0
            streams = RedirectedIO(
                redirected.stdin if redirected.stdin is not None else stdin,
                redirected.stdout if redirected.stdout is not None else stdout,
            )
            try:
                return execute_command(command.args, env, streams)
            except ShellExit as exc:
                return exc.status
            except BrokenPipeError:
                return 1
    finally:
        _close_quietly(stdout)
        _close_quietly(stdin)


def _open_pipes(count: int) -> list[tuple[int, int]]:
    pipes: list[tuple[int, int]] = []
    try:
        for _ in range(count):
            pipes.append(os.pipe())
    except OSError:
        for read_end, write_end in pipes:
            os.close(read_end)
            os.close(write_end)
        raise
    return pipes


def execute_pipeline(commands: Sequence[Command], env: Environment) -> int:
    """Run ``commands`` connected by pipes and return the last one's status.

    Every stage runs concurrently with its own copy of the environment, so
    builtins in a pipeline do not change the shell's variables.
    """
    stages = list(commands)
    if not stages:
        return 0
    try:
        pipes = _open_pipes(len(stages) - 1)
    except OSError as exc:
        sys.stderr.write(f"pipe: {exc.strerror}\n")
        return 1
    inputs: list[Optional[int]] = [None, *(read_end for read_end, _ in pipes)]
    outputs: list[Optional[int]] = [*(write_end for _, write_end in pipes), None]
    sys.stdout.flush()
    with ThreadPoolExecutor(max_workers=len(stages)) as pool:
        futures = [
            pool.submit(_run_stage, command, _copy_environment(env), in_fd, out_fd)
            for command, in_fd, out_fd in zip(stages, inputs, outputs)
        ]
        statuses = [future.result() for future in futures]
    return statuses[-1]


def execute_command_list(
    commands: Sequence[Command], env: Environment, last_status: int = 0
) -> int:
    """Run a parsed command line and return its exit status.

    A single command runs in the shell itself, so its builtins affect the
    shell; several commands form a pipeline.
    """
    if not commands:
        return 0
    if len(commands) == 1:
        return _execute_single(commands[0], env)
    return execute_pipeline(commands, env)