"""Opening the files and here-documents that redirect a command's I/O."""

from __future__ import annotations

import os
import sys
import tempfile
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, TextIO

from .tokens import Redirection, TokenType

_MAX_LINE = 4095
_CREATE_MODE = 0o644
_ENCODING = "utf-8"


class RedirectionError(Exception):
    """Raised when a redirection target cannot be opened."""


@dataclass
class RedirectedIO:
    """The input and output a command should use instead of the shell's."""

    stdin: Optional[TextIO] = None
    stdout: Optional[TextIO] = None

    def close(self) -> None:
        """Close any redirected stream."""
        for stream in (self.stdin, self.stdout):
            if stream is not None and not stream.closed:
                stream.close()

    def __enter__(self) -> "RedirectedIO":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _read_line(source: TextIO) -> Optional[str]:
    line = source.readline(_MAX_LINE)
    if not line:
        return None
    return line[:-1] if line.endswith("\n") else line


def read_heredoc(delimiter: str, source: Optional[TextIO] = None) -> str:
    """Read lines from ``source`` until ``delimiter`` and return the body."""
    stream = sys.stdin if source is None else source
    lines = []
    while True:
        line = _read_line(stream)
        if line is None:
            sys.stderr.write("warning: heredoc delimited by EOF\n")
            break
        if line == delimiter:
            break
        lines.append(line + "\n")
    return "".join(lines)


def _failure(path: str, exc: OSError) -> RedirectionError:
    return RedirectionError(f"{path}: {exc.strerror}")


def redirect_input(path: str) -> TextIO:
    """Open ``path`` for reading."""
    try:
        return open(path, encoding=_ENCODING)
    except OSError as exc:
        raise _failure(path, exc) from None


def _open_for_writing(path: str, extra_flag: int, mode: str) -> TextIO:
    try:
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | extra_flag, _CREATE_MODE)
        except OSError:
            fd = os.open(path, os.O_WRONLY)
    except OSError as exc:
        raise _failure(path, exc) from None
    return os.fdopen(fd, mode, encoding=_ENCODING)


def redirect_output(path: str) -> TextIO:
    """Open ``path`` for writing, creating or truncating it."""
    return _open_for_writing(path, os.O_TRUNC, "w")


def redirect_append(path: str) -> TextIO:
    """Open ``path`` for appending, creating it if needed."""
    return _open_for_writing(path, os.O_APPEND, "a")


def _heredoc_stream(body: str) -> TextIO:
    stream = tempfile.TemporaryFile("w+", encoding=_ENCODING)
    stream.write(body)
    stream.seek(0)
    return stream


def apply_redirections(
    redirections: Iterable[Redirection], source: Optional[TextIO] = None
) -> RedirectedIO:
    """Open every redirection in order; later ones replace earlier ones.

    A here-document reads from the input chosen so far, or from ``source``.
    On failure everything already opened is closed and RedirectionError
    is raised.
    """
    io = RedirectedIO()
    try:
        for redirection in redirections:
            kind, target = redirection.kind, redirection.target
            if kind is TokenType.REDIRIN:
                _replace_input(io, redirect_input(target))
            elif kind is TokenType.HEREDOC:
                reader = io.stdin if io.stdin is not None else source
                _replace_input(io, _heredoc_stream(read_heredoc(target, reader)))
            elif kind is TokenType.REDIROUT:
                _replace_output(io, redirect_output(target))
            elif kind is TokenType.APPEND:
                _replace_output(io, redirect_append(target))
    except BaseException:
        io.close()
        raise
    return io


def _replace_input(io: RedirectedIO, stream: TextIO) -> None:
    if io.stdin is not None:
        io.stdin.close()
    io.stdin = stream


def _replace_output(io: RedirectedIO, stream: TextIO) -> None:
    if io.stdout is not None:
        io.stdout.close()
    io.stdout = stream