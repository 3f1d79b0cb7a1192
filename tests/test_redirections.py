import io
import os

import pytest

from minishell.redirections import (
    RedirectedIO,
    RedirectionError,
    apply_redirections,
    read_heredoc,
    redirect_append,
    redirect_input,
    redirect_output,
)
from minishell.tokens import Redirection, TokenType


def test_redirect_output_truncates(tmp_path):
    path = tmp_path / "out.txt"
    path.write_text("old content")
    with redirect_output(str(path)) as stream:
        stream.write("new")
    assert path.read_text() == "new"


def test_redirect_output_mode(tmp_path):
    path = tmp_path / "perm.txt"
    old = os.umask(0)
    try:
        redirect_output(str(path)).close()
    finally:
        os.umask(old)
    assert path.stat().st_mode & 0o777 == 0o644


def test_redirect_append_keeps_content(tmp_path):
    path = tmp_path / "log.txt"
    path.write_text("a")
    with redirect_append(str(path)) as stream:
        stream.write("b")
    assert path.read_text() == "ab"


def test_redirect_input_reads(tmp_path):
    path = tmp_path / "in.txt"
    path.write_text("data\n")
    with redirect_input(str(path)) as stream:
        assert stream.read() == "data\n"


def test_redirect_input_missing(tmp_path):
    missing = str(tmp_path / "missing")
    with pytest.raises(RedirectionError) as info:
        redirect_input(missing)
    assert str(info.value).startswith(missing + ": ")


def test_read_heredoc_stops_at_delimiter():
    source = io.StringIO("a\nb\nEOF\nc\n")
    assert read_heredoc("EOF", source) == "a\nb\n"
    assert source.read() == "c\n"


def test_read_heredoc_eof_warns(capsys):
    body = read_heredoc("END", io.StringIO("x\ny"))
    assert body == "x\ny\n"
    assert capsys.readouterr().err == "warning: heredoc delimited by EOF\n"


def test_read_heredoc_delimiter_must_match_whole_line():
    body = read_heredoc("END", io.StringIO("END \nEND\n"))
    assert body == "END \n"


def test_apply_output_replaces_earlier(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    redirections = [
        Redirection(TokenType.REDIROUT, str(first)),
        Redirection(TokenType.REDIROUT, str(second)),
    ]
    with apply_redirections(redirections) as redirected:
        redirected.stdout.write("hi")
        assert redirected.stdin is None
    assert first.read_text() == ""
    assert second.read_text() == "hi"


def test_apply_heredoc_feeds_stdin():
    redirections = [Redirection(TokenType.HEREDOC, "STOP")]
    with apply_redirections(redirections, io.StringIO("one\nSTOP\n")) as redirected:
        assert redirected.stdin.read() == "one\n"
        assert redirected.stdin.fileno() >= 0


def test_heredoc_reads_from_earlier_input(tmp_path):
    path = tmp_path / "in"
    path.write_text("from file\nX\n")
    redirections = [
        Redirection(TokenType.REDIRIN, str(path)),
        Redirection(TokenType.HEREDOC, "X"),
    ]
    with apply_redirections(redirections, io.StringIO("ignored\nX\n")) as redirected:
        assert redirected.stdin.read() == "from file\n"


def test_apply_failure_closes_opened(tmp_path):
    out = tmp_path / "out"
    redirections = [
        Redirection(TokenType.REDIROUT, str(out)),
        Redirection(TokenType.REDIRIN, str(tmp_path / "missing")),
    ]
    with pytest.raises(RedirectionError):
        apply_redirections(redirections)
    assert out.exists()


def test_close_closes_streams(tmp_path):
    out = redirect_output(str(tmp_path / "f"))
    redirected = RedirectedIO(stdout=out)
    redirected.close()
    assert out.closed is True
    redirected.close()
    assert out.closed is True