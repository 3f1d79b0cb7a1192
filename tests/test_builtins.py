import io
import os

import pytest

from minishell.builtins import (
    ShellExit,
    builtin_cd,
    builtin_echo,
    builtin_env,
    builtin_exit,
    builtin_export,
    builtin_pwd,
    builtin_unset,
    is_builtin,
    is_n_flag,
    is_valid_name,
    is_valid_number,
    parse_exit_code,
    run_builtin,
)
from minishell.environment import Environment


@pytest.fixture
def env():
    return Environment.from_envp(["HOME=/home/user", "PATH=/bin"])


@pytest.mark.parametrize(
    "name", ["echo", "cd", "pwd", "export", "unset", "env", "exit"]
)
def test_is_builtin_known(name):
    assert is_builtin(name) is True


@pytest.mark.parametrize("name", ["ls", "", None, "ECHO"])
def test_is_builtin_unknown(name):
    assert is_builtin(name) is False


def test_echo_joins_arguments():
    out = io.StringIO()
    assert builtin_echo(["echo", "a", "b"], out) == 0
    assert out.getvalue() == "a b\n"


def test_echo_n_flags_suppress_newline():
    out = io.StringIO()
    builtin_echo(["echo", "-n", "-nnn", "a"], out)
    assert out.getvalue() == "a"


def test_echo_flag_only_at_start():
    out = io.StringIO()
    builtin_echo(["echo", "x", "-n"], out)
    assert out.getvalue() == "x -n\n"


@pytest.mark.parametrize("text,expected", [
    ("-n", True), ("-nnn", True), ("-", False), ("", False), ("-na", False), ("n", False),
])
def test_is_n_flag(text, expected):
    assert is_n_flag(text) is expected


@pytest.mark.parametrize("text,expected", [
    ("42", True), ("+1", True), ("-1", True), ("", False), ("+", False), ("1a", False),
])
def test_is_valid_number(text, expected):
    assert is_valid_number(text) is expected


def test_parse_exit_code_limits():
    assert parse_exit_code("9223372036854775807") == 9223372036854775807
    assert parse_exit_code("-9223372036854775808") == -9223372036854775808
    assert parse_exit_code("+7") == 7


@pytest.mark.parametrize("text", ["9223372036854775808", "-9223372036854775809", "x"])
def test_parse_exit_code_rejects(text):
    with pytest.raises(ValueError):
        parse_exit_code(text)


@pytest.mark.parametrize("text,expected", [
    ("HOME", True), ("_x1", True), ("1A", False), ("A-B", False), ("", False),
])
def test_is_valid_name(text, expected):
    assert is_valid_name(text) is expected


def test_exit_without_argument():
    with pytest.raises(ShellExit) as info:
        builtin_exit(["exit"], io.StringIO())
    assert info.value.status == 0


def test_exit_with_code():
    with pytest.raises(ShellExit) as info:
        builtin_exit(["exit", "42"], io.StringIO())
    assert info.value.status == 42


def test_exit_wraps_into_byte():
    with pytest.raises(ShellExit) as info:
        builtin_exit(["exit", "-1"], io.StringIO())
    assert 0 <= info.value.status <= 255
    assert (info.value.status + 1) % 256 == 0


@pytest.mark.parametrize("arg", ["abc", "99999999999999999999"])
def test_exit_non_numeric(arg):
    err = io.StringIO()
    with pytest.raises(ShellExit) as info:
        builtin_exit(["exit", arg], err)
    assert info.value.status == 2
    assert err.getvalue() == "exit: numeric argument required\n"


def test_exit_too_many_arguments():
    err = io.StringIO()
    assert builtin_exit(["exit", "1", "2"], err) == 1
    assert err.getvalue() == "exit: too many arguments\n"


def test_export_sets_and_appends(env):
    assert builtin_export(["export", "A=1"], env) == 0
    assert env.get("A") == "1"
    builtin_export(["export", "A+=2"], env)
    assert env.get("A") == "12"


def test_export_append_to_missing(env):
    builtin_export(["export", "NEW+=v"], env)
    assert env.get("NEW") == "v"


def test_export_invalid_identifier(env):
    err = io.StringIO()
    assert builtin_export(["export", "1A=3"], env, io.StringIO(), err) == 1
    assert err.getvalue() == "export: '1A=3': not a valid identifier\n"
    assert "1A" not in env


def test_export_bare_name_does_not_create(env):
    assert builtin_export(["export", "B"], env) == 0
    assert "B" not in env


def test_export_without_arguments_prints_env(env):
    out = io.StringIO()
    builtin_export(["export"], env, out)
    assert out.getvalue().splitlines() == env.to_envp()


def test_env_prints_entries(env):
    out = io.StringIO()
    assert builtin_env(env, out) == 0
    assert out.getvalue().splitlines() == env.to_envp()


def test_unset_removes(env):
    assert builtin_unset(["unset", "HOME", "MISSING"], env) == 0
    assert env.get("HOME") is None
    assert env.get("PATH") == "/bin"


def test_pwd_prints_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    assert builtin_pwd(out, io.StringIO()) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_cd_updates_pwd(tmp_path, monkeypatch, env):
    monkeypatch.chdir(tmp_path)
    env.set("PWD", "/old")
    target = tmp_path / "sub"
    target.mkdir()
    assert builtin_cd(["cd", str(target)], env, io.StringIO()) == 0
    assert env.get("PWD") == os.getcwd()
    assert env.get("OLDPWD") == "/old"


def test_cd_missing_argument(env):
    err = io.StringIO()
    assert builtin_cd(["cd"], env, err) == 1
    assert err.getvalue() == "cd: missing argument\n"


def test_cd_nonexistent(tmp_path, monkeypatch, env):
    monkeypatch.chdir(tmp_path)
    err = io.StringIO()
    assert builtin_cd(["cd", str(tmp_path / "nope")], env, err) == 1
    assert err.getvalue().startswith("cd: ")
    assert os.getcwd() == str(tmp_path)


def test_run_builtin_dispatch(env):
    out = io.StringIO()
    assert run_builtin(["echo", "x"], env, out, io.StringIO()) == 0
    assert out.getvalue() == "x\n"
    with pytest.raises(ShellExit):
        run_builtin(["exit"], env, out, io.StringIO())
    assert run_builtin(["ls"], env, out, io.StringIO()) == 1