import io
import os

import pytest

from dashshell.builtins import (
    ExitRequested,
    ExportItem,
    builtin_cd,
    builtin_echo,
    builtin_env,
    builtin_exit,
    builtin_export,
    builtin_pwd,
    builtin_unset,
    echo_suppresses_newline,
    echo_text,
    is_builtin,
    is_valid_key,
    parse_export,
    requires_parent,
    run_builtin,
)
from dashshell.environment import Environment


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


@pytest.mark.parametrize(
    "args, expected",
    [
        (["echo", "-n", "hi"], True),
        (["echo", "-nnnn", "hi"], True),
        (["echo", "-nx", "hi"], False),
        (["echo", "-", "hi"], False),
        (["echo", "hi"], False),
        (["echo"], False),
    ],
)
def test_echo_suppresses_newline(args, expected):
    assert echo_suppresses_newline(args) is expected


def test_echo_text_joins_with_spaces():
    assert echo_text(["echo", "hello", "world"]) == "hello world"


def test_echo_text_only_first_flag_is_consumed():
    assert echo_text(["echo", "-n", "-n", "x"]) == "-n x"


def test_builtin_echo_newline(streams):
    out, _ = streams
    assert builtin_echo(["echo", "a", "b"], out) == 0
    assert out.getvalue() == "a b\n"


def test_builtin_echo_without_newline(streams):
    out, _ = streams
    assert builtin_echo(["echo", "-n", "a", "b"], out) == 0
    assert out.getvalue() == "a b"


def test_builtin_echo_no_args(streams):
    out, _ = streams
    builtin_echo(["echo"], out)
    assert out.getvalue() == "\n"


def test_parse_export_simple():
    assert parse_export("a=b") == ExportItem("a", "b", False)


def test_parse_export_append():
    assert parse_export("a+=b") == ExportItem("a", "b", True)


def test_parse_export_no_value():
    assert parse_export("name") == ExportItem("name", "", False)


def test_parse_export_keeps_only_second_piece():
    assert parse_export("a=b=c").value == "b"


def test_parse_export_leading_equals_is_invalid():
    item = parse_export("=x")
    assert is_valid_key(item) is False


def test_parse_export_empty_raises():
    with pytest.raises(ValueError):
        parse_export("")


@pytest.mark.parametrize(
    "key, valid",
    [("_x", True), ("abc", True), ("a-b", True), ("1a", False), ("a ", False), ("", False)],
)
def test_is_valid_key(key, valid):
    assert is_valid_key(ExportItem(key)) is valid


def test_export_adds_new_entry(streams):
    out, err = streams
    env = Environment(["A=1"])
    assert builtin_export(["export", "B=2"], env, out, err) == 0
    assert list(env) == ["A=1", "B=2"]


def test_export_without_value_adds_bare_entry(streams):
    out, err = streams
    env = Environment()
    builtin_export(["export", "B"], env, out, err)
    assert list(env) == ["B"]
    assert env.get("B") is None


def test_export_replaces_existing(streams):
    out, err = streams
    env = Environment(["A=1", "B=2"])
    builtin_export(["export", "A=9"], env, out, err)
    assert list(env) == ["A=9", "B=2"]


def test_export_appends_to_existing(streams):
    out, err = streams
    env = Environment(["a=13"])
    builtin_export(["export", "a+=37"], env, out, err)
    assert env.get("a") == "1337"


def test_export_invalid_reports_and_continues(streams):
    out, err = streams
    env = Environment()
    assert builtin_export(["export", "1x=2", "ok=yes"], env, out, err) == 1
    assert "not a valid identifier" in err.getvalue()
    assert env.get("ok") == "yes"
    assert env.index_of("1x") is None


def test_export_without_args_sorts_and_prints(streams):
    out, err = streams
    env = Environment(["B=2", "A=1", "C"])
    assert builtin_export(["export"], env, out, err) == 0
    assert list(env) == ["A=1", "B=2", "C"]
    assert out.getvalue() == "A=1\nB=2\nC\n"


def test_env_prints_only_entries_with_values(streams):
    out, _ = streams
    env = Environment(["A=1", "BARE", "B="])
    assert builtin_env(env, out) == 0
    assert out.getvalue() == "A=1\nB=\n"


def test_cd_to_directory_updates_pwd(tmp_path, monkeypatch, streams):
    out, err = streams
    start = tmp_path / "start"
    target = tmp_path / "target"
    start.mkdir()
    target.mkdir()
    monkeypatch.chdir(start)
    before = os.getcwd()
    env = Environment(["PWD=x", "OLDPWD=y"])
    assert builtin_cd(["cd", str(target)], env, out, err) == 0
    assert env.get("PWD") == os.getcwd()
    assert env.get("OLDPWD") == before
    assert os.path.samefile(os.getcwd(), target)


def test_cd_home(tmp_path, monkeypatch, streams):
    out, err = streams
    monkeypatch.chdir(tmp_path)
    home = tmp_path / "home"
    home.mkdir()
    env = Environment([f"HOME={home}"])
    assert builtin_cd(["cd"], env, out, err) == 0
    assert os.path.samefile(os.getcwd(), home)
    assert env.get("PWD") is None


def test_cd_home_not_set(tmp_path, monkeypatch, streams):
    out, err = streams
    monkeypatch.chdir(tmp_path)
    assert builtin_cd(["cd"], Environment(), out, err) == 1
    assert out.getvalue() == "cd: HOME not set\n"


def test_cd_missing_directory(tmp_path, monkeypatch, streams):
    out, err = streams
    monkeypatch.chdir(tmp_path)
    missing = str(tmp_path / "missing")
    assert builtin_cd(["cd", missing], Environment(), out, err) == 1
    assert err.getvalue() == f"cd: {missing}: No such file or directory\n"
    assert os.path.samefile(os.getcwd(), tmp_path)


def test_cd_empty_target_is_silent(tmp_path, monkeypatch, streams):
    out, err = streams
    monkeypatch.chdir(tmp_path)
    assert builtin_cd(["cd", ""], Environment(), out, err) == 1
    assert err.getvalue() == ""


def test_pwd_prints_cwd(tmp_path, monkeypatch, streams):
    out, err = streams
    monkeypatch.chdir(tmp_path)
    assert builtin_pwd(out, err) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_unset_removes_variables():
    env = Environment(["A=1", "B=2", "C=3"])
    assert builtin_unset(["unset", "A", "C", "NOPE"], env) == 0
    assert list(env) == ["B=2"]


def test_unset_leaves_bare_entries():
    env = Environment(["A"])
    builtin_unset(["unset", "A"], env)
    assert list(env) == ["A"]


def test_unset_without_args():
    env = Environment(["A=1"])
    assert builtin_unset(["unset"], env) == -1
    assert list(env) == ["A=1"]


def test_exit_raises_with_status():
    with pytest.raises(ExitRequested) as info:
        builtin_exit(7)
    assert info.value.status == 7


@pytest.mark.parametrize("name", ["cd", "echo", "env", "export", "pwd", "exit", "unset"])
def test_is_builtin_names(name):
    assert is_builtin([name]) is True


def test_is_builtin_rejects_others():
    assert is_builtin(["ls"]) is False
    assert is_builtin([]) is False


@pytest.mark.parametrize(
    "name, expected",
    [("cd", True), ("export", True), ("unset", True), ("exit", True),
     ("echo", False), ("pwd", False), ("env", False), ("ls", False)],
)
def test_requires_parent(name, expected):
    assert requires_parent([name]) is expected


def test_run_builtin_dispatches_echo(streams):
    out, err = streams
    assert run_builtin(["echo", "hi"], Environment(), out, err) == 0
    assert out.getvalue() == "hi\n"


def test_run_builtin_dispatches_export_and_unset(streams):
    out, err = streams
    env = Environment()
    run_builtin(["export", "K=v"], env, out, err)
    assert env.get("K") == "v"
    run_builtin(["unset", "K"], env, out, err)
    assert len(env) == 0


def test_run_builtin_not_builtin(streams):
    out, err = streams
    assert run_builtin(["ls"], Environment(), out, err) == 1
    assert out.getvalue() == ""


def test_run_builtin_exit_uses_last_status(streams):
    out, err = streams
    with pytest.raises(ExitRequested) as info:
        run_builtin(["exit"], Environment(), out, err, last_status=3)
    assert info.value.status == 3