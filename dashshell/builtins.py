"""The shell's builtin commands: echo, cd, pwd, env, export, unset and exit."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Sequence, TextIO

from .environment import Environment
from .splitting import split_delimiter

_BUILTINS = frozenset({"cd", "echo", "env", "export", "pwd", "exit", "unset"})
_PARENT_BUILTINS = frozenset({"cd", "export", "unset", "exit"})
_INVALID_IDENTIFIER = "not a valid identifier\n"


class ExitRequested(Exception):
    """Raised by the ``exit`` builtin; ``status`` is the status to exit with."""

    def __init__(self, status: int) -> None:
        super().__init__(f"exit {status}")
        self.status = status


@dataclass
class ExportItem:
    """One ``export`` argument: the key, its value and whether to append."""

    key: str
    value: str = ""
    append: bool = False


def echo_suppresses_newline(args: Sequence[str]) -> bool:
    """Return True if the first argument is ``-n`` or ``-nn...n``."""
    if len(args) < 2:
        return False
    flag = args[1]
    return flag.startswith("-n") and set(flag[1:]) == {"n"}


def echo_text(args: Sequence[str]) -> str:
    """Join the arguments ``echo`` prints with single spaces."""
    first = 2 if echo_suppresses_newline(args) else 1
    return " ".join(args[first:])


def parse_export(arg: str) -> ExportItem:
    """Split an ``export`` argument into key and value.

    ``KEY+=VALUE`` asks for the value to be appended. Only the text between
    the first and second ``=`` is taken as the value. An argument starting
    with ``=`` gets an empty (invalid) key; an empty argument raises ValueError.
    """
    if arg.startswith("="):
        return ExportItem(key="", value=arg[1:])
    pieces = split_delimiter(arg, "=")
    if not pieces:
        raise ValueError("empty export argument")
    key = pieces[0]
    value = pieces[1] if len(pieces) > 1 else ""
    append = key.endswith("+")
    if append:
        key = key[:-1]
    return ExportItem(key=key, value=value, append=append)


def is_valid_key(item: ExportItem) -> bool:
    """Return True if the key starts with a letter or underscore and has no trailing space."""
    key = item.key
    if not key:
        return False
    first = key[0]
    if not (first == "_" or (first.isascii() and first.isalpha())):
        return False
    return not key.endswith(" ")


def builtin_echo(args: Sequence[str], out: TextIO) -> int:
    """Print the arguments, with a newline unless ``-n`` was given."""
    text = echo_text(args)
    out.write(text if echo_suppresses_newline(args) else text + "\n")
    return 0


def builtin_env(env: Environment, out: TextIO) -> int:
    """Print every entry that carries a value."""
    for entry in env:
        if "=" in entry:
            out.write(entry + "\n")
    return 0


def _export_one(arg: str, env: Environment, err: TextIO) -> bool:
    try:
        item = parse_export(arg)
    except ValueError:
        return False
    if not is_valid_key(item):
        err.write(_INVALID_IDENTIFIER)
        return False
    index = env.index_of(item.key)
    if index is not None:
        old = env.get(item.key) or ""
        value = old + item.value if item.append else item.value
        env.replace_entry(index, f"{item.key}={value}")
    elif item.value:
        env.append_entry(f"{item.key}={item.value}")
    else:
        env.append_entry(item.key)
    return True


def builtin_export(args: Sequence[str], env: Environment, out: TextIO, err: TextIO) -> int:
    """Set or append variables; with no arguments sort and print the environment."""
    if len(args) < 2:
        env.sort()
        for entry in env:
            out.write(entry + "\n")
        return 0
    status = 0
    for arg in args[1:]:
        if not _export_one(arg, env, err):
            status = 1
    return status


def builtin_cd(args: Sequence[str], env: Environment, out: TextIO, err: TextIO) -> int:
    """Change directory to the argument or ``$HOME``, updating PWD and OLDPWD."""
    if len(args) > 1:
        target = args[1]
    else:
        home = env.get("HOME")
        if home is None:
            out.write("cd: HOME not set\n")
            return 1
        target = home
    try:
        old_pwd = os.getcwd()
    except OSError as exc:
        err.write(f"getcwd: {exc.strerror}\n")
        return 1
    try:
        os.chdir(target)
    except OSError:
        if target:
            err.write(f"cd: {target}: No such file or directory\n")
        return 1
    try:
        new_pwd = os.getcwd()
    except OSError as exc:
        err.write(f"getcwd: {exc.strerror}\n")
        return 1
    env.update("OLDPWD", old_pwd)
    env.update("PWD", new_pwd)
    return 0


def builtin_pwd(out: TextIO, err: TextIO) -> int:
    """Print the current directory; return -1 if it cannot be read."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        err.write(f"getcwd: {exc.strerror}\n")
        return -1
    out.write(cwd + "\n")
    return 0


def builtin_unset(args: Sequence[str], env: Environment) -> int:
    """Remove each named variable; return -1 when no name is given."""
    if len(args) < 2:
        return -1
    for key in args[1:]:
        env.remove(key)
    return 0


def builtin_exit(status: int) -> None:
    """Ask the shell to exit with ``status``."""
    raise ExitRequested(status)


def is_builtin(args: Sequence[str]) -> bool:
    """Return True if the command names a builtin."""
    return bool(args) and args[0] in _BUILTINS


def requires_parent(args: Sequence[str]) -> bool:
    """Return True for builtins that must run in the shell process itself."""
    return bool(args) and args[0] in _PARENT_BUILTINS


def run_builtin(
    args: Sequence[str],
    env: Environment,
    out: TextIO,
    err: TextIO,
    last_status: int = 0,
) -> int:
    """Run the builtin named by ``args[0]``; return 1 if it is not a builtin."""
    if not is_builtin(args):
        return 1
    name = args[0]
    if name == "cd":
        return builtin_cd(args, env, out, err)
    if name == "echo":
        return builtin_echo(args, out)
    if name == "env":
        return builtin_env(env, out)
    if name == "exit":
        builtin_exit(last_status)
    if name == "export":
        return builtin_export(args, env, out, err)
    if name == "pwd":
        return builtin_pwd(out, err)
    return builtin_unset(args, env)