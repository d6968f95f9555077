"""Turning an expanded command line into a list of commands with redirections."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, field

from .environment import Environment
from .expand import expand_line
from .splitting import is_quote, skip_quote, split_quoted, split_space
from .syntax import pipes_valid, quotes_balanced, redirection_kind, remove_quotes

_OPERATOR_CHARS = "<>"


class ShellSyntaxError(Exception):
    """Raised for unbalanced quotes, misplaced pipes or bad redirections.

    ``status`` is the exit status the shell should record, or None to keep
    the previous one; ``commands`` holds the commands parsed before the error.
    """

    def __init__(
        self,
        message: str = "syntax error near unexpected",
        *,
        status: int | None = None,
        commands: Sequence["Command"] = (),
    ) -> None:
        super().__init__(message)
        self.status = status
        self.commands = list(commands)


class RedirectType(enum.IntEnum):
    INPUT = 0
    OUTPUT = 1
    APPEND = 2
    HEREDOC = 3


_KIND_TO_TYPE = {
    1: RedirectType.OUTPUT,
    2: RedirectType.APPEND,
    3: RedirectType.INPUT,
    4: RedirectType.HEREDOC,
}


@dataclass
class Redirection:
    """A redirection: the file (or heredoc delimiter) and its kind."""

    target: str
    type: RedirectType
    heredoc_file: str | None = None


@dataclass
class Command:
    """One pipeline stage: its arguments and redirections in order."""

    args: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)


def _is_operator(token: str) -> bool:
    return bool(token) and token[0] in _OPERATOR_CHARS


def normalize_line(line: str) -> str:
    """Surround every run of ``<``/``>`` outside quotes with spaces."""
    parts: list[str] = []
    i = 0
    length = len(line)
    while i < length:
        c = line[i]
        if is_quote(c):
            end = skip_quote(line, i)
            parts.append(line[i:end])
            i = end
        elif c in _OPERATOR_CHARS:
            end = i
            while end < length and line[end] in _OPERATOR_CHARS:
                end += 1
            parts.append(f" {line[i:end]} ")
            i = end
        else:
            parts.append(c)
            i += 1
    return "".join(parts)


def check_redirections(tokens: Sequence[str]) -> bool:
    """Return True if every redirection operator is well formed and has a target."""
    if not tokens:
        return True
    if _is_operator(tokens[0]) and len(tokens) == 1:
        return False
    for index, token in enumerate(tokens):
        if not _is_operator(token):
            continue
        if len(token) > 1 and token[1] in _OPERATOR_CHARS:
            if token[1] != token[0] or len(token) > 2:
                return False
        elif index + 1 < len(tokens) and _is_operator(tokens[index + 1]):
            return False
    return not _is_operator(tokens[-1])


def parse_segment(segment: str) -> Command:
    """Parse one pipeline stage; raise ShellSyntaxError on a bad redirection."""
    tokens = split_space(normalize_line(segment))
    if not check_redirections(tokens):
        raise ShellSyntaxError()
    command = Command()
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if _is_operator(token) and i + 1 < len(tokens):
            kind = _KIND_TO_TYPE[redirection_kind(token)]
            command.redirections.append(Redirection(remove_quotes(tokens[i + 1]), kind))
            i += 2
        else:
            command.args.append(remove_quotes(token))
            i += 1
    return command


def parse_line(line: str, env: Environment, last_status: int = 0) -> list[Command]:
    """Check, expand and split ``line`` into pipeline stages.

    Quote and pipe errors raise ShellSyntaxError with status 2. A bad
    redirection raises it carrying the stages parsed before the bad one.
    """
    if not quotes_balanced(line) or not pipes_valid(line):
        raise ShellSyntaxError(status=2)
    expanded = expand_line(line, env, last_status)
    commands: list[Command] = []
    for segment in split_quoted(expanded, "|"):
        try:
            commands.append(parse_segment(segment))
        except ShellSyntaxError as exc:
            raise ShellSyntaxError(str(exc), commands=commands) from None
    return commands