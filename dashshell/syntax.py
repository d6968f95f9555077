"""Syntax checks on raw command lines: quotes, pipes and redirection tokens."""

from __future__ import annotations

from .splitting import is_quote


def redirection_kind(token: str) -> int:
    """Classify the first redirection operator found outside quotes in ``token``.

    Returns 0 for none, 1 for ``>``, 2 for ``>>``, 3 for ``<`` and 4 for ``<<``.
    """
    i = 0
    length = len(token)
    while i < length:
        c = token[i]
        if is_quote(c):
            i += 1
            while i < length and token[i] != c:
                i += 1
            i += 1
            if i >= length:
                break
            c = token[i]
        nxt = token[i + 1] if i + 1 < length else ""
        if c == ">":
            return 2 if nxt == ">" else 1
        if c == "<":
            return 4 if nxt == "<" else 3
        i += 1
    return 0


def quotes_balanced(line: str) -> bool:
    """Return True if every quote opened in ``line`` is closed."""
    i = 0
    length = len(line)
    while i < length:
        if is_quote(line[i]):
            quote = line[i]
            i += 1
            while i < length and line[i] != quote:
                i += 1
            if i >= length:
                return False
        i += 1
    return True


def _scan_pipes(line: str, i: int) -> bool:
    length = len(line)
    while i < length:
        c = line[i]
        if is_quote(c):
            i += 1
            while i < length and line[i] != c:
                i += 1
            if i < length:
                i += 1
        elif c == "|":
            i += 1
            if i < length and line[i] == "|":
                return False
            while i < length and line[i] == " ":
                i += 1
                if i < length and line[i] == "|":
                    return False
        else:
            i += 1
    return True


def pipes_valid(line: str) -> bool:
    """Return False if ``line`` starts or ends with a pipe or has empty pipe stages."""
    stripped = line.lstrip(" ")
    if stripped.startswith("|"):
        return False
    if not _scan_pipes(line, len(line) - len(stripped)):
        return False
    return not line.rstrip(" ").endswith("|")


def remove_quotes(line: str) -> str:
    """Drop quote characters, keeping what they enclose."""
    out: list[str] = []
    i = 0
    length = len(line)
    while i < length:
        c = line[i]
        if is_quote(c):
            i += 1
            start = i
            while i < length and line[i] != c:
                i += 1
            out.append(line[start:i])
            if i < length:
                i += 1
        else:
            out.append(c)
            i += 1
    return "".join(out)