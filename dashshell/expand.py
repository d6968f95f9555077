"""Expansion of ``$NAME``, ``$?`` and ``$$`` references in a command line."""

from __future__ import annotations

from .environment import Environment
from .splitting import is_word_char

_DIGITS = frozenset("0123456789")


def _is_digit(c: str) -> bool:
    return c in _DIGITS


def expand_value(text: str, env: Environment, last_status: int = 0) -> str | None:
    """Return the expansion of the first ``$`` reference in ``text``.

    Returns None when ``text`` holds no ``$`` at all. A run of ``n`` dollar
    signs yields ``n - 1`` of them, ``$?`` yields ``last_status`` unless the
    environment defines it, a ``$`` followed by a non-word character stays
    literal, and an unknown name yields the empty string.
    """
    start = text.find("$")
    if start < 0:
        return None
    ref = text[start:]
    if len(ref) == 1:
        return "$"
    nxt = ref[1]
    if nxt == "$":
        run = len(ref) - len(ref.lstrip("$"))
        return "$" * (run - 1)
    if nxt == "?" or _is_digit(nxt):
        name = nxt
    else:
        end = 1
        while end < len(ref) and is_word_char(ref[end]):
            end += 1
        name = ref[1:end]
    value = env.get(name)
    if value is not None:
        return value
    if nxt == "?":
        return str(last_status)
    if not is_word_char(nxt):
        return "$"
    return ""


def _reference_length(ref: str) -> int:
    """Return how many characters of ``ref`` (starting at ``$``) a reference consumes."""
    nxt = ref[1:2]
    if nxt and (nxt == "?" or _is_digit(nxt)):
        return 2
    if nxt == "$":
        run = len(ref) - len(ref.lstrip("$"))
        return run - 1
    end = 1
    while end < len(ref) and is_word_char(ref[end]):
        end += 1
    return end


def _skip(line: str, i: int, in_double: bool) -> tuple[int, bool]:
    """Advance past one character, or past a whole single-quoted section."""
    c = line[i]
    if c == '"':
        return i + 1, not in_double
    if c == "'" and not in_double:
        i += 1
        while i < len(line) and line[i] != "'":
            i += 1
        if i < len(line):
            i += 1
        return i, in_double
    return i + 1, in_double


def expand_line(line: str, env: Environment, last_status: int = 0) -> str:
    """Expand every ``$`` reference in ``line`` outside single quotes.

    Quote characters are kept; they are removed later by the parser.
    """
    parts: list[str] = []
    in_double = False
    pos = 0
    length = len(line)
    while pos < length:
        i = pos
        while i < length and line[i] != "$":
            i, in_double = _skip(line, i, in_double)
        parts.append(line[pos:i])
        pos = i
        if i < length:
            ref = line[i:]
            parts.append(expand_value(ref, env, last_status) or "")
            pos += _reference_length(ref)
    return "".join(parts)