"""Quote-aware string splitting helpers used by the lexer and the builtins."""

from __future__ import annotations

_QUOTES = ("'", '"')
_SPACE_CHARS = frozenset(" \t\n\v\f\r")
_BLANKS = frozenset(" \t")


def is_quote(c: str) -> bool:
    """Return True if ``c`` is a single or double quote character."""
    return c in _QUOTES


def skip_quote(s: str, i: int) -> int:
    """Return the index just past the quoted section that starts at ``s[i]``.

    An unterminated quote runs to the end of the string.
    """
    quote = s[i]
    i += 1
    while i < len(s) and s[i] != quote:
        i += 1
    if i < len(s):
        i += 1
    return i


def is_word_char(c: str) -> bool:
    """Return True for ASCII letters, digits and the underscore."""
    return len(c) == 1 and (c.isascii() and c.isalnum() or c == "_")


def _split_words(s: str, is_separator) -> list[str]:
    words: list[str] = []
    i = 0
    length = len(s)
    while i < length:
        while i < length and is_separator(s[i]):
            i += 1
        if i >= length:
            break
        start = i
        while i < length and not is_separator(s[i]):
            if is_quote(s[i]):
                i = skip_quote(s, i)
            else:
                i += 1
        words.append(s[start:i])
    return words


def split_quoted(s: str, sep: str) -> list[str]:
    """Split ``s`` on ``sep``, ignoring separators inside quotes.

    Quotes are kept in the resulting words and empty words are dropped.
    """
    return _split_words(s, lambda c: c == sep)


def split_space(s: str) -> list[str]:
    """Split ``s`` on ASCII whitespace, ignoring whitespace inside quotes."""
    return _split_words(s, lambda c: c in _SPACE_CHARS)


def split_delimiter(s: str, delimiter: str) -> list[str]:
    """Split ``s`` on every occurrence of a multi-character ``delimiter``.

    Empty pieces are dropped. An empty delimiter raises ValueError.
    """
    if not delimiter:
        raise ValueError("empty delimiter")
    return [piece for piece in s.split(delimiter) if piece]


def is_all_whitespace(s: str) -> bool:
    """Return True if ``s`` holds only spaces and tabs (or nothing)."""
    return all(c in _BLANKS for c in s)