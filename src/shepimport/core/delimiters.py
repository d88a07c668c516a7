"""
Balanced delimiter scanning.

Nested-brace content (Prisma model bodies, attribute argument lists,
TypeScript type bodies) is always extracted with an explicit depth counter,
never a non-greedy regex: a body such as ``@default(fn(x: {y: 1}))`` contains
closing delimiters that a pattern match would stop at.
"""

from __future__ import annotations

from dataclasses import dataclass

PAIRS = {"{": "}", "(": ")", "[": "]", "<": ">"}


@dataclass(frozen=True)
class BalancedSpan:
    """Result of a balanced scan.

    Attributes:
        start: Index of the opening delimiter
        end: Index one past the matching closing delimiter
        body: Text strictly between the delimiters
    """

    start: int
    end: int
    body: str


def _skip_string(text: str, pos: int) -> int:
    """Return the index just past the string literal starting at `pos`."""
    quote = text[pos]
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            # Unterminated single-line string: resume after the newline
            return i + 1
        i += 1
    return len(text)


def find_matching(
    text: str,
    start: int,
    open_char: str = "{",
    close_char: str | None = None,
    *,
    quotes: str = "\"'`",
    comments: bool = True,
) -> int | None:
    """
    Find the index of the delimiter closing the one at `start`.

    Args:
        text: Source text
        start: Index of the opening delimiter
        open_char: Opening delimiter character
        close_char: Closing delimiter (defaults to the pair of `open_char`)
        quotes: Quote characters whose literals are skipped
        comments: Skip ``//`` line comments and ``/* */`` block comments

    Returns:
        Index of the matching closing delimiter, or None if unbalanced.
    """
    if close_char is None:
        close_char = PAIRS[open_char]
    if start >= len(text) or text[start] != open_char:
        return None

    depth = 0
    i = start
    length = len(text)
    while i < length:
        ch = text[i]
        if ch in quotes:
            i = _skip_string(text, i)
            continue
        if comments and ch == "/" and i + 1 < length:
            nxt = text[i + 1]
            if nxt == "/":
                newline = text.find("\n", i)
                i = length if newline == -1 else newline + 1
                continue
            if nxt == "*":
                close = text.find("*/", i + 2)
                i = length if close == -1 else close + 2
                continue
        if ch == open_char:
            depth += 1
        elif ch == close_char:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def extract_balanced(
    text: str,
    start: int,
    open_char: str = "{",
    close_char: str | None = None,
    *,
    quotes: str = "\"'`",
    comments: bool = True,
) -> BalancedSpan | None:
    """
    Extract the delimiter-enclosed text whose opening delimiter is at `start`.

    Example:
        >>> span = extract_balanced("a(b(c)d)e", 1, "(")
        >>> span.body, span.end
        ('b(c)d', 8)
    """
    close = find_matching(
        text, start, open_char, close_char, quotes=quotes, comments=comments
    )
    if close is None:
        return None
    return BalancedSpan(start=start, end=close + 1, body=text[start + 1 : close])


def extract_after(
    text: str,
    marker: str,
    open_char: str = "(",
    *,
    from_index: int = 0,
) -> BalancedSpan | None:
    """
    Locate `marker` and extract the balanced group that immediately follows it.

    Example:
        >>> extract_after('x @default(now()) y', "@default").body
        'now()'
    """
    idx = text.find(marker, from_index)
    if idx == -1:
        return None
    open_idx = idx + len(marker)
    while open_idx < len(text) and text[open_idx] in " \t":
        open_idx += 1
    return extract_balanced(text, open_idx, open_char)


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """
    Split `text` on `separator` occurrences outside any bracket or string.

    Example:
        >>> split_top_level("fields: [a, b], references: [id]")
        ['fields: [a, b]', 'references: [id]']
    """
    parts: list[str] = []
    depth = 0
    current_start = 0
    i = 0
    closers = set(PAIRS.values()) - {">"}
    openers = set(PAIRS) - {"<"}
    while i < len(text):
        ch = text[i]
        if ch in "\"'`":
            i = _skip_string(text, i)
            continue
        if ch in openers:
            depth += 1
        elif ch in closers:
            depth = max(0, depth - 1)
        elif ch == separator and depth == 0:
            parts.append(text[current_start:i].strip())
            current_start = i + 1
        i += 1
    tail = text[current_start:].strip()
    if tail:
        parts.append(tail)
    return parts
