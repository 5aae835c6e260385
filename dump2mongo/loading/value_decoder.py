# ==============================================
# Value Decoder
# ==============================================
#
# PURPOSE:
#   Turn the VALUES section of an INSERT statement into rows of
#   Python values.
#
# HOW IT WORKS:
#   1. scan_tuples() walks the section once, tracking quotes and
#      parenthesis depth, so commas / parentheses inside string
#      literals and function calls don't break a tuple.
#   2. If a tuple is malformed (e.g. an unterminated quote), the
#      tuples scanned before it are kept. Only the broken tuple goes
#      through the naive splitter (the "(...)" group up to the first
#      ")", split on commas not preceded by a backslash), then
#      scanning resumes right after it. That way a single broken
#      tuple only costs that tuple.
#   3. decode_token() converts each raw token:
#        NULL          -> None
#        'text'        -> str ('' and backslash escapes resolved)
#        0xCAFE, X'CAFE', _binary '..'  -> bytes
#        b'101'        -> int
#        42 / 4.2e1    -> int / float
#        anything else -> the raw token as str
#
# ==============================================

import re
from dataclasses import dataclass
from typing import Any, Iterator, Optional


class TupleDecodeError(ValueError):
    """One value tuple cannot be decoded."""


class MalformedValues(ValueError):
    """The VALUES section is not well formed from `offset` on."""

    def __init__(self, message, rows=None, offset=0):
        super().__init__(message)
        self.rows = rows or []
        self.offset = offset


NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
# character set introducers, e.g. _binary '...' or _utf8mb4'...'
INTRODUCER_PATTERN = re.compile(r"^(_[a-z0-9]+)\s*(?=')", re.IGNORECASE)
NAIVE_TUPLE_PATTERN = re.compile(r"\([^)]*\)")
NAIVE_VALUE_SEPARATOR = re.compile(r"(?<!\\),")

# MySQL string escapes; any other escaped character stands for itself
ESCAPES = {
    "0": "\0",
    "b": "\b",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "Z": "\x1a",
}


@dataclass
class DecodedRow:
    values: Optional[list[Any]]
    error: Optional[str]
    source: str

    @property
    def ok(self) -> bool:
        return self.error is None


def _unquote(token: str) -> str:
    if len(token) < 2 or not token.endswith("'"):
        raise TupleDecodeError(f"unterminated string literal: {token[:40]}")

    body = token[1:-1]
    out = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\":
            if i + 1 >= len(body):
                raise TupleDecodeError(f"unterminated string literal: {token[:40]}")
            escaped = body[i + 1]
            out.append(ESCAPES.get(escaped, escaped))
            i += 2
            continue
        if char == "'":
            if i + 1 < len(body) and body[i + 1] == "'":
                out.append("'")
                i += 2
                continue
            raise TupleDecodeError(f"unescaped quote inside string literal: {token[:40]}")
        out.append(char)
        i += 1
    return "".join(out)


def decode_token(token: str) -> Any:
    """Decode one raw literal from a value tuple."""
    value = token.strip()
    if not value:
        raise TupleDecodeError("empty value")

    if value.lower() == "null":
        return None

    if value.startswith("'"):
        return _unquote(value)

    introduced = INTRODUCER_PATTERN.match(value)
    if introduced:
        text = _unquote(value[introduced.end():].lstrip())
        return text.encode("utf-8") if introduced.group(1).lower() == "_binary" else text

    if value[:2].lower() == "x'":
        try:
            return bytes.fromhex(_unquote(value[1:]))
        except ValueError:
            raise TupleDecodeError(f"invalid hex literal: {value[:40]}") from None

    if value[:2].lower() == "b'" and value.endswith("'"):
        try:
            return int(value[2:-1] or "0", 2)
        except ValueError:
            raise TupleDecodeError(f"invalid bit literal: {value[:40]}") from None

    if value[:2].lower() == "0x":
        try:
            return bytes.fromhex(value[2:])
        except ValueError:
            raise TupleDecodeError(f"invalid hex literal: {value[:40]}") from None

    if NUMBER_PATTERN.match(value):
        return int(value) if INTEGER_PATTERN.match(value) else float(value)

    return value


def _skip_space(text: str, i: int) -> int:
    while i < len(text) and text[i].isspace():
        i += 1
    return i


def scan_tuples(section: str) -> list[list[str]]:
    """
    Split a VALUES section into tuples of raw (undecoded) tokens.

    Raises:
        MalformedValues: on an unterminated quote or tuple, on text
            directly after a closing quote, or when no tuple is found.
            The exception carries the tuples completed so far and the
            offset of the tuple that failed.
    """
    rows: list[list[str]] = []
    n = len(section)
    i = _skip_space(section, 0)

    while i < n:
        if section[i] != "(":
            if rows:
                break  # trailing clause such as ON DUPLICATE KEY UPDATE
            raise MalformedValues(f"expected '(' at offset {i}", rows, i)

        tuple_start = i
        i += 1
        depth = 1
        start = i
        tokens: list[str] = []
        in_quote = False
        while True:
            if i >= n:
                reason = "unterminated string literal" if in_quote else "unterminated value tuple"
                raise MalformedValues(reason, rows, tuple_start)
            char = section[i]

            if in_quote:
                if char == "\\":
                    i += 2
                    continue
                if char == "'":
                    if i + 1 < n and section[i + 1] == "'":
                        i += 2
                        continue
                    in_quote = False
                    i = _skip_space(section, i + 1)
                    if i < n and section[i] not in ",)":
                        raise MalformedValues(
                            f"unexpected text after string literal at offset {i}", rows, tuple_start
                        )
                    continue
                i += 1
                continue

            if char == "'":
                in_quote = True
            elif char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0:
                    tokens.append(section[start:i].strip())
                    i += 1
                    break
            elif char == "," and depth == 1:
                tokens.append(section[start:i].strip())
                start = i + 1
            i += 1

        rows.append([] if tokens == [""] else tokens)

        i = _skip_space(section, i)
        if i < n and section[i] == ",":
            i = _skip_space(section, i + 1)

    if not rows:
        raise MalformedValues("no value tuples found", rows, n)
    return rows


def naive_tuple_at(section: str, offset: int) -> Optional[str]:
    """The "(...)" group starting at offset, cut at the first ")"."""
    match = NAIVE_TUPLE_PATTERN.match(section, offset)
    return match.group(0) if match else None


def split_values_naive(group: str) -> list[str]:
    inner = group[1:-1]
    if not inner.strip():
        return []
    return [value.strip() for value in NAIVE_VALUE_SEPARATOR.split(inner)]


def _groups(section: str) -> list[tuple[str, Optional[list[str]], Optional[str]]]:
    # (source, tokens, error); only the broken tuple goes through the
    # naive splitter, scanning resumes right after it
    groups = []
    offset = 0
    while True:
        rest = section[offset:]
        try:
            rows = scan_tuples(rest)
        except MalformedValues as e:
            groups.extend((", ".join(tokens), tokens, None) for tokens in e.rows)
            start = offset + e.offset
            if not section[start:].strip():
                break
            broken = naive_tuple_at(section, start)
            if broken is None:
                groups.append((section[start:].strip()[:60], None, str(e)))
                break
            groups.append((broken, split_values_naive(broken), None))
            offset = _skip_space(section, start + len(broken))
            if section[offset:offset + 1] == ",":
                offset = _skip_space(section, offset + 1)
            if offset >= len(section) or section[offset] != "(":
                break
            continue
        groups.extend((", ".join(tokens), tokens, None) for tokens in rows)
        break
    return groups


def iter_rows(section: str) -> Iterator[DecodedRow]:
    """
    Yield one DecodedRow per value tuple; a row carries either its values
    or the reason it could not be decoded.
    """
    for source, tokens, error in _groups(section):
        if error is not None:
            yield DecodedRow(None, error, source)
            continue
        try:
            yield DecodedRow([decode_token(token) for token in tokens], None, source)
        except TupleDecodeError as e:
            yield DecodedRow(None, str(e), source)
