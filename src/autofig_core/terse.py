"""Terse match line codec.

Format: {n}[R|B]S{start}[W{sec}|A{n}]*

    5RS1W1A1A3       match 5, Red, preset start 1, wait 1s, A1, A3
    5RS0qqa8AAW1A1   match 5, Red, custom start pose qqa8AA, wait 1s, A1

The line has no delimiters. It parses unambiguously because every field
either has a fixed width or is a digit run ended by a non-digit tag letter.
"""
from __future__ import annotations

import re
from typing import NamedTuple

from .errors import MalformedMatchString, MalformedToken, UnsupportedActionKind
from .models import Alliance, Discrete, MatchRecord, StartPositionRef, Wait, is_whole
from .pose import decode_pose, encode_pose
from .protocol import (
    ACTION_TAG,
    ACTION_TAGS,
    ALLIANCE_LETTERS,
    CUSTOM_START_KEY,
    POSE_TOKEN_LEN,
    SAFE_QR_CAPACITY,
    START_MARKER,
    WAIT_TAG,
)

_DISCRETE_RE = re.compile(r"%s[0-9]+" % re.escape(ACTION_TAG))
# int()/str() refuse more than 4300 digits at once (sys.int_info.default_max_str_digits)
_CHUNK = 4000
_ALLIANCE_BY_LETTER = {a.letter: a for a in Alliance}


class TerseInfo(NamedTuple):
    terse: str
    size: int
    fits_qr: bool


def check_tag_alphabet() -> None:
    """Fail if the markers could be confused with each other or with digits."""
    markers = list(ACTION_TAGS) + list(ALLIANCE_LETTERS) + [START_MARKER]
    for m in markers:
        if len(m) != 1 or m.isdigit():
            raise ValueError(f"Terse marker {m!r} must be one non-digit character")
    if len(set(markers)) != len(markers):
        raise ValueError(f"Terse markers are not disjoint: {markers}")
    if set(ALLIANCE_LETTERS) != set(_ALLIANCE_BY_LETTER):
        raise ValueError("Alliance letters out of sync with Alliance enum")


check_tag_alphabet()


def _format_decimal(n: int) -> str:
    """Decimal digits of a non-negative int of any size."""
    base = 10 ** _CHUNK
    if n < base:
        return str(n)
    high, low = divmod(n, base)
    return _format_decimal(high) + str(low).zfill(_CHUNK)


def _parse_decimal(digits: str) -> int:
    value = 0
    for i in range(0, len(digits), _CHUNK):
        chunk = digits[i:i + _CHUNK]
        value = value * 10 ** len(chunk) + int(chunk)
    return value


def _encode_start(start: StartPositionRef) -> str:
    if start.is_custom:
        return f"{START_MARKER}{CUSTOM_START_KEY}{encode_pose(start.pose)}"
    return START_MARKER + _format_decimal(start.key)


def _action_tag(action: object) -> str:
    if isinstance(action, Wait) and is_whole(action.seconds):
        return WAIT_TAG + _format_decimal(action.seconds)
    if isinstance(action, Discrete) and isinstance(action.id, str):
        if _DISCRETE_RE.fullmatch(action.id):
            return action.tag
    raise UnsupportedActionKind(action)


def encode_match(match: MatchRecord) -> str:
    """Serialize a match record to its terse line."""
    parts = [
        _format_decimal(match.match_number),
        match.alliance.letter,
        _encode_start(match.start_position),
    ]
    parts.extend(_action_tag(a) for a in match.actions)
    return "".join(parts)


class _Cursor:
    """Left-to-right scanner over a terse line."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def peek(self) -> str | None:
        return self.text[self.pos] if self.pos < len(self.text) else None

    def fail(self, expected: str) -> MalformedMatchString:
        return MalformedMatchString(self.pos, self.peek(), expected)

    def expect(self, ch: str) -> None:
        if self.peek() != ch:
            raise self.fail(repr(ch))
        self.pos += 1

    def digit_run(self, what: str) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] in "0123456789":
            self.pos += 1
        if self.pos == start:
            raise self.fail(what)
        return self.text[start:self.pos]

    def digits(self, what: str) -> int:
        return _parse_decimal(self.digit_run(what))

    def take(self, n: int, what: str) -> str:
        if self.pos + n > len(self.text):
            self.pos = len(self.text)
            raise self.fail(what)
        chunk = self.text[self.pos:self.pos + n]
        self.pos += n
        return chunk


def _decode_start(cur: _Cursor) -> StartPositionRef:
    cur.expect(START_MARKER)
    if cur.peek() == str(CUSTOM_START_KEY):
        cur.pos += 1
        token_at = cur.pos
        token = cur.take(POSE_TOKEN_LEN, f"{POSE_TOKEN_LEN}-character pose token")
        try:
            pose = decode_pose(token)
        except MalformedToken as e:
            raise MalformedMatchString(token_at, token, "base64 pose token") from e
        return StartPositionRef.custom(pose)
    return StartPositionRef.preset(cur.digits("start position key"))


def decode_match(text: str) -> MatchRecord:
    """Parse a terse line. Raises MalformedMatchString on the first bad character."""
    if not isinstance(text, str):
        raise TypeError(f"Terse line must be str, got {type(text).__name__}")

    cur = _Cursor(text)

    number = cur.digits("match number")
    if number < 1:
        raise MalformedMatchString(0, text[0], "positive match number")

    letter = cur.peek()
    if letter not in _ALLIANCE_BY_LETTER:
        raise cur.fail("alliance letter R or B")
    cur.pos += 1
    alliance = _ALLIANCE_BY_LETTER[letter]

    start = _decode_start(cur)

    actions: list[Wait | Discrete] = []
    while cur.peek() is not None:
        tag = cur.peek()
        if tag == WAIT_TAG:
            cur.pos += 1
            actions.append(Wait(cur.digits("wait seconds")))
        elif tag == ACTION_TAG:
            cur.pos += 1
            # Digits kept verbatim: the id is an opaque label
            actions.append(Discrete(ACTION_TAG + cur.digit_run("action ordinal")))
        else:
            raise cur.fail("action tag W or A")

    return MatchRecord(number, alliance, start, tuple(actions))


def byte_length(encoded: str) -> int:
    return len(encoded.encode("utf-8"))


def fits_capacity(encoded: str, limit: int = SAFE_QR_CAPACITY) -> bool:
    return byte_length(encoded) <= limit


def terse_info(match: MatchRecord, limit: int = SAFE_QR_CAPACITY) -> TerseInfo:
    terse = encode_match(match)
    size = byte_length(terse)
    return TerseInfo(terse, size, size <= limit)
