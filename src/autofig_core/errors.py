"""Typed codec errors. Every error carries a stable code."""
from __future__ import annotations

ERRORS = {
    "E_TOKEN": "Pose token must be exactly 6 base64 characters",
    "E_MATCH_SYNTAX": "Terse match string does not follow the grammar",
    "E_ACTION_KIND": "Action cannot be expressed as a terse tag",
}


class TerseError(ValueError):
    """Base class for terse codec failures."""

    code = ""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{ERRORS[self.code]}: {detail}")


class MalformedToken(TerseError):
    code = "E_TOKEN"

    def __init__(self, token: object):
        self.token = token
        super().__init__(repr(token))


class MalformedMatchString(TerseError):
    """Grammar violation at a character offset.

    ``found`` is the offending character, or None at end of input.
    """

    code = "E_MATCH_SYNTAX"

    def __init__(self, offset: int, found: str | None, expected: str):
        self.offset = offset
        self.found = found
        self.expected = expected
        got = "end of input" if found is None else repr(found)
        super().__init__(f"expected {expected} at offset {offset}, got {got}")


class UnsupportedActionKind(TerseError):
    code = "E_ACTION_KIND"

    def __init__(self, action: object):
        self.action = action
        super().__init__(repr(action))


class PoseOutOfRangeWarning(UserWarning):
    """A pose field was clamped into range before encoding."""
