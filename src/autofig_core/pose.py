"""Pose codec: (x, y, heading) <-> 6 base64 characters.

Each field is quantized to 12 bits across its range and the three fields are
packed big-endian, MSB first, into 36 bits. Four zero bits pad the stream to
5 bytes. Standard base64 of those bytes is 8 characters; the last two are
always ``A=`` and are dropped on the wire.

Resolution is range / 4096 per field: ~0.893 mm for x and y, ~0.088 deg for
heading. Decoding is within half a step of the clamped input, except in the
top half-step of a range, which is held at level 4095 (within one step).
"""
from __future__ import annotations

import base64
import math
import re
from typing import NamedTuple
from warnings import warn

from .errors import MalformedToken, PoseOutOfRangeWarning
from .models import Pose
from .protocol import (
    BASE64_ALPHABET,
    BITS_PER_FIELD,
    FIELD_LEVELS,
    FIELD_MASK,
    HEADING_MAX,
    HEADING_MIN,
    HEADING_RANGE,
    POSE_BITS,
    POSE_BYTES,
    POSE_PAD_BITS,
    POSE_TOKEN_LEN,
    POSE_TOKEN_TAIL,
    POSITION_MAX,
    POSITION_MIN,
    POSITION_RANGE,
)

_TOKEN_RE = re.compile("[%s]{%d}" % (re.escape(BASE64_ALPHABET), POSE_TOKEN_LEN))

METERS_PER_INCH = 0.0254
INCHES_PER_METER = 39.3701


class PoseResolution(NamedTuple):
    x_meters: float
    y_meters: float
    x_inches: float
    y_inches: float
    heading_degrees: float
    bits_per_value: int
    total_bits: int
    encoded_length: int


def _to_units(value: float, lo: float, span: float) -> int:
    # Round half-up, then keep inside the 12-bit field (value == hi maps to 4096)
    units = math.floor((value - lo) * FIELD_LEVELS / span + 0.5)
    return max(0, min(FIELD_MASK, units))


def _from_units(units: int, lo: float, span: float) -> float:
    return units * span / FIELD_LEVELS + lo


def _clamp(name: str, value: float, lo: float, hi: float) -> float:
    if math.isnan(value):
        raise ValueError(f"Pose {name} is NaN")
    if value < lo or value > hi:
        warn(
            f"Pose {name}={value} outside [{lo}, {hi}]; clamped",
            PoseOutOfRangeWarning,
            stacklevel=3,
        )
        return min(hi, max(lo, value))
    return value


def encode_pose(pose: Pose) -> str:
    """Encode a pose into a 6-character token. Out-of-range fields are clamped."""
    x = _clamp("x", float(pose.x), POSITION_MIN, POSITION_MAX)
    y = _clamp("y", float(pose.y), POSITION_MIN, POSITION_MAX)
    h = _clamp("heading", float(pose.heading), HEADING_MIN, HEADING_MAX)

    xu = _to_units(x, POSITION_MIN, POSITION_RANGE)
    yu = _to_units(y, POSITION_MIN, POSITION_RANGE)
    hu = _to_units(h, HEADING_MIN, HEADING_RANGE)

    packed = (xu << (2 * BITS_PER_FIELD)) | (yu << BITS_PER_FIELD) | hu
    raw = (packed << POSE_PAD_BITS).to_bytes(POSE_BYTES, "big")
    return base64.b64encode(raw).decode("ascii")[:POSE_TOKEN_LEN]


def decode_pose(token: str) -> Pose:
    """Decode a 6-character token back into a pose."""
    if not is_valid_pose_token(token):
        raise MalformedToken(token)

    raw = base64.b64decode(token + POSE_TOKEN_TAIL, validate=True)
    packed = int.from_bytes(raw, "big") >> POSE_PAD_BITS

    hu = packed & FIELD_MASK
    yu = (packed >> BITS_PER_FIELD) & FIELD_MASK
    xu = (packed >> (2 * BITS_PER_FIELD)) & FIELD_MASK

    return Pose(
        x=_from_units(xu, POSITION_MIN, POSITION_RANGE),
        y=_from_units(yu, POSITION_MIN, POSITION_RANGE),
        heading=_from_units(hu, HEADING_MIN, HEADING_RANGE),
    )


def is_valid_pose_token(token: object) -> bool:
    return isinstance(token, str) and _TOKEN_RE.fullmatch(token) is not None


def pose_resolution() -> PoseResolution:
    step_m = POSITION_RANGE / FIELD_LEVELS
    return PoseResolution(
        x_meters=step_m,
        y_meters=step_m,
        x_inches=meters_to_inches(step_m),
        y_inches=meters_to_inches(step_m),
        heading_degrees=HEADING_RANGE / FIELD_LEVELS,
        bits_per_value=BITS_PER_FIELD,
        total_bits=POSE_BITS,
        encoded_length=POSE_TOKEN_LEN,
    )


def round_to_resolution(value: float, lo: float, hi: float) -> float:
    """Snap a value to the nearest level the token can carry.

    Lets an editor show exactly what the robot will receive.
    """
    span = hi - lo
    units = _to_units(min(hi, max(lo, value)), lo, span)
    return round(_from_units(units, lo, span), 6)


def inches_to_meters(inches: float) -> float:
    return inches * METERS_PER_INCH


def meters_to_inches(meters: float) -> float:
    return meters * INCHES_PER_METER


def degrees_to_radians(degrees: float) -> float:
    return math.radians(degrees)


def radians_to_degrees(radians: float) -> float:
    return math.degrees(radians)
