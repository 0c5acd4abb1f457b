"""Autofig Core - terse match and pose codecs."""
from .errors import (
    MalformedMatchString,
    MalformedToken,
    PoseOutOfRangeWarning,
    TerseError,
    UnsupportedActionKind,
)
from .models import Alliance, Discrete, MatchRecord, Pose, StartPositionRef, Wait
from .pose import decode_pose, encode_pose, is_valid_pose_token, pose_resolution
from .terse import byte_length, decode_match, encode_match, fits_capacity, terse_info

__all__ = [
    "Alliance", "Discrete", "MatchRecord", "Pose", "StartPositionRef", "Wait",
    "encode_pose", "decode_pose", "is_valid_pose_token", "pose_resolution",
    "encode_match", "decode_match", "byte_length", "fits_capacity", "terse_info",
    "TerseError", "MalformedToken", "MalformedMatchString", "UnsupportedActionKind",
    "PoseOutOfRangeWarning",
]
