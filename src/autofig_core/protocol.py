"""Autofig terse protocol constants.

Single source of truth for the terse line alphabet and the pose bit layout.
Keep this file stable. The scouting app and the robot decoder must remain
synchronized.
"""

# Pose field ranges: x, y in metres (+/-72 in), heading in degrees
POSITION_MIN = -1.8288
POSITION_MAX = 1.8288
POSITION_RANGE = POSITION_MAX - POSITION_MIN  # 3.6576 m

HEADING_MIN = -180.0
HEADING_MAX = 180.0
HEADING_RANGE = HEADING_MAX - HEADING_MIN  # 360 deg

# Pose token: [X(12) | Y(12) | H(12) | pad(4)] = 5 bytes -> 6 base64 chars
BITS_PER_FIELD = 12
FIELD_LEVELS = 1 << BITS_PER_FIELD  # 4096
FIELD_MASK = FIELD_LEVELS - 1
POSE_BITS = 3 * BITS_PER_FIELD
POSE_BYTES = 5
POSE_PAD_BITS = POSE_BYTES * 8 - POSE_BITS
POSE_TOKEN_LEN = 6
# Dropped tail of the 8-char base64 form; constant because the pad nibble is zero
POSE_TOKEN_TAIL = "A="
BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"

# Terse line markers
START_MARKER = "S"
CUSTOM_START_KEY = 0
WAIT_TAG = "W"
ACTION_TAG = "A"
ACTION_TAGS = (WAIT_TAG, ACTION_TAG)
ALLIANCE_LETTERS = ("R", "B")

# Default safety bounds
SAFE_QR_CAPACITY = 100  # characters, smallest practical QR class (v4)
MS_PER_SECOND = 1000
DEFAULT_WAIT_MS = 1000

# Match-data JSON documents
DOCUMENT_VERSION = "1.0.0"
LEGACY_VERSION = "legacy"
