"""Match configuration value types."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from .protocol import ACTION_TAG, CUSTOM_START_KEY, MS_PER_SECOND, WAIT_TAG


def is_whole(value: object) -> bool:
    """True for ints, excluding bool."""
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Pose:
    """Field pose: x, y in metres, heading in degrees."""

    x: float
    y: float
    heading: float


class Alliance(Enum):
    RED = "Red"
    BLUE = "Blue"

    @property
    def letter(self) -> str:
        return self.value[0].upper()

    @classmethod
    def parse(cls, text: str) -> "Alliance":
        """Accept 'red', 'Blue', 'R', 'b' and friends."""
        t = text.strip().lower()
        for a in cls:
            if t in (a.value.lower(), a.letter.lower()):
                return a
        raise ValueError(f"Unknown alliance {text!r}")


@dataclass(frozen=True)
class StartPositionRef:
    """Preset start position (key >= 1) or custom pose (key 0)."""

    key: int
    pose: Pose | None = None

    def __post_init__(self) -> None:
        if not is_whole(self.key):
            raise TypeError(f"Start key must be an int, got {self.key!r}")
        if self.key == CUSTOM_START_KEY:
            if self.pose is None:
                raise ValueError("Custom start position requires a pose")
        elif self.key < 1:
            raise ValueError(f"Preset start key must be >= 1, got {self.key}")
        elif self.pose is not None:
            raise ValueError("Only the custom start position (key 0) carries a pose")

    @classmethod
    def preset(cls, key: int) -> "StartPositionRef":
        return cls(key)

    @classmethod
    def custom(cls, pose: Pose) -> "StartPositionRef":
        return cls(CUSTOM_START_KEY, pose)

    @property
    def is_custom(self) -> bool:
        return self.key == CUSTOM_START_KEY


@dataclass(frozen=True)
class Wait:
    seconds: int

    def __post_init__(self) -> None:
        if self.seconds < 0:
            raise ValueError(f"Wait duration must be >= 0, got {self.seconds}")

    @classmethod
    def from_millis(cls, ms: float) -> "Wait":
        """Round a UI millisecond value to whole seconds, half-up."""
        if ms < 0:
            raise ValueError(f"Wait duration must be >= 0, got {ms} ms")
        return cls(int(math.floor(ms / MS_PER_SECOND + 0.5)))

    @property
    def millis(self) -> int:
        return self.seconds * MS_PER_SECOND

    @property
    def tag(self) -> str:
        return f"{WAIT_TAG}{self.seconds}"


@dataclass(frozen=True)
class Discrete:
    """Opaque catalog action; ``id`` is an ``A<digits>`` label."""

    id: str

    @property
    def tag(self) -> str:
        return self.id

    @classmethod
    def from_ordinal(cls, n: int) -> "Discrete":
        return cls(f"{ACTION_TAG}{n}")


Action = Union[Wait, Discrete]


@dataclass(frozen=True)
class MatchRecord:
    match_number: int
    alliance: Alliance
    start_position: StartPositionRef
    actions: tuple[Action, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not is_whole(self.match_number):
            raise TypeError(f"Match number must be an int, got {self.match_number!r}")
        if self.match_number < 1:
            raise ValueError(f"Match number must be positive, got {self.match_number}")
        # Lists are accepted for convenience; stored as a tuple to stay hashable.
        if not isinstance(self.actions, tuple):
            object.__setattr__(self, "actions", tuple(self.actions))
