"""Collaborator interfaces: action labels and QR rendering.

The codec only moves opaque ``A<n>`` ids. Display labels come from an
externally managed action catalog, injected wherever labels are shown.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Protocol
from warnings import warn

from .models import Action, Discrete, Wait
from .protocol import ACTION_TAG

_ID_RE = re.compile(r"%s[0-9]+" % re.escape(ACTION_TAG))

# Stock FTC catalog, grouped the way the scouting app shows it.
DEFAULT_ACTION_GROUPS = {
    "launch": {
        "label": "Launch",
        "actions": [
            {"id": "A1", "label": "Near Launch"},
            {"id": "A2", "label": "Far Launch"},
        ],
    },
    "pickup": {
        "label": "Pickup",
        "actions": [
            {"id": "A3", "label": "Spike 1"},
            {"id": "A4", "label": "Spike 2"},
            {"id": "A5", "label": "Spike 3"},
            {"id": "A9", "label": "Corner"},
        ],
    },
    "parking": {
        "label": "Parking",
        "actions": [
            {"id": "A6", "label": "Near Park"},
            {"id": "A7", "label": "Far Park"},
        ],
    },
    "other": {
        "label": "Other",
        "actions": [
            {"id": "A8", "label": "Dump"},
            {"id": "A10", "label": "Drive To"},
            {"id": "wait", "label": "Wait", "config": {"waitTime": 0}},
        ],
    },
}


class ActionCatalog(Protocol):
    def label_for(self, action_id: str) -> str | None: ...


class QRRenderer(Protocol):
    """Renders a payload; must fail if it exceeds ``capacity`` characters."""

    def render(self, payload: str, capacity: int) -> object: ...


class MappingActionCatalog:
    """Read-only catalog backed by an id -> label mapping."""

    def __init__(self, labels: Mapping[str, str]):
        self._labels = MappingProxyType(dict(labels))

    def label_for(self, action_id: str) -> str | None:
        return self._labels.get(action_id)

    def __len__(self) -> int:
        return len(self._labels)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._labels

    @classmethod
    def from_action_groups(cls, groups: Mapping[str, dict]) -> "MappingActionCatalog":
        """Flatten an action-group document into a catalog.

        Entries whose id is not an ``A<n>`` tag (the ``wait`` pseudo action,
        leftovers from older exports) are skipped with a warning.
        """
        labels: dict[str, str] = {}
        for key, group in groups.items():
            for entry in group.get("actions", []):
                aid = entry.get("id")
                if aid == "wait":
                    continue
                if not isinstance(aid, str) or not _ID_RE.fullmatch(aid):
                    warn(f"Skipping catalog entry {aid!r} in group {key!r}: not an {ACTION_TAG}<n> id")
                    continue
                labels[aid] = entry.get("label") or aid
        return cls(labels)


def default_catalog() -> MappingActionCatalog:
    return MappingActionCatalog.from_action_groups(DEFAULT_ACTION_GROUPS)


def describe_action(action: Action, catalog: ActionCatalog | None = None) -> str:
    if isinstance(action, Wait):
        return f"Wait {action.seconds}s"
    if isinstance(action, Discrete):
        label = catalog.label_for(action.id) if catalog is not None else None
        return label or action.id
    raise TypeError(f"Not an action: {action!r}")
