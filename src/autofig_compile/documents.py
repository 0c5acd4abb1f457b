"""Match-data JSON documents as exported by the scouting app.

Schema 1.0.0:

    {"version": "1.0.0",
     "matches": [{"matchNumber": 5, "alliance": "red",
                  "startPosition": {"type": "S1"},
                  "actions": [{"type": "wait", "config": {"waitTime": 1000}},
                              {"type": "A3", "label": "Spike 1"}]}]}

A custom start is ``{"type": "S0", "x": m, "y": m, "theta": deg}``. Older
exports hold a single ``"match"`` object and no version.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from autofig_core.catalog import ActionCatalog
from autofig_core.models import Alliance, Discrete, MatchRecord, Pose, StartPositionRef, Wait
from autofig_core.protocol import DEFAULT_WAIT_MS, DOCUMENT_VERSION, LEGACY_VERSION, START_MARKER


class DocumentError(ValueError):
    """Match-data document is structurally invalid."""


@dataclass(frozen=True)
class MatchDocument:
    version: str
    matches: tuple[MatchRecord, ...]

    def by_number(self, match_number: int) -> MatchRecord | None:
        for m in self.matches:
            if m.match_number == match_number:
                return m
        return None

    def by_alliance(self, alliance: Alliance | str) -> list[MatchRecord]:
        if isinstance(alliance, str):
            alliance = Alliance.parse(alliance)
        return [m for m in self.matches if m.alliance is alliance]


def _start_from_dict(obj: dict | None) -> StartPositionRef:
    if not obj:
        return StartPositionRef.preset(1)
    kind = str(obj.get("type", ""))
    if not kind.startswith(START_MARKER) or not kind[1:].isdigit():
        raise DocumentError(f"Start position type {kind!r} is not S<n>")
    key = int(kind[1:])
    if key == 0:
        return StartPositionRef.custom(
            Pose(float(obj.get("x", 0.0)), float(obj.get("y", 0.0)), float(obj.get("theta", 0.0)))
        )
    return StartPositionRef.preset(key)


def _action_from_dict(obj: dict) -> Wait | Discrete:
    kind = obj.get("type")
    if kind == "wait":
        ms = (obj.get("config") or {}).get("waitTime")
        return Wait.from_millis(DEFAULT_WAIT_MS if ms is None else ms)
    # Shape of the id is checked by the encoder
    return Discrete(kind)


def _whole_number(value: object) -> int:
    if isinstance(value, bool):
        raise DocumentError(f"Match number {value!r} is not a whole number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise DocumentError(f"Match number {value!r} is not a whole number")


def match_from_dict(obj: dict) -> MatchRecord:
    try:
        return MatchRecord(
            match_number=_whole_number(obj["matchNumber"]),
            alliance=Alliance.parse(obj["alliance"]),
            start_position=_start_from_dict(obj.get("startPosition")),
            actions=tuple(_action_from_dict(a) for a in obj.get("actions") or []),
        )
    except DocumentError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise DocumentError(f"Invalid match entry: {e}") from e


def match_to_dict(match: MatchRecord, catalog: ActionCatalog | None = None) -> dict:
    start = match.start_position
    if start.is_custom:
        start_obj = {"type": f"{START_MARKER}0", "x": start.pose.x, "y": start.pose.y, "theta": start.pose.heading}
    else:
        start_obj = {"type": f"{START_MARKER}{start.key}"}

    actions: list[dict] = []
    for a in match.actions:
        if isinstance(a, Wait):
            actions.append({"type": "wait", "config": {"waitTime": a.millis}})
        else:
            entry = {"type": a.id}
            label = catalog.label_for(a.id) if catalog is not None else None
            if label:
                entry["label"] = label
            actions.append(entry)

    return {
        "matchNumber": match.match_number,
        "alliance": match.alliance.value.lower(),
        "startPosition": start_obj,
        "actions": actions,
    }


def parse_document(root: object) -> MatchDocument:
    if not isinstance(root, dict):
        raise DocumentError("Match-data root must be a JSON object")

    version = root.get("version")
    if version is not None and version != DOCUMENT_VERSION:
        raise DocumentError(f"Unsupported schema version: {version}. Expected: {DOCUMENT_VERSION}")

    if "matches" in root:
        entries = root["matches"]
        if not isinstance(entries, list):
            raise DocumentError("'matches' must be a list")
    elif "match" in root:
        entries = [root["match"]]
    else:
        raise DocumentError("Invalid JSON: missing 'matches' or 'match' field")

    # Exports from the robot side wrap each match as {"match": {...}}
    records = []
    for i, e in enumerate(entries):
        if isinstance(e, dict) and "match" in e and "matchNumber" not in e:
            e = e["match"]
        if not isinstance(e, dict):
            raise DocumentError(f"Match entry {i} is not an object")
        records.append(match_from_dict(e))

    return MatchDocument(version or LEGACY_VERSION, tuple(records))


def load_document(path: Path) -> MatchDocument:
    try:
        root = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DocumentError(f"Match-data file is not valid JSON: {e}") from e
    return parse_document(root)


def export_document(matches, catalog: ActionCatalog | None = None) -> dict:
    return {
        "version": DOCUMENT_VERSION,
        "matches": [match_to_dict(m, catalog) for m in matches],
    }
