"""Autofig - Match data to QR payload shard compiler."""
from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from pathlib import Path

import click
import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from autofig_core.protocol import SAFE_QR_CAPACITY
from autofig_core.terse import byte_length, encode_match
from autofig_compile.documents import parse_document
from autofig_verify.merkle import MANIFEST_NAME, PAYLOADS_FILE, compute_integrity_root, payload_hash, shard_files

# Fixed timestamp for deterministic gold shard
GOLD_TIMESTAMP = "2026-01-01T00:00:00Z"

PAYLOAD_SCHEMA = pa.schema(
    [
        ("match_number", pa.int64()),
        ("alliance", pa.string()),
        ("payload", pa.string()),
        ("byte_length", pa.int32()),
        ("payload_hash", pa.string()),
    ]
)

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


def compile_matches(
    matches_path: Path,
    out_path: Path,
    capacity: int = SAFE_QR_CAPACITY,
    timestamp: str | None = None,
) -> list[dict]:
    """Compile a match-data file into a payload shard. Returns the rows written."""
    print(f"Compiling match data: {matches_path}")

    if timestamp is None:
        timestamp = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")

    # 1. Read byte authority
    raw_bytes = Path(matches_path).read_bytes()
    source_hash = hashlib.sha256(raw_bytes).hexdigest()
    doc = parse_document(json.loads(raw_bytes.decode("utf-8")))

    # 2. Encode every match; a payload that cannot be scanned is fatal
    rows: list[dict] = []
    for m in doc.matches:
        payload = encode_match(m)
        size = byte_length(payload)
        if size > capacity:
            raise ValueError(
                f"Match {m.match_number} ({m.alliance.value}) payload is {size} chars, "
                f"exceeds QR capacity {capacity}"
            )
        rows.append({
            "match_number": m.match_number,
            "alliance": m.alliance.letter,
            "payload": payload,
            "byte_length": size,
            "payload_hash": payload_hash(payload),
        })

    # 3. Write payload table
    out_path = Path(out_path)
    out_path.mkdir(parents=True, exist_ok=True)

    if rows:
        df = pd.DataFrame(rows).sort_values(["match_number", "alliance"], kind="stable")
        table = pa.Table.from_pandas(df, schema=PAYLOAD_SCHEMA, preserve_index=False)
    else:
        table = PAYLOAD_SCHEMA.empty_table()
    pq.write_table(table, out_path / PAYLOADS_FILE)

    # 4. Integrity root over everything but the manifest
    files_rel = shard_files(out_path)
    integrity_root = compute_integrity_root(out_path, files_rel)

    # 5. Manifest
    manifest = {
        "format": "1.0",
        "created": timestamp,
        "source_hash": source_hash,
        "document_version": doc.version,
        "capacity": int(capacity),
        "match_count": len(rows),
        "integrity": {
            "schema": "autofig-merkle-v1",
            "algorithm": "sha256",
            "files": files_rel,
            "merkle_root": integrity_root,
        },
    }
    (out_path / MANIFEST_NAME).write_bytes(json.dumps(manifest, **CANONICAL_JSON_KW).encode("utf-8"))

    print(f"PASS: Shard generated at {out_path}")
    print(f"  Matches: {len(rows)}")
    if rows:
        print(f"  Longest payload: {max(r['byte_length'] for r in rows)} / {capacity} chars")
    return rows


@click.command()
@click.argument("matches", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(path_type=Path))
@click.option("--capacity", type=click.IntRange(min=1), default=SAFE_QR_CAPACITY, show_default=True,
              help="Maximum payload length in characters")
@click.option("--gold", is_flag=True, help="Use the fixed timestamp for a reproducible shard")
def main(matches: Path, out: Path, capacity: int, gold: bool) -> None:
    """Compile a match-data JSON file into a QR payload shard."""
    try:
        compile_matches(matches, out, capacity=capacity, timestamp=GOLD_TIMESTAMP if gold else None)
    except Exception as e:
        # Fail closed with a single-line reason; no stack traces in pipelines.
        print(f"FATAL: {e}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
