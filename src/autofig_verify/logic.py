import json
from pathlib import Path

import pyarrow.parquet as pq

from autofig_core.catalog import ActionCatalog
from autofig_core.errors import MalformedMatchString, TerseError
from autofig_core.protocol import SAFE_QR_CAPACITY
from autofig_core.terse import byte_length, decode_match, encode_match
from autofig_compile.documents import match_to_dict
from .const import ERRORS
from .merkle import MANIFEST_NAME, PAYLOADS_FILE, compute_integrity_root, looks_like_parquet, payload_hash

def _fail(code: str, **extra) -> dict:
    err = {"code": code, "message": ERRORS[code], **extra}
    return {"status": "FAIL", "error_count": 1, "errors": [err]}

def _load_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))

def verify_payload(text: str, capacity: int = SAFE_QR_CAPACITY, catalog: ActionCatalog | None = None) -> dict:
    try:
        match = decode_match(text)
    except MalformedMatchString as e:
        return _fail("E_PAYLOAD_SYNTAX", offset=e.offset, found=e.found, detail=str(e))
    except TerseError as e:
        return _fail("E_PAYLOAD_SYNTAX", detail=str(e))

    # Leading zeros parse but are never emitted; a scanner must see the canonical line
    canonical = encode_match(match)
    if canonical != text:
        return _fail("E_PAYLOAD_NONCANONICAL", payload=text, canonical=canonical)

    size = byte_length(text)
    if size > capacity:
        return _fail("E_PAYLOAD_CAPACITY", size=size, capacity=capacity)

    return {"status": "PASS", "error_count": 0, "errors": [], "match": match_to_dict(match, catalog)}

def verify_shard(shard_dir: Path) -> dict:
    manifest_path = shard_dir / MANIFEST_NAME
    payloads_path = shard_dir / PAYLOADS_FILE

    for p in [manifest_path, payloads_path]:
        if not p.exists():
            return _fail("E_LAYOUT_MISSING", path=str(p))

    try:
        manifest_obj = _load_json(manifest_path)
        integrity = manifest_obj["integrity"]
        capacity = int(manifest_obj.get("capacity", SAFE_QR_CAPACITY))
        expected_root = integrity.get("merkle_root", "")
        rel_files = integrity.get("files", [])
    except Exception as e:
        return _fail("E_MANIFEST_JSON", detail=str(e))

    try:
        computed = compute_integrity_root(shard_dir, rel_files)
    except Exception as e:
        return _fail("E_INTEGRITY_MISMATCH", detail=str(e))
    if PAYLOADS_FILE not in rel_files or expected_root != computed:
        return _fail("E_INTEGRITY_MISMATCH", expected=expected_root, computed=computed)

    for rel in rel_files:
        if rel.endswith(".parquet") and not looks_like_parquet(shard_dir / rel):
            return _fail("E_PARQUET_MAGIC", path=str(shard_dir / rel))

    rows = pq.read_table(payloads_path).to_pylist()
    if len(rows) != manifest_obj.get("match_count", len(rows)):
        return _fail("E_ROW_MISMATCH", detail=f"manifest lists {manifest_obj['match_count']} matches, table has {len(rows)}")

    for i, row in enumerate(rows):
        if not isinstance(row["payload"], str):
            return _fail("E_ROW_MISMATCH", row=i, detail="payload is null")
        result = verify_payload(row["payload"], capacity)
        if result["status"] != "PASS":
            result["errors"][0]["row"] = i
            return result
        m = result["match"]
        if (
            m["matchNumber"] != row["match_number"]
            or m["alliance"][0].upper() != row["alliance"]
            or byte_length(row["payload"]) != row["byte_length"]
            or payload_hash(row["payload"]) != row["payload_hash"]
        ):
            return _fail("E_ROW_MISMATCH", row=i, payload=row["payload"])

    return {"status": "PASS", "error_count": 0, "errors": [], "match_count": len(rows)}
