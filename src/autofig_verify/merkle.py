from pathlib import Path
import hashlib

MANIFEST_NAME = "manifest.json"
PAYLOADS_FILE = "payloads.parquet"

def leaf_hash(rel_path: str, content: bytes) -> bytes:
    h = hashlib.sha256()
    h.update(rel_path.encode("utf-8"))
    h.update(b"\x00")
    h.update(content)
    return h.digest()

def shard_files(root_dir: Path) -> list[str]:
    """Relative posix paths of every covered file in a shard, sorted."""
    return sorted(
        f.relative_to(root_dir).as_posix()
        for f in root_dir.rglob("*")
        if f.is_file() and f.name != MANIFEST_NAME
    )

def compute_integrity_root(root_dir: Path, rel_files: list[str]) -> str:
    acc = hashlib.sha256()
    for rel in sorted(rel_files):
        p = root_dir / rel
        acc.update(leaf_hash(rel, p.read_bytes()))
    return acc.hexdigest()

def payload_hash(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()

def looks_like_parquet(p: Path) -> bool:
    b = p.read_bytes()
    return len(b) >= 8 and b[:4] == b"PAR1" and b[-4:] == b"PAR1"
