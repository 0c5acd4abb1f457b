"""Query a payload shard - list the QR payloads for one alliance."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 3:
        print("Usage: python query.py <shard_path> <R|B> [min_length]")
        print("Example: python query.py shard/ R 60")
        sys.exit(1)

    shard = Path(sys.argv[1])
    alliance = sys.argv[2].upper()[:1]
    min_length = int(sys.argv[3]) if len(sys.argv) > 3 else 0

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW payloads AS SELECT * FROM '{shard}/payloads.parquet'")
    capacity = con.execute(
        f"SELECT capacity FROM read_json_auto('{shard}/manifest.json')"
    ).fetchone()[0]

    sql = """
    SELECT match_number, payload, byte_length
    FROM payloads
    WHERE alliance = ? AND byte_length >= ?
    ORDER BY match_number
    """

    print(f"--- Payloads: alliance {alliance} ---")
    print(f"--- Capacity {capacity} chars ---\n")

    df = con.execute(sql, [alliance, min_length]).fetchdf()
    if df.empty:
        print("No payloads found.")
    else:
        for _, row in df.iterrows():
            headroom = capacity - row["byte_length"]
            print(f"MATCH {row['match_number']}: {row['payload']}")
            print(f"  Length: {row['byte_length']} ({headroom} chars headroom)")
            print()


if __name__ == "__main__":
    main()
