import sys
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_char.py <shard_dir>")
        raise SystemExit(2)

    p = Path(sys.argv[1]) / "payloads.parquet"
    table = pq.read_table(p)
    payloads = table.column("payload").to_pylist()
    if not payloads or len(payloads[0]) < 5:
        print("No payload long enough to corrupt safely.")
        raise SystemExit(2)

    # Offset 4 is past the shortest possible header (nRS1), so the
    # replacement lands in the start key or the action list.
    idx = 4
    s = payloads[0]
    payloads[0] = s[:idx] + "*" + s[idx + 1:]
    table = table.set_column(table.schema.get_field_index("payload"), "payload", pa.array(payloads, pa.string()))
    pq.write_table(table, p)
    print(f"Corrupted 1 char at offset {idx} of the first payload in {p}")

if __name__ == "__main__":
    main()
