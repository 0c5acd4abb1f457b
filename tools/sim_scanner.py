import json
import random
from pathlib import Path

from autofig_core.catalog import default_catalog, describe_action
from autofig_core.errors import TerseError
from autofig_core.models import Alliance, Discrete, MatchRecord, Pose, StartPositionRef, Wait
from autofig_core.terse import decode_match, encode_match, terse_info
from autofig_compile.documents import export_document, load_document

def random_match(number: int, custom: bool) -> MatchRecord:
    if custom:
        start = StartPositionRef.custom(Pose(
            round(random.uniform(-1.8, 1.8), 3),
            round(random.uniform(-1.8, 1.8), 3),
            round(random.uniform(-180, 180), 1),
        ))
    else:
        start = StartPositionRef.preset(random.randint(1, 2))

    actions = []
    for _ in range(random.randint(2, 10)):
        if random.random() < 0.25:
            actions.append(Wait.from_millis(random.choice([0, 500, 1000, 1500, 3000])))
        else:
            actions.append(Discrete.from_ordinal(random.randint(1, 10)))

    return MatchRecord(number, random.choice(list(Alliance)), start, tuple(actions))

def generate_match_data(output_dir: str, matches: int, custom: bool = False) -> Path:
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)

    records = [random_match(n, custom and n % 2 == 1) for n in range(1, matches + 1)]
    doc = export_document(records, default_catalog())

    path = out / "matches.json"
    path.write_text(json.dumps(doc, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    print(f"GENERATED: {path}")
    return path

def corrupt_payload(payload: str) -> str:
    # "*" is outside every field alphabet, so the scan must fail
    idx = random.randrange(payload.index("S") + 1, len(payload))
    return payload[:idx] + "*" + payload[idx + 1:]

def scan(path: Path, corrupt: bool = False) -> int:
    """Replay every match through encode -> QR -> decode. Returns the failure count."""
    catalog = default_catalog()
    failures = 0

    for i, match in enumerate(load_document(path).matches):
        info = terse_info(match)
        payload = corrupt_payload(info.terse) if corrupt and i == 0 else info.terse

        qr = "OK" if info.fits_qr else "TOO LONG"
        print(f"MATCH {match.match_number} [{info.size} chars, QR {qr}] {payload}")
        try:
            scanned = decode_match(payload)
        except TerseError as e:
            print(f"  SCAN FAILED: {e}")
            failures += 1
            continue

        if encode_match(scanned) != info.terse:
            print("  SCAN MISMATCH")
            failures += 1
            continue

        start = scanned.start_position
        if start.is_custom:
            p = start.pose
            print(f"  Start: custom ({p.x:.3f} m, {p.y:.3f} m, {p.heading:.1f} deg)")
        else:
            print(f"  Start: preset {start.key}")
        for a in scanned.actions:
            print(f"  - {describe_action(a, catalog)}")

    return failures

if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/sim_scanner.py OUT_DIR [--matches N] [--custom] [--corrupt]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    custom, args = pop_flag(args, "--custom")
    corrupt, args = pop_flag(args, "--corrupt")

    count = 6
    if "--matches" in args:
        i = args.index("--matches")
        if i + 1 >= len(args):
            raise SystemExit("--matches requires a value")
        count = int(args[i + 1])
        args = args[:i] + args[i + 2:]

    out = args[0] if len(args) > 0 else "simulated_matches"

    failed = scan(generate_match_data(out, count, custom=custom), corrupt=corrupt)
    print(f"SCANNED: {count - failed}/{count} ok")
    raise SystemExit(0)
