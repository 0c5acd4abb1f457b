import json
import os
import subprocess
import sys
from pathlib import Path

import pyarrow.parquet as pq
from click.testing import CliRunner

from autofig_core.models import Alliance, Discrete, MatchRecord, Pose, StartPositionRef, Wait
from autofig_core.terse import encode_match
from autofig_compile.cli import GOLD_TIMESTAMP, main as compile_main
from autofig_compile.documents import export_document
from autofig_verify.cli import main as verify_main
from autofig_verify.logic import verify_shard

REPO = Path(__file__).resolve().parents[1]

RECORDS = [
    MatchRecord(2, Alliance.BLUE, StartPositionRef.preset(2), (Wait(0), Discrete("A6"))),
    MatchRecord(1, Alliance.RED, StartPositionRef.preset(1), (Wait(1), Discrete("A1"), Discrete("A3"))),
    MatchRecord(1, Alliance.BLUE, StartPositionRef.custom(Pose(0.0, 0.0, 0.0)), (Discrete("A2"),)),
]


def run(args, cwd):
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(REPO / "src"), env.get("PYTHONPATH", "")])
    return subprocess.run([sys.executable, *args], cwd=cwd, env=env, check=False, capture_output=True, text=True)


def write_doc(tmp_path: Path, records=RECORDS) -> Path:
    path = tmp_path / "matches.json"
    path.write_text(json.dumps(export_document(records)), encoding="utf-8")
    return path


def last_json(output: str) -> dict:
    return json.loads(output.strip().splitlines()[-1])


def test_compile_and_verify(tmp_path):
    out = tmp_path / "shard"
    r = CliRunner().invoke(compile_main, [str(write_doc(tmp_path)), str(out), "--gold"])
    assert r.exit_code == 0, r.output
    assert "PASS: Shard generated" in r.output

    rows = pq.read_table(out / "payloads.parquet").to_pylist()
    assert [(row["match_number"], row["alliance"]) for row in rows] == [(1, "B"), (1, "R"), (2, "B")]
    assert [row["payload"] for row in rows] == ["1BS0gAgAgAA2", "1RS1W1A1A3", "2BS2W0A6"]
    assert rows[0]["byte_length"] == 12

    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["created"] == GOLD_TIMESTAMP
    assert manifest["match_count"] == 3
    assert manifest["integrity"]["files"] == ["payloads.parquet"]

    assert verify_shard(out) == {"status": "PASS", "error_count": 0, "errors": [], "match_count": 3}

    r = CliRunner().invoke(verify_main, ["shard", str(out)])
    assert r.exit_code == 0
    assert last_json(r.output)["status"] == "PASS"


def test_compile_empty_document(tmp_path):
    out = tmp_path / "shard"
    r = CliRunner().invoke(compile_main, [str(write_doc(tmp_path, [])), str(out)])
    assert r.exit_code == 0, r.output
    assert pq.read_table(out / "payloads.parquet").num_rows == 0
    assert verify_shard(out)["status"] == "PASS"


def test_compile_fails_closed_over_capacity(tmp_path):
    out = tmp_path / "shard"
    r = CliRunner().invoke(compile_main, [str(write_doc(tmp_path)), str(out), "--capacity", "9"])
    assert r.exit_code == 1
    assert "FATAL:" in r.output
    assert "exceeds QR capacity 9" in r.output


def test_compile_fails_closed_on_unknown_action(tmp_path):
    doc = tmp_path / "matches.json"
    doc.write_text(json.dumps({"matches": [{"matchNumber": 1, "alliance": "red", "actions": [{"type": "dump"}]}]}))
    r = CliRunner().invoke(compile_main, [str(doc), str(tmp_path / "shard")])
    assert r.exit_code == 1
    assert "FATAL:" in r.output


def test_verify_detects_layout_and_manifest_problems(tmp_path):
    out = tmp_path / "shard"
    CliRunner().invoke(compile_main, [str(write_doc(tmp_path)), str(out), "--gold"])

    (out / "manifest.json").write_text("{broken", encoding="utf-8")
    result = verify_shard(out)
    assert result["status"] == "FAIL"
    assert result["errors"][0]["code"] == "E_MANIFEST_JSON"

    for integrity in ([], "abc", None):
        (out / "manifest.json").write_text(json.dumps({"integrity": integrity}), encoding="utf-8")
        assert verify_shard(out)["errors"][0]["code"] == "E_MANIFEST_JSON"

    (out / "manifest.json").unlink()
    assert verify_shard(out)["errors"][0]["code"] == "E_LAYOUT_MISSING"

    r = CliRunner().invoke(verify_main, ["shard", str(out)])
    assert r.exit_code == 1
    assert last_json(r.output)["errors"][0]["code"] == "E_LAYOUT_MISSING"


def test_corrupted_payload_is_detected(tmp_path):
    out = tmp_path / "shard"
    CliRunner().invoke(compile_main, [str(write_doc(tmp_path)), str(out), "--gold"])

    r = run([str(REPO / "scripts" / "corrupt_one_char.py"), str(out)], cwd=REPO)
    assert r.returncode == 0, r.stderr + r.stdout

    result = verify_shard(out)
    assert result["status"] == "FAIL"
    assert result["errors"][0]["code"] == "E_INTEGRITY_MISMATCH"


def test_simulated_scans(tmp_path):
    r = run([str(REPO / "tools" / "sim_scanner.py"), str(tmp_path / "sim"), "--matches", "4", "--custom"], cwd=REPO)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "SCANNED: 4/4 ok" in r.stdout

    doc = tmp_path / "sim" / "matches.json"
    assert doc.exists()

    r = run([str(REPO / "tools" / "sim_scanner.py"), str(tmp_path / "bad"), "--matches", "3", "--corrupt"], cwd=REPO)
    assert r.returncode == 0, r.stderr + r.stdout
    assert "SCAN FAILED" in r.stdout
    assert "SCANNED: 2/3 ok" in r.stdout

    r = run(["-m", "autofig_compile.cli", str(doc), str(tmp_path / "shard")], cwd=REPO)
    assert r.returncode == 0, r.stderr + r.stdout
    assert verify_shard(tmp_path / "shard")["status"] == "PASS"


def test_sorted_payloads_match_encoder(tmp_path):
    out = tmp_path / "shard"
    CliRunner().invoke(compile_main, [str(write_doc(tmp_path)), str(out)])
    payloads = set(pq.read_table(out / "payloads.parquet").column("payload").to_pylist())
    assert payloads == {encode_match(m) for m in RECORDS}
