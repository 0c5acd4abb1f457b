import json

from click.testing import CliRunner

from autofig_verify.cli import main
from autofig_verify.logic import verify_payload


def invoke(*args):
    r = CliRunner().invoke(main, ["payload", *args])
    return r.exit_code, json.loads(r.output.strip().splitlines()[-1])


def test_valid_payload_is_labelled():
    code, result = invoke("5RS1W1A1")
    assert code == 0
    assert result["status"] == "PASS"
    assert result["match"] == {
        "matchNumber": 5,
        "alliance": "red",
        "startPosition": {"type": "S1"},
        "actions": [
            {"type": "wait", "config": {"waitTime": 1000}},
            {"type": "A1", "label": "Near Launch"},
        ],
    }


def test_syntax_error_reports_offset():
    code, result = invoke("5RS1X1")
    assert code == 1
    err = result["errors"][0]
    assert err["code"] == "E_PAYLOAD_SYNTAX"
    assert err["offset"] == 4
    assert err["found"] == "X"


def test_noncanonical_payload():
    result = verify_payload("007BS3")
    assert result["errors"][0]["code"] == "E_PAYLOAD_NONCANONICAL"
    assert result["errors"][0]["canonical"] == "7BS3"


def test_capacity():
    code, result = invoke("5RS1W1A1", "--capacity", "7")
    assert code == 1
    assert result["errors"][0] == {
        "code": "E_PAYLOAD_CAPACITY",
        "message": "Payload exceeds QR capacity",
        "size": 8,
        "capacity": 7,
    }


def test_custom_catalog(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"actionGroups": {"endgame": {"label": "Endgame", "actions": [{"id": "A1", "label": "Hang"}]}}}))
    code, result = invoke("3BS0gAgAgAA1", "--catalog", str(path))
    assert code == 0
    assert result["match"]["actions"] == [{"type": "A1", "label": "Hang"}]
    assert result["match"]["startPosition"]["type"] == "S0"
