import pytest

from autofig_core.catalog import MappingActionCatalog, default_catalog, describe_action
from autofig_core.models import Alliance, Discrete, MatchRecord, Pose, StartPositionRef, Wait


def test_start_position_invariants():
    assert StartPositionRef.preset(3).key == 3
    assert not StartPositionRef.preset(3).is_custom
    assert StartPositionRef.custom(Pose(0, 0, 0)).is_custom

    with pytest.raises(ValueError):
        StartPositionRef(0)
    with pytest.raises(ValueError):
        StartPositionRef.preset(0)
    with pytest.raises(ValueError):
        StartPositionRef(-2)
    with pytest.raises(ValueError):
        StartPositionRef(2, Pose(0, 0, 0))
    for key in (2.5, 2.0, True, "2"):
        with pytest.raises(TypeError):
            StartPositionRef.preset(key)


def test_match_record_invariants():
    m = MatchRecord(1, Alliance.BLUE, StartPositionRef.preset(1), [Wait(1), Discrete("A1")])
    assert m.actions == (Wait(1), Discrete("A1"))
    assert hash(m) == hash(MatchRecord(1, Alliance.BLUE, StartPositionRef.preset(1), (Wait(1), Discrete("A1"))))

    with pytest.raises(ValueError):
        MatchRecord(0, Alliance.RED, StartPositionRef.preset(1))
    for number in (5.0, 5.7, True):
        with pytest.raises(TypeError):
            MatchRecord(number, Alliance.RED, StartPositionRef.preset(1))


@pytest.mark.parametrize("text, expected", [("red", Alliance.RED), ("Blue", Alliance.BLUE), ("R", Alliance.RED), (" b ", Alliance.BLUE)])
def test_alliance_parse(text, expected):
    assert Alliance.parse(text) is expected


def test_alliance_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Alliance.parse("purple")


def test_wait_millis():
    assert Wait(3).millis == 3000
    assert Wait.from_millis(Wait(3).millis) == Wait(3)
    with pytest.raises(ValueError):
        Wait(-1)


def test_default_catalog():
    cat = default_catalog()
    assert len(cat) == 10
    assert cat.label_for("A1") == "Near Launch"
    assert cat.label_for("A10") == "Drive To"
    assert cat.label_for("wait") is None
    assert "A11" not in cat


def test_catalog_from_groups_skips_non_tag_ids():
    groups = {
        "custom": {"label": "Custom", "actions": [
            {"id": "A12", "label": "Hang"},
            {"id": "A13"},
            {"id": "near_launch", "label": "Near Launch"},
        ]},
    }
    with pytest.warns(UserWarning, match="near_launch"):
        cat = MappingActionCatalog.from_action_groups(groups)
    assert cat.label_for("A12") == "Hang"
    assert cat.label_for("A13") == "A13"
    assert "near_launch" not in cat


def test_describe_action():
    cat = default_catalog()
    assert describe_action(Wait(2), cat) == "Wait 2s"
    assert describe_action(Discrete("A3"), cat) == "Spike 1"
    assert describe_action(Discrete("A99"), cat) == "A99"
    assert describe_action(Discrete("A3")) == "A3"
    with pytest.raises(TypeError):
        describe_action("A3", cat)
