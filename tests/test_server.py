import pytest

from troller.server import roll_dice


def test_roll_dice_payload():
    payload = roll_dice("hit: 1d1 + 2, 1d0")
    assert payload["input"] == "hit: 1d1 + 2, 1d0"
    assert payload["ok"] is False

    hit, broken = payload["results"]
    assert hit["name"] == "hit"
    assert hit["title"] == "hit"
    assert hit["expression"] == "1d1 + 2"
    assert hit["total"] == 3
    assert hit["rolls"] == [{"term": 0, "sides": 1, "value": 1, "kept": True}]
    assert hit["display"] == "**1** + 2 => 3"

    assert broken["index"] == 1
    assert broken["error"]["code"] == "INVALID_DICE_SPEC"
    assert "total" not in broken


def test_roll_dice_all_ok():
    payload = roll_dice("2d6, 1d20h1")
    assert payload["ok"] is True
    assert [r["title"] for r in payload["results"]] == ["Roll 1", "Roll 2"]


def test_empty_input_is_a_tool_error():
    with pytest.raises(ValueError, match=r"\[MALFORMED_REQUEST\]"):
        roll_dice("   ")
