import pytest

from webviewbridge.api.rpc.envelope import Envelope


def test_ok_and_fail_shapes():
    assert Envelope.ok({"a": 1}).to_dict() == {"success": True, "data": {"a": 1}, "error": None}
    assert Envelope.fail("boom").to_dict() == {"success": False, "data": None, "error": "boom"}
    assert Envelope.ok().data is None


def test_inconsistent_states_are_refused():
    with pytest.raises(ValueError):
        Envelope(success=True, error="nope")
    with pytest.raises(ValueError):
        Envelope(success=False, data={"x": 1}, error="nope")
