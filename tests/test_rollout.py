import json

import pytest

from jivakube.rollout import Rollout, RolloutOutput, new_rollout


def test_raw_is_compact_json_with_api_keys():
    output = RolloutOutput(is_rolledout=True, message="deployment successfully rolled out")
    assert new_rollout(output).raw() == (
        b'{"isRolledout":true,"message":"deployment successfully rolled out"}'
    )


@pytest.mark.parametrize("rolled", [True, False])
def test_raw_round_trip(rolled):
    output = RolloutOutput(is_rolledout=rolled, message="some message")
    decoded = json.loads(new_rollout(output).raw())
    assert decoded == {"isRolledout": rolled, "message": "some message"}


def test_raw_without_output_raises():
    with pytest.raises(ValueError, match="unable to get rollout status output"):
        new_rollout(None).raw()


def test_custom_serializer_is_used():
    output = RolloutOutput(is_rolledout=False, message="waiting")
    rollout = Rollout(output, serializer=lambda o: o.message.encode())
    assert rollout.raw() == b"waiting"


def test_new_rollout_keeps_output():
    output = RolloutOutput(is_rolledout=False, message="m")
    assert new_rollout(output).output is output