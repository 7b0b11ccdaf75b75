"""Rollout status output of a deployment and its raw (JSON) form."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass


@dataclass
class RolloutOutput:
    """Whether a deployment has rolled out, with a message saying why."""

    is_rolledout: bool
    message: str


Serializer = Callable[[RolloutOutput], bytes]


def _to_json(output: RolloutOutput) -> bytes:
    document = {"isRolledout": output.is_rolledout, "message": output.message}
    return json.dumps(document, separators=(",", ":")).encode("utf-8")


class Rollout:
    """Gives a rollout output in raw form."""

    def __init__(
        self,
        output: RolloutOutput | None = None,
        serializer: Serializer | None = None,
    ) -> None:
        self.output = output
        self._serialize: Serializer = serializer or _to_json

    def raw(self) -> bytes:
        """Return the output serialized; JSON by default."""
        if self.output is None:
            raise ValueError("unable to get rollout status output")
        return self._serialize(self.output)


def new_rollout(output: RolloutOutput | None) -> Rollout:
    """Return a rollout for the given output with the default serializer."""
    return Rollout(output)