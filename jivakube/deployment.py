"""Builder for Kubernetes deployments and checks of their rollout status.

Deployments are plain dictionaries keyed by the Kubernetes API field names
(``metadata``, ``spec``, ``status``).
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any

from jivakube import podtemplatespec
from jivakube.errors import BuildError, ValidationError
from jivakube.rollout import RolloutOutput, new_rollout

_PREFIX = "failed to build deployment object"


class PredicateName(str, Enum):
    """Names of the rollout checks, used to pick their status messages."""

    PROGRESS_DEADLINE_EXCEEDED = "ProgressDeadlineExceeded"
    NOT_SPEC_SYNCED = "NotSpecSynced"
    OLDER_REPLICA_ACTIVE = "OlderReplicaActive"
    TERMINATION_IN_PROGRESS = "TerminationInProgress"
    UPDATE_IN_PROGRESS = "UpdateInProgress"


class Deploy:
    """Wraps a deployment API object."""

    def __init__(self, obj: dict[str, Any]) -> None:
        self.obj = obj

    @property
    def _status(self) -> Mapping[str, Any]:
        return self.obj.get("status") or {}

    def _status_int(self, key: str) -> int:
        return int(self._status.get(key) or 0)

    @property
    def _spec_replicas(self) -> int | None:
        return (self.obj.get("spec") or {}).get("replicas")

    def is_rollout(self) -> tuple[PredicateName | None, bool]:
        """Return the first failing check and False, or (None, True) if rolled out."""
        for name, check in _ROLLOUT_CHECKS.items():
            if check(self):
                return name, False
        return None, True

    def failed_rollout(self, name: PredicateName) -> RolloutOutput:
        """Return the rollout output for the given failed check."""
        return RolloutOutput(is_rolledout=False, message=_ROLLOUT_STATUSES[name](self))

    def success_rollout(self) -> RolloutOutput:
        """Return the rollout output for a completed rollout."""
        return RolloutOutput(is_rolledout=True, message="deployment successfully rolled out")

    def rollout_status(self) -> RolloutOutput:
        """Return the rollout output of this deployment."""
        name, ok = self.is_rollout()
        if ok:
            return self.success_rollout()
        return self.failed_rollout(name)

    def rollout_status_raw(self) -> bytes:
        """Return the rollout output of this deployment as JSON bytes."""
        return new_rollout(self.rollout_status()).raw()

    def is_progress_deadline_exceeded(self) -> bool:
        """True if the Progressing condition reports ProgressDeadlineExceeded."""
        return any(
            cond.get("type") == "Progressing" and cond.get("reason") == "ProgressDeadlineExceeded"
            for cond in self._status.get("conditions") or []
        )

    def is_older_replica_active(self) -> bool:
        """True if fewer replicas are updated than the spec asks for."""
        replicas = self._spec_replicas
        return replicas is not None and self._status_int("updatedReplicas") < replicas

    def is_termination_in_progress(self) -> bool:
        """True if old replicas are still waiting to terminate."""
        return self._status_int("replicas") > self._status_int("updatedReplicas")

    def is_update_in_progress(self) -> bool:
        """True if fewer updated replicas are available than were updated."""
        return self._status_int("availableReplicas") < self._status_int("updatedReplicas")

    def is_not_sync_spec(self) -> bool:
        """True if the latest spec generation has not been observed yet."""
        generation = int((self.obj.get("metadata") or {}).get("generation") or 0)
        return generation > self._status_int("observedGeneration")


Predicate = Callable[[Deploy], bool]


def is_progress_deadline_exceeded() -> Predicate:
    """Predicate form of Deploy.is_progress_deadline_exceeded."""
    return lambda deploy: deploy.is_progress_deadline_exceeded()


def is_older_replica_active() -> Predicate:
    """Predicate form of Deploy.is_older_replica_active."""
    return lambda deploy: deploy.is_older_replica_active()


def is_termination_in_progress() -> Predicate:
    """Predicate form of Deploy.is_termination_in_progress."""
    return lambda deploy: deploy.is_termination_in_progress()


def is_update_in_progress() -> Predicate:
    """Predicate form of Deploy.is_update_in_progress."""
    return lambda deploy: deploy.is_update_in_progress()


def is_not_sync_spec() -> Predicate:
    """Predicate form of Deploy.is_not_sync_spec."""
    return lambda deploy: deploy.is_not_sync_spec()


def _older_replica_message(deploy: Deploy) -> str:
    replicas = deploy._spec_replicas
    if replicas is None:
        return "replica update in-progress: some older replicas were updated"
    return (
        f"replica update in-progress: {deploy._status_int('updatedReplicas')} "
        f"of {replicas} new replicas were updated"
    )


def _termination_message(deploy: Deploy) -> str:
    pending = deploy._status_int("replicas") - deploy._status_int("updatedReplicas")
    return f"replica termination in-progress: {pending} old replicas are pending termination"


def _update_message(deploy: Deploy) -> str:
    return (
        f"replica update in-progress: {deploy._status_int('availableReplicas')} "
        f"of {deploy._status_int('updatedReplicas')} updated replicas are available"
    )


_ROLLOUT_STATUSES: dict[PredicateName, Callable[[Deploy], str]] = {
    PredicateName.PROGRESS_DEADLINE_EXCEEDED: lambda d: "deployment exceeded its progress deadline",
    PredicateName.OLDER_REPLICA_ACTIVE: _older_replica_message,
    PredicateName.TERMINATION_IN_PROGRESS: _termination_message,
    PredicateName.UPDATE_IN_PROGRESS: _update_message,
    PredicateName.NOT_SPEC_SYNCED: lambda d: (
        "deployment rollout in-progress: waiting for deployment spec update"
    ),
}

_ROLLOUT_CHECKS: dict[PredicateName, Predicate] = {
    PredicateName.PROGRESS_DEADLINE_EXCEEDED: is_progress_deadline_exceeded(),
    PredicateName.OLDER_REPLICA_ACTIVE: is_older_replica_active(),
    PredicateName.TERMINATION_IN_PROGRESS: is_termination_in_progress(),
    PredicateName.UPDATE_IN_PROGRESS: is_update_in_progress(),
    PredicateName.NOT_SPEC_SYNCED: is_not_sync_spec(),
}


def new_for_api_object(obj: dict[str, Any], *args: Callable[[Deploy], None]) -> Deploy:
    """Wrap the given deployment object, applying the options in order."""
    deploy = Deploy(obj)
    for option in args:
        option(deploy)
    return deploy


class Builder:
    """Collects deployment settings and the problems found while setting them."""

    def __init__(self) -> None:
        self.deployment = Deploy({"metadata": {}, "spec": {}})
        self.checks: list[Predicate] = []
        self.errors: list[Exception] = []

    @property
    def _metadata(self) -> dict[str, Any]:
        return self.deployment.obj.setdefault("metadata", {})

    @property
    def _spec(self) -> dict[str, Any]:
        return self.deployment.obj.setdefault("spec", {})

    @property
    def _pod_spec(self) -> dict[str, Any]:
        return self._spec.setdefault("template", {}).setdefault("spec", {})

    def _fail(self, message: str) -> "Builder":
        self.errors.append(BuildError(message))
        return self

    def with_name(self, name: str) -> "Builder":
        """Set the deployment name."""
        if not name:
            return self._fail("failed to build deployment: missing name")
        self._metadata["name"] = name
        return self

    def with_namespace(self, namespace: str) -> "Builder":
        """Set the deployment namespace."""
        if not namespace:
            return self._fail("failed to build deployment: missing namespace")
        self._metadata["namespace"] = namespace
        return self

    def with_annotations(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Merge the given annotations into any already set."""
        if not annotations:
            return self._fail(f"{_PREFIX}: missing annotations")
        if "annotations" not in self._metadata:
            return self.with_annotations_new(annotations)
        self._metadata["annotations"].update(annotations)
        return self

    def with_annotations_new(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Replace the annotations with a copy of the given ones."""
        if not annotations:
            return self._fail(f"{_PREFIX}: no new annotations")
        self._metadata["annotations"] = dict(annotations)
        return self

    def with_node_selector(self, selector: Mapping[str, str] | None) -> "Builder":
        """Merge the given node selector into the pod template's."""
        if not selector:
            return self._fail(f"{_PREFIX}: no node selector")
        if "nodeSelector" not in self._pod_spec:
            return self.with_node_selector_new(selector)
        self._pod_spec["nodeSelector"].update(selector)
        return self

    def with_node_selector_new(self, selector: Mapping[str, str] | None) -> "Builder":
        """Replace the pod template's node selector."""
        if not selector:
            return self._fail(f"{_PREFIX}: no new node selector")
        self._pod_spec["nodeSelector"] = dict(selector)
        return self

    def with_owner_reference_new(self, owner_references: Sequence[Mapping[str, Any]] | None) -> "Builder":
        """Replace the owner references."""
        if not owner_references:
            return self._fail(f"{_PREFIX}: no new ownerRefernce")
        self._metadata["ownerReferences"] = list(owner_references)
        return self

    def with_labels(self, labels: Mapping[str, str] | None) -> "Builder":
        """Merge the given labels into any already set."""
        if not labels:
            return self._fail(f"{_PREFIX}: missing labels")
        if "labels" not in self._metadata:
            return self.with_labels_new(labels)
        self._metadata["labels"].update(labels)
        return self

    def with_labels_new(self, labels: Mapping[str, str] | None) -> "Builder":
        """Replace the labels with a copy of the given ones."""
        if not labels:
            return self._fail(f"{_PREFIX}: no new labels")
        self._metadata["labels"] = dict(labels)
        return self

    def with_selector_match_labels(self, match_labels: Mapping[str, str] | None) -> "Builder":
        """Merge the given match labels into the selector."""
        if not match_labels:
            return self._fail(f"{_PREFIX}: missing matchlabels")
        if "selector" not in self._spec:
            return self.with_selector_match_labels_new(match_labels)
        self._spec["selector"].setdefault("matchLabels", {}).update(match_labels)
        return self

    def with_selector_match_labels_new(self, match_labels: Mapping[str, str] | None) -> "Builder":
        """Replace the selector with one matching a copy of the given labels."""
        if not match_labels:
            return self._fail(f"{_PREFIX}: no new matchlabels")
        self._spec["selector"] = {"matchLabels": dict(match_labels)}
        return self

    def with_replicas(self, replicas: int | None) -> "Builder":
        """Set the number of replicas."""
        if replicas is None:
            return self._fail(f"{_PREFIX}: nil replicas")
        if replicas < 0:
            return self._fail(f"{_PREFIX}: invalid replicas {{{replicas}}}")
        self._spec["replicas"] = int(replicas)
        return self

    def with_pod_template_spec_builder(
        self, template_builder: podtemplatespec.Builder | None
    ) -> "Builder":
        """Build the given pod template and use it as the deployment's template."""
        if template_builder is None:
            return self._fail("failed to build deployment: nil templatespecbuilder")
        try:
            template = template_builder.build()
        except BuildError as exc:
            return self._fail(f"failed to build deployment: {exc}")
        self._spec["template"] = template.template
        return self

    def with_strategy_type(self, strategy_type: str) -> "Builder":
        """Set the deployment strategy type."""
        if not strategy_type:
            return self._fail(f"{_PREFIX}: missing strategytype")
        self._spec.setdefault("strategy", {})["type"] = strategy_type
        return self

    def add_check(self, predicate: Predicate) -> "Builder":
        """Add a condition for the deployment."""
        self.checks.append(predicate)
        return self

    def add_checks(self, predicates: Iterable[Predicate]) -> "Builder":
        """Add several conditions for the deployment."""
        for predicate in predicates:
            self.add_check(predicate)
        return self

    def build(self) -> dict[str, Any]:
        """Return the deployment; raise ValidationError if problems were found."""
        if self.errors:
            found = "[" + " ".join(str(error) for error in self.errors) + "]"
            name = self._metadata.get("name", "")
            raise ValidationError(
                f"failed to build a deployment: {name}: "
                f"failed to validate: build errors were found: {found}",
                self.errors,
            )
        return copy.deepcopy(self.deployment.obj)