import json

import pytest

from jivakube import podtemplatespec
from jivakube.deployment import (
    Builder,
    Deploy,
    PredicateName,
    is_not_sync_spec,
    is_older_replica_active,
    is_progress_deadline_exceeded,
    is_termination_in_progress,
    is_update_in_progress,
    new_for_api_object,
)
from jivakube.errors import ValidationError


@pytest.mark.parametrize("name,expect_err", [("PVC1", False), ("", True)])
def test_builder_with_name(name, expect_err):
    b = Builder().with_name(name)
    assert (len(b.errors) > 0) is expect_err


@pytest.mark.parametrize("namespace,expect_err", [("PVC1", False), ("", True)])
def test_builder_with_namespace(namespace, expect_err):
    b = Builder().with_namespace(namespace)
    assert (len(b.errors) > 0) is expect_err


LABELS = {"persistent-volume": "PV", "application": "percona"}


@pytest.mark.parametrize(
    "method",
    [
        "with_annotations",
        "with_annotations_new",
        "with_labels",
        "with_labels_new",
        "with_selector_match_labels",
        "with_selector_match_labels_new",
    ],
)
@pytest.mark.parametrize("values,expect_err", [(LABELS, False), ({}, True)])
def test_builder_map_setters(method, values, expect_err):
    b = getattr(Builder(), method)(values)
    assert (len(b.errors) > 0) is expect_err


@pytest.mark.parametrize("replicas,expect_err", [(3, False), (None, True), (-1, True)])
def test_builder_with_replicas(replicas, expect_err):
    b = Builder().with_replicas(replicas)
    assert (len(b.errors) > 0) is expect_err


def test_invalid_replicas_message():
    b = Builder().with_replicas(-1)
    assert str(b.errors[0]) == "failed to build deployment object: invalid replicas {-1}"


@pytest.mark.parametrize("strategy,expect_err", [("Recreate", False), ("", True)])
def test_builder_with_strategy_type(strategy, expect_err):
    b = Builder().with_strategy_type(strategy)
    assert (len(b.errors) > 0) is expect_err


def test_labels_merge_and_copy():
    source = {"a": "1"}
    obj = Builder().with_labels(source).with_labels({"b": "2"}).build()
    assert obj["metadata"]["labels"] == {"a": "1", "b": "2"}
    assert source == {"a": "1"}


def test_labels_new_replaces():
    obj = Builder().with_labels({"a": "1"}).with_labels_new({"b": "2"}).build()
    assert obj["metadata"]["labels"] == {"b": "2"}


def test_selector_match_labels_merge():
    obj = Builder().with_selector_match_labels({"a": "1"}).with_selector_match_labels({"b": "2"}).build()
    assert obj["spec"]["selector"] == {"matchLabels": {"a": "1", "b": "2"}}


def test_node_selector_merge_into_pod_spec():
    obj = Builder().with_node_selector({"a": "1"}).with_node_selector({"b": "2"}).build()
    assert obj["spec"]["template"]["spec"]["nodeSelector"] == {"a": "1", "b": "2"}


def test_owner_reference_new():
    refs = [{"kind": "JivaVolume", "name": "pv"}]
    b = Builder().with_owner_reference_new(refs)
    assert b.build()["metadata"]["ownerReferences"] == refs
    assert Builder().with_owner_reference_new([]).errors


def test_build_success_values():
    obj = (
        Builder()
        .with_name("jiva-ctrl")
        .with_namespace("openebs")
        .with_replicas(1)
        .with_strategy_type("Recreate")
        .build()
    )
    assert obj["metadata"] == {"name": "jiva-ctrl", "namespace": "openebs"}
    assert obj["spec"]["replicas"] == 1
    assert obj["spec"]["strategy"] == {"type": "Recreate"}


def test_build_failure_raises_with_name():
    with pytest.raises(ValidationError) as info:
        Builder().with_name("jiva-ctrl").with_namespace("").build()
    assert "failed to build a deployment: jiva-ctrl" in str(info.value)
    assert len(info.value.errors) == 1


def test_pod_template_spec_builder_sets_template():
    tmpl = podtemplatespec.Builder().with_labels({"app": "jiva"})
    obj = Builder().with_pod_template_spec_builder(tmpl).build()
    assert obj["spec"]["template"]["metadata"] == {"labels": {"app": "jiva"}}


def test_pod_template_spec_builder_errors():
    b = Builder().with_pod_template_spec_builder(None)
    assert str(b.errors[0]) == "failed to build deployment: nil templatespecbuilder"
    bad = podtemplatespec.Builder().with_name("")
    b = Builder().with_pod_template_spec_builder(bad)
    assert str(b.errors[0]).startswith("failed to build deployment: ")


def test_add_checks_counts():
    b = Builder().add_checks([is_not_sync_spec(), is_update_in_progress()])
    assert len(b.checks) == 2


def _deploy(spec_replicas=None, generation=0, **status):
    spec = {} if spec_replicas is None else {"replicas": spec_replicas}
    return Deploy({"metadata": {"generation": generation}, "spec": spec, "status": status})


def test_rolled_out_when_everything_matches():
    d = _deploy(spec_replicas=1, replicas=1, updatedReplicas=1, availableReplicas=1)
    assert d.is_rollout() == (None, True)
    out = d.rollout_status()
    assert out.is_rolledout is True
    assert out.message == "deployment successfully rolled out"


def test_progress_deadline_exceeded():
    d = _deploy(conditions=[{"type": "Progressing", "reason": "ProgressDeadlineExceeded"}])
    assert d.is_rollout() == (PredicateName.PROGRESS_DEADLINE_EXCEEDED, False)
    assert d.rollout_status().message == "deployment exceeded its progress deadline"
    assert is_progress_deadline_exceeded()(d) is True


def test_older_replica_active():
    d = _deploy(spec_replicas=3, replicas=1, updatedReplicas=1, availableReplicas=1)
    assert is_older_replica_active()(d) is True
    assert d.rollout_status().message == "replica update in-progress: 1 of 3 new replicas were updated"


def test_older_replica_message_without_spec_replicas():
    d = _deploy()
    out = d.failed_rollout(PredicateName.OLDER_REPLICA_ACTIVE)
    assert out.message == "replica update in-progress: some older replicas were updated"
    assert out.is_rolledout is False
    assert d.is_older_replica_active() is False


def test_termination_in_progress():
    d = _deploy(spec_replicas=1, replicas=3, updatedReplicas=1, availableReplicas=1)
    assert is_termination_in_progress()(d) is True
    assert d.rollout_status().message == (
        "replica termination in-progress: 2 old replicas are pending termination"
    )


def test_update_in_progress():
    d = _deploy(spec_replicas=2, replicas=2, updatedReplicas=2, availableReplicas=1)
    assert d.is_rollout() == (PredicateName.UPDATE_IN_PROGRESS, False)
    assert d.rollout_status().message == (
        "replica update in-progress: 1 of 2 updated replicas are available"
    )


def test_not_spec_synced():
    d = _deploy(generation=2, observedGeneration=1)
    assert is_not_sync_spec()(d) is True
    assert d.rollout_status().message == (
        "deployment rollout in-progress: waiting for deployment spec update"
    )


def test_rollout_status_raw_is_json():
    d = _deploy(generation=2, observedGeneration=1)
    assert json.loads(d.rollout_status_raw()) == {
        "isRolledout": False,
        "message": "deployment rollout in-progress: waiting for deployment spec update",
    }


def test_new_for_api_object_applies_options():
    obj = {"metadata": {}}
    d = new_for_api_object(obj, lambda dep: dep.obj["metadata"].update(name="x"))
    assert d.obj is obj
    assert obj["metadata"]["name"] == "x"


def test_predicate_name_values():
    assert PredicateName.NOT_SPEC_SYNCED.value == "NotSpecSynced"
    assert PredicateName("UpdateInProgress") is PredicateName.UPDATE_IN_PROGRESS