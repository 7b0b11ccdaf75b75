import pytest

from jivakube.errors import ValidationError
from jivakube.service import (
    Builder,
    ServiceList,
    contains_name,
    is_nil,
    new_for_api_object,
)


@pytest.mark.parametrize(
    "method",
    [
        "with_name",
        "with_generate_name",
        "with_namespace",
        "with_annotations",
        "with_annotations_new",
        "with_owner_reference_new",
        "with_labels",
        "with_labels_new",
        "with_selectors",
        "with_selectors_new",
        "with_ports",
    ],
)
def test_empty_values_record_errors(method):
    empty = "" if method in {"with_name", "with_generate_name", "with_namespace"} else {}
    if method in {"with_ports", "with_owner_reference_new"}:
        empty = []
    b = getattr(Builder(), method)(empty)
    assert len(b.errs) == 1
    with pytest.raises(ValidationError):
        b.build()


def test_name_and_namespace_round_trip():
    svc = Builder().with_name("jiva-ctrl").with_namespace("openebs").build()
    assert svc["metadata"]["name"] == "jiva-ctrl"
    assert svc["metadata"]["namespace"] == "openebs"


def test_labels_merge_then_replace():
    b = Builder().with_labels({"a": "1"}).with_labels({"b": "2"})
    assert b.build()["metadata"]["labels"] == {"a": "1", "b": "2"}
    b.with_labels_new({"c": "3"})
    assert b.build()["metadata"]["labels"] == {"c": "3"}


def test_annotations_merge():
    b = Builder().with_annotations({"x": "1"}).with_annotations({"y": "2"})
    assert b.build()["metadata"]["annotations"] == {"x": "1", "y": "2"}


def test_selectors_merge_then_replace():
    b = Builder().with_selectors({"app": "jiva"}).with_selectors({"tier": "ctrl"})
    assert b.build()["spec"]["selector"] == {"app": "jiva", "tier": "ctrl"}
    b.with_selectors_new({"only": "this"})
    assert b.build()["spec"]["selector"] == {"only": "this"}


def test_ports_are_copied():
    ports = [{"name": "iscsi", "port": 3260}]
    b = Builder().with_ports(ports)
    ports[0]["port"] = 1
    assert b.build()["spec"]["ports"][0]["port"] == 3260


def test_cluster_ip_accepts_empty():
    svc = Builder().with_cluster_ip("").build()
    assert svc["spec"]["clusterIP"] == ""


def test_build_error_mentions_problem():
    with pytest.raises(ValidationError) as info:
        Builder().with_name("").build()
    assert "failed to build service object: missing name" in str(info.value)
    assert len(info.value.errors) == 1


def test_predicates_and_list():
    objs = [{"metadata": {"name": "pvc-ctrl-svc"}}, {"metadata": {"name": "other"}}]
    slist = ServiceList([new_for_api_object(o) for o in objs])
    assert len(slist) == 2
    assert [s.name for s in slist.items if contains_name("ctrl")(s)] == ["pvc-ctrl-svc"]
    assert slist.to_api_list() == {"items": objs}
    assert is_nil()(new_for_api_object(None)) is True
    assert is_nil()(slist.items[0]) is False