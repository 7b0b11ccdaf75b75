"""Kubernetes services: a wrapper with predicates, and a builder.

Services are plain dictionaries keyed by the Kubernetes API field names.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from jivakube.errors import BuildError, ValidationError

_PREFIX = "failed to build service object"


class Service:
    """Wraps a service API object, which may be None."""

    def __init__(self, obj: dict[str, Any] | None) -> None:
        self.obj = obj

    @property
    def name(self) -> str:
        return ((self.obj or {}).get("metadata") or {}).get("name", "")

    def is_nil(self) -> bool:
        """True if there is no service object."""
        return self.obj is None


@dataclass
class ServiceList:
    """A list of wrapped services."""

    items: list[Service] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def to_api_list(self) -> dict[str, Any]:
        """Return the services as an API list object."""
        return {"items": [service.obj for service in self.items]}


Predicate = Callable[[Service], bool]


def new_for_api_object(
    obj: dict[str, Any] | None, *args: Callable[[Service], None]
) -> Service:
    """Wrap the given service object, applying the options in order."""
    service = Service(obj)
    for option in args:
        option(service)
    return service


def is_nil() -> Predicate:
    """Predicate that keeps missing services."""
    return lambda service: service.is_nil()


def contains_name(name: str) -> Predicate:
    """Predicate that keeps services whose name contains the given text."""
    return lambda service: name in service.name


def _format_errors(errors: Iterable[Exception]) -> str:
    return "[" + " ".join(str(error) for error in errors) + "]"


class Builder:
    """Collects service settings and the problems found while setting them."""

    def __init__(self) -> None:
        self.service = Service({"metadata": {}, "spec": {}})
        self.errs: list[Exception] = []

    @property
    def _metadata(self) -> dict[str, Any]:
        return self.service.obj.setdefault("metadata", {})

    @property
    def _spec(self) -> dict[str, Any]:
        return self.service.obj.setdefault("spec", {})

    def _fail(self, reason: str) -> "Builder":
        self.errs.append(BuildError(f"{_PREFIX}: {reason}"))
        return self

    def with_name(self, name: str) -> "Builder":
        """Set the service name."""
        if not name:
            return self._fail("missing name")
        self._metadata["name"] = name
        return self

    def with_generate_name(self, name: str) -> "Builder":
        """Set the prefix the server uses to generate a name."""
        if not name:
            return self._fail("missing generateName")
        self._metadata["generateName"] = name
        return self

    def with_namespace(self, namespace: str) -> "Builder":
        """Set the service namespace."""
        if not namespace:
            return self._fail("missing namespace")
        self._metadata["namespace"] = namespace
        return self

    def with_annotations(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Merge the given annotations into any already set."""
        if not annotations:
            return self._fail("missing annotations")
        if "annotations" not in self._metadata:
            return self.with_annotations_new(annotations)
        self._metadata["annotations"].update(annotations)
        return self

    def with_annotations_new(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Replace the annotations with a copy of the given ones."""
        if not annotations:
            return self._fail("no new annotations")
        self._metadata["annotations"] = dict(annotations)
        return self

    def with_owner_reference_new(
        self, owner_references: Sequence[Mapping[str, Any]] | None
    ) -> "Builder":
        """Replace the owner references."""
        if not owner_references:
            return self._fail("no new ownerRefernce")
        self._metadata["ownerReferences"] = list(owner_references)
        return self

    def with_labels(self, labels: Mapping[str, str] | None) -> "Builder":
        """Merge the given labels into any already set."""
        if not labels:
            return self._fail("missing labels")
        if "labels" not in self._metadata:
            return self.with_labels_new(labels)
        self._metadata["labels"].update(labels)
        return self

    def with_labels_new(self, labels: Mapping[str, str] | None) -> "Builder":
        """Replace the labels with a copy of the given ones."""
        if not labels:
            return self._fail("no new labels")
        self._metadata["labels"] = dict(labels)
        return self

    def with_selectors(self, selectors: Mapping[str, str] | None) -> "Builder":
        """Merge the given selectors into any already set."""
        if not selectors:
            return self._fail("missing selectors")
        if "selector" not in self._spec:
            return self.with_selectors_new(selectors)
        self._spec["selector"].update(selectors)
        return self

    def with_selectors_new(self, selectors: Mapping[str, str] | None) -> "Builder":
        """Replace the selectors with a copy of the given ones."""
        if not selectors:
            return self._fail("no new selectors")
        self._spec["selector"] = dict(selectors)
        return self

    def with_ports(self, ports: Sequence[Mapping[str, Any]] | None) -> "Builder":
        """Replace the ports with a copy of the given ones."""
        if not ports:
            return self._fail("missing ports")
        self._spec["ports"] = copy.deepcopy(list(ports))
        return self

    def with_cluster_ip(self, ip: str) -> "Builder":
        """Set the cluster IP; an empty string leaves the choice to the server."""
        self._spec["clusterIP"] = ip
        return self

    def build(self) -> dict[str, Any]:
        """Return the service; raise ValidationError if problems were found."""
        if self.errs:
            raise ValidationError(_format_errors(self.errs), self.errs)
        return copy.deepcopy(self.service.obj)