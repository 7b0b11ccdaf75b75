"""Persistent volume claims: a wrapper with predicates, and a builder.

Claims are plain dictionaries keyed by the Kubernetes API field names.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from jivakube.errors import BuildError, ValidationError
from jivakube.quantity import parse_quantity

_PREFIX = "failed to build PVC object"


class PVC:
    """Wraps a persistent volume claim API object, which may be None."""

    def __init__(self, obj: dict[str, Any] | None) -> None:
        self.obj = obj

    @property
    def name(self) -> str:
        return ((self.obj or {}).get("metadata") or {}).get("name", "")

    def is_bound(self) -> bool:
        """True if the claim is bound."""
        return ((self.obj or {}).get("status") or {}).get("phase") == "Bound"

    def is_nil(self) -> bool:
        """True if there is no claim object."""
        return self.obj is None


@dataclass
class PVCList:
    """A list of wrapped claims."""

    items: list[PVC] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def to_api_list(self) -> dict[str, Any]:
        """Return the claims as an API list object."""
        return {"items": [pvc.obj for pvc in self.items]}


Predicate = Callable[[PVC], bool]


def new_for_api_object(obj: dict[str, Any] | None, *args: Callable[[PVC], None]) -> PVC:
    """Wrap the given claim object, applying the options in order."""
    pvc = PVC(obj)
    for option in args:
        option(pvc)
    return pvc


def is_bound() -> Predicate:
    """Predicate that keeps bound claims."""
    return lambda pvc: pvc.is_bound()


def is_nil() -> Predicate:
    """Predicate that keeps missing claims."""
    return lambda pvc: pvc.is_nil()


def contains_name(name: str) -> Predicate:
    """Predicate that keeps claims whose name contains the given text."""
    return lambda pvc: name in pvc.name


def _format_errors(errors: Iterable[Exception]) -> str:
    return "[" + " ".join(str(error) for error in errors) + "]"


class Builder:
    """Collects claim settings and the problems found while setting them."""

    def __init__(self) -> None:
        self.pvc = PVC({"metadata": {}, "spec": {}})
        self.errs: list[Exception] = []

    @property
    def _metadata(self) -> dict[str, Any]:
        return self.pvc.obj.setdefault("metadata", {})

    @property
    def _spec(self) -> dict[str, Any]:
        return self.pvc.obj.setdefault("spec", {})

    def _fail(self, message: str) -> "Builder":
        self.errs.append(BuildError(message))
        return self

    def with_name(self, name: str) -> "Builder":
        """Set the claim name."""
        if not name:
            return self._fail(f"{_PREFIX}: missing PVC name")
        self._metadata["name"] = name
        return self

    def with_generate_name(self, name: str) -> "Builder":
        """Set the prefix the server uses to generate a name."""
        if not name:
            return self._fail(f"{_PREFIX}: missing PVC generateName")
        self._metadata["generateName"] = name
        return self

    def with_namespace(self, namespace: str) -> "Builder":
        """Set the namespace; an empty one means ``default``."""
        self._metadata["namespace"] = namespace or "default"
        return self

    def with_annotations(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Set the annotations."""
        if not annotations:
            return self._fail(f"{_PREFIX}: missing annotations")
        self._metadata["annotations"] = dict(annotations)
        return self

    def with_labels(self, labels: Mapping[str, str] | None) -> "Builder":
        """Merge the given labels into any already set."""
        if not labels:
            return self._fail(f"{_PREFIX}: missing labels")
        self._metadata.setdefault("labels", {}).update(labels)
        return self

    def with_owner_reference_new(
        self, owner_references: Sequence[Mapping[str, Any]] | None
    ) -> "Builder":
        """Replace the owner references."""
        if not owner_references:
            return self._fail("failed to build pvc object: no new ownerRefernce")
        self._metadata["ownerReferences"] = list(owner_references)
        return self

    def with_labels_new(self, labels: Mapping[str, str] | None) -> "Builder":
        """Replace the labels with a copy of the given ones."""
        if not labels:
            return self._fail(f"{_PREFIX}: missing labels")
        self._metadata["labels"] = dict(labels)
        return self

    def with_storage_class(self, name: str) -> "Builder":
        """Set the storage class name."""
        if not name:
            return self._fail(f"{_PREFIX}: missing storageclass name")
        self._spec["storageClassName"] = name
        return self

    def with_access_modes(self, access_modes: Sequence[str] | None) -> "Builder":
        """Set the access modes."""
        if not access_modes:
            return self._fail(f"{_PREFIX}: missing accessmodes")
        self._spec["accessModes"] = list(access_modes)
        return self

    def with_capacity(self, capacity: str) -> "Builder":
        """Set the requested storage capacity, given as a quantity string."""
        try:
            quantity = parse_quantity(capacity)
        except ValueError as exc:
            return self._fail(f"{_PREFIX}: failed to parse capacity {{{capacity}}}: {exc}")
        self._spec.setdefault("resources", {})["requests"] = {"storage": quantity}
        return self

    def build(self) -> dict[str, Any]:
        """Return the claim; raise ValidationError if problems were found."""
        if self.errs:
            raise ValidationError(_format_errors(self.errs), self.errs)
        return copy.deepcopy(self.pvc.obj)