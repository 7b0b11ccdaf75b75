"""Builder for Kubernetes pod template specifications.

A pod template is a plain dictionary with ``metadata`` and ``spec`` keys,
using the Kubernetes API field names.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from jivakube import container
from jivakube.errors import BuildError, ValidationError

_PREFIX = "failed to build podtemplatespec object"


def _empty_template() -> dict[str, Any]:
    return {"metadata": {}, "spec": {}}


def _format_errors(errors: list[Exception]) -> str:
    return "[" + " ".join(str(error) for error in errors) + "]"


@dataclass
class PodTemplateSpec:
    """A built pod template; ``template`` holds the API object."""

    template: dict[str, Any] = field(default_factory=_empty_template)

    @property
    def metadata(self) -> dict[str, Any]:
        return self.template["metadata"]

    @property
    def spec(self) -> dict[str, Any]:
        return self.template["spec"]


class Builder:
    """Collects pod template settings and the problems found while setting them."""

    def __init__(self) -> None:
        self.podtemplatespec = PodTemplateSpec()
        self.errs: list[Exception] = []

    @property
    def _metadata(self) -> dict[str, Any]:
        return self.podtemplatespec.metadata

    @property
    def _spec(self) -> dict[str, Any]:
        return self.podtemplatespec.spec

    def _fail(self, message: str) -> "Builder":
        self.errs.append(BuildError(message))
        return self

    def with_name(self, name: str) -> "Builder":
        """Set the template name."""
        if not name:
            return self._fail(f"{_PREFIX}: missing name")
        self._metadata["name"] = name
        return self

    def with_namespace(self, namespace: str) -> "Builder":
        """Set the template namespace."""
        if not namespace:
            return self._fail(f"{_PREFIX}: missing namespace")
        self._metadata["namespace"] = namespace
        return self

    def with_annotations(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Merge the given annotations into any already set."""
        if not annotations:
            return self._fail("failed to build deployment object: missing annotations")
        if "annotations" not in self._metadata:
            return self.with_annotations_new(annotations)
        self._metadata["annotations"].update(annotations)
        return self

    def with_annotations_new(self, annotations: Mapping[str, str] | None) -> "Builder":
        """Replace the annotations with a copy of the given ones."""
        if not annotations:
            return self._fail(f"{_PREFIX}: missing annotations")
        self._metadata["annotations"] = dict(annotations)
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
            return self._fail(f"{_PREFIX}: missing labels")
        self._metadata["labels"] = dict(labels)
        return self

    def with_node_selector(self, node_selectors: Mapping[str, str] | None) -> "Builder":
        """Merge the given node selectors into any already set."""
        if not node_selectors:
            return self._fail(f"{_PREFIX}: missing nodeselectors")
        if "nodeSelector" not in self._spec:
            return self.with_node_selector_new(node_selectors)
        self._spec["nodeSelector"].update(node_selectors)
        return self

    def with_node_selector_new(self, node_selectors: Mapping[str, str] | None) -> "Builder":
        """Replace the node selectors with a copy of the given ones."""
        if not node_selectors:
            return self._fail(f"{_PREFIX}: missing nodeselectors")
        self._spec["nodeSelector"] = dict(node_selectors)
        return self

    def with_service_account_name(self, name: str) -> "Builder":
        """Set the service account name."""
        if not name:
            return self._fail(f"{_PREFIX}: missing serviceaccountname")
        self._spec["serviceAccountName"] = name
        return self

    def with_priority_class_name(self, name: str) -> "Builder":
        """Set the priority class name."""
        if not name:
            return self._fail(f"{_PREFIX}: missing priorityclassname")
        self._spec["priorityClassName"] = name
        return self

    def with_affinity(self, affinity: Mapping[str, Any] | None) -> "Builder":
        """Set a copy of the given affinity."""
        if affinity is None:
            return self._fail(f"{_PREFIX}: missing affinity")
        self._spec["affinity"] = copy.deepcopy(dict(affinity))
        return self

    def with_tolerations(self, *args: Mapping[str, Any]) -> "Builder":
        """Append tolerations to those already set."""
        if not args:
            return self._fail(f"{_PREFIX}: nil tolerations")
        if not self._spec.get("tolerations"):
            return self.with_tolerations_new(*args)
        self._spec["tolerations"].extend(copy.deepcopy(list(args)))
        return self

    def with_tolerations_new(self, *args: Mapping[str, Any]) -> "Builder":
        """Replace the tolerations with the given ones."""
        if not args:
            return self._fail(f"{_PREFIX}: nil tolerations")
        self._spec["tolerations"] = copy.deepcopy(list(args))
        return self

    def _build_containers(self, builders: tuple[container.Builder, ...]) -> list[dict[str, Any]] | None:
        built = []
        for builder in builders:
            try:
                built.append(builder.build())
            except BuildError as exc:
                self._fail(f"failed to build podtemplatespec: {exc}")
                return None
        return built

    def with_container_builders(self, *args: container.Builder) -> "Builder":
        """Build the given containers and append them to the template."""
        if not args:
            return self._fail("failed to build podtemplatespec: nil containerbuilder")
        containers = self._spec.setdefault("containers", [])
        for builder in args:
            try:
                containers.append(builder.build())
            except BuildError as exc:
                return self._fail(f"failed to build podtemplatespec: {exc}")
        return self

    def with_container_builders_new(self, *args: container.Builder) -> "Builder":
        """Build the given containers and make them the template's containers."""
        if not args:
            return self._fail("failed to build podtemplatespec: nil containerbuilder")
        built = self._build_containers(args)
        if built is not None:
            self._spec["containers"] = built
        return self

    def build(self) -> PodTemplateSpec:
        """Return the pod template; raise ValidationError if problems were found."""
        if self.errs:
            raise ValidationError(
                f"failed to build a podtemplatespec: {self.podtemplatespec.template}: "
                f"failed to validate: build errors were found: {_format_errors(self.errs)}",
                self.errs,
            )
        return PodTemplateSpec(copy.deepcopy(self.podtemplatespec.template))