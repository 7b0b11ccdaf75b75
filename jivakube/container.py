"""Builder for Kubernetes container specifications.

Containers are plain dictionaries keyed by the Kubernetes API field names
(``name``, ``image``, ``command``, ``volumeMounts`` and so on).
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from jivakube.errors import BuildError, ValidationError

ContainerSpec = dict[str, Any]
OptionFunc = Callable[[ContainerSpec], None]
Predicate = Callable[[ContainerSpec], "tuple[str, bool]"]

_PREFIX = "failed to build container object"


def predicate_failed_error(message: str) -> BuildError:
    """Return the error reported for a failed predicate."""
    return BuildError(f"predicatefailed: {message}")


def new(*args: OptionFunc) -> ContainerSpec:
    """Return a new container with the given options applied in order."""
    spec: ContainerSpec = {}
    for option in args:
        option(spec)
    return spec


def with_name(name: str) -> OptionFunc:
    """Option that sets the container name."""

    def apply(spec: ContainerSpec) -> None:
        spec["name"] = name

    return apply


def with_image(image: str) -> OptionFunc:
    """Option that sets the container image."""

    def apply(spec: ContainerSpec) -> None:
        spec["image"] = image

    return apply


class Builder:
    """Collects container settings and the problems found while setting them."""

    def __init__(self) -> None:
        self.container: ContainerSpec = {}
        self.checks: list[Predicate] = []
        self.errors: list[Exception] = []

    def _fail(self, reason: str) -> "Builder":
        self.errors.append(BuildError(f"{_PREFIX}: {reason}"))
        return self

    def _set_list(self, key: str, values: Sequence[Any] | None, what: str) -> "Builder":
        if values is None:
            return self._fail(f"nil {what}")
        if len(values) == 0:
            return self._fail(f"missing {what}")
        self.container[key] = list(values)
        return self

    def add_check(self, predicate: Predicate) -> "Builder":
        """Add a condition to validate against the container at build time."""
        self.checks.append(predicate)
        return self

    def add_checks(self, predicates: Iterable[Predicate]) -> "Builder":
        """Add several conditions to validate at build time."""
        for predicate in predicates:
            self.add_check(predicate)
        return self

    def with_name(self, name: str) -> "Builder":
        """Set the container name."""
        if not name:
            return self._fail("missing name")
        with_name(name)(self.container)
        return self

    def with_image(self, image: str) -> "Builder":
        """Set the container image."""
        if not image:
            return self._fail("missing image")
        with_image(image)(self.container)
        return self

    def with_command_new(self, command: Sequence[str] | None) -> "Builder":
        """Set the container command, replacing any earlier one."""
        return self._set_list("command", command, "command")

    def with_arguments_new(self, args: Sequence[str] | None) -> "Builder":
        """Set the command arguments, replacing any earlier ones."""
        return self._set_list("args", args, "arguments")

    def with_volume_mounts_new(self, volume_mounts: Sequence[Mapping[str, Any]] | None) -> "Builder":
        """Set the volume mounts, replacing any earlier ones."""
        return self._set_list("volumeMounts", volume_mounts, "volumemounts")

    def with_image_pull_policy(self, policy: str) -> "Builder":
        """Set the image pull policy."""
        if not policy:
            return self._fail("missing imagepullpolicy")
        self.container["imagePullPolicy"] = policy
        return self

    def with_privileged_security_context(self, privileged: bool | None) -> "Builder":
        """Set a security context with the given privileged flag."""
        if privileged is None:
            return self._fail("missing securitycontext")
        self.container["securityContext"] = {"privileged": bool(privileged)}
        return self

    def with_resources(self, resources: Mapping[str, Any] | None) -> "Builder":
        """Set the resource requirements."""
        if resources is None:
            return self._fail("missing resources")
        self.container["resources"] = copy.deepcopy(dict(resources))
        return self

    def with_ports_new(self, ports: Sequence[Mapping[str, Any]] | None) -> "Builder":
        """Set the container ports, replacing any earlier ones."""
        return self._set_list("ports", ports, "ports")

    def with_envs_new(self, envs: Sequence[Mapping[str, Any]] | None) -> "Builder":
        """Set the environment variables, replacing any earlier ones."""
        return self._set_list("env", envs, "envs")

    def with_envs(self, envs: Sequence[Mapping[str, Any]] | None) -> "Builder":
        """Append environment variables to those already set."""
        if envs is None:
            return self._fail("nil envs")
        if len(envs) == 0:
            return self._fail("missing envs")
        if "env" not in self.container:
            return self.with_envs_new(envs)
        self.container["env"].extend(envs)
        return self

    def with_liveness_probe(self, probe: Mapping[str, Any] | None) -> "Builder":
        """Set the liveness probe."""
        if probe is None:
            return self._fail("nil liveness probe")
        self.container["livenessProbe"] = probe
        return self

    def with_lifecycle(self, lifecycle: Mapping[str, Any] | None) -> "Builder":
        """Set the lifecycle hooks."""
        if lifecycle is None:
            return self._fail("nil lifecycle")
        self.container["lifecycle"] = lifecycle
        return self

    def _validate(self) -> None:
        for check in self.checks:
            message, ok = check(self.container)
            if not ok:
                self.errors.append(predicate_failed_error(message))
        if self.errors:
            raise ValidationError("container validation failed", self.errors)

    def build(self) -> ContainerSpec:
        """Validate and return the container; raise ValidationError on problems."""
        self._validate()
        return copy.deepcopy(self.container)