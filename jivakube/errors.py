"""Exceptions raised while building Kubernetes objects."""

from __future__ import annotations

from collections.abc import Iterable


class BuildError(Exception):
    """A problem found while building an object."""


class ValidationError(BuildError):
    """Building an object failed; ``errors`` holds the problems that were found."""

    def __init__(self, message: str, errors: Iterable[Exception] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: list[Exception] = list(errors or [])

    def __str__(self) -> str:
        return self.message