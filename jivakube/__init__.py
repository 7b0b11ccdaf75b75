"""Validating builders for Kubernetes containers, pod templates, deployments, PVCs and services."""

__version__ = "0.1.0"

__all__ = [
    "container",
    "deployment",
    "errors",
    "podtemplatespec",
    "pvc",
    "quantity",
    "rollout",
    "service",
]