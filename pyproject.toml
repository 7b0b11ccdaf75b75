[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jivakube"
version = "0.1.0"
description = "Validating builders for Kubernetes containers, pod templates, deployments, PVCs and services"
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "builder", "deployment", "pvc", "service", "rollout"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Clustering",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["jivakube"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
