# jivakube

Builders for Kubernetes objects that check what they are given. The objects
are plain Python dictionaries in the shape of the Kubernetes API, using its
field names (`metadata`, `spec`, `volumeMounts`, `nodeSelector`, ...).

A builder does not stop at the first mistake. Each `with_*` call that gets an
empty or missing value records a `BuildError` and returns the builder, so the
chain goes on. `build()` then returns a deep copy of the finished object, or
raises `ValidationError`. The error's `errors` attribute lists every problem
that was recorded.

## Modules

- `jivakube.container` has a `Builder` for container specs. It sets the
  name, image, command, arguments, volume mounts, image pull policy,
  privileged security context, resources, ports, environment variables,
  liveness probe and lifecycle. `add_check` / `add_checks` register predicates
  that `build()` runs. A predicate takes the container dict and returns
  `(message, ok)`. When a predicate fails, the error reads
  `predicatefailed: <message>`, and `build()` raises `ValidationError` with the
  message `container validation failed`. There is also `new(*options)`, which
  builds from option functions such as `with_name(...)` and `with_image(...)`.
- `jivakube.podtemplatespec` has `PodTemplateSpec`, whose `template` dict has
  `metadata` and `spec`, and a `Builder` for it. The builder sets the name,
  namespace, annotations, labels, node selectors, service account, priority
  class, affinity and tolerations. It also takes container builders:
  `with_container_builders` appends their output and
  `with_container_builders_new` replaces the containers. A container builder
  that fails is recorded as a problem of the template.
- `jivakube.deployment` has a deployment `Builder` and the `Deploy` wrapper.
  - The builder sets name, namespace, annotations, labels, node selector, owner
    references, selector match labels, replicas, strategy type, and a pod
    template taken from a `podtemplatespec.Builder`. It refuses negative
    replicas.
  - `Deploy` checks rollout progress. There is one method per check:
    `is_progress_deadline_exceeded`, `is_older_replica_active`,
    `is_termination_in_progress`, `is_update_in_progress` and
    `is_not_sync_spec`.
  - `is_rollout()` returns the first failing `PredicateName` and `False`, or
    `(None, True)` when every check passes.
  - `rollout_status()` returns a `RolloutOutput`, and `rollout_status_raw()`
    returns the same output as JSON bytes.
  - `new_for_api_object(obj)` wraps an existing deployment dict.
- `jivakube.rollout` has `RolloutOutput` (`is_rolledout`, `message`),
  `Rollout` and `new_rollout`. `Rollout.raw()` serializes the output as
  compact JSON, for example `{"isRolledout":true,"message":"..."}`. It raises
  `ValueError` when there is no output.
- `jivakube.pvc` has a persistent volume claim `Builder`, `PVC`, `PVCList`,
  `new_for_api_object`, and the predicates `is_bound()`, `is_nil()` and
  `contains_name(name)`.
  - An empty namespace becomes `default`.
  - `with_capacity` parses the value with `parse_quantity` and stores the
    resulting `Quantity` under `spec.resources.requests.storage`.
- `jivakube.service` has a service `Builder`, `Service`, `ServiceList`,
  `new_for_api_object`, and the predicates `is_nil()` and
  `contains_name(name)`. The builder sets name, generate name, namespace,
  annotations, labels, owner references, selectors, ports and cluster IP.
- `jivakube.quantity` has `parse_quantity(text)`, which reads resource
  quantities such as `5G`, `10Ti`, `500m` or `1e3` into a `Quantity`. A
  `Quantity` has an exact `Decimal` `value` and a `QuantityFormat`. It raises
  `ValueError` on malformed input.
- `jivakube.errors` has `BuildError` and its subclass `ValidationError`.

## Example

```python
from jivakube import container, podtemplatespec, deployment
from jivakube.errors import BuildError

ctr = (
    container.Builder()
    .with_name("jiva-ctrl")
    .with_image("openebs/jiva:ci")
    .with_command_new(["launch", "controller"])
)

template = (
    podtemplatespec.Builder()
    .with_labels({"app": "jiva"})
    .with_container_builders(ctr)
)

try:
    deploy = (
        deployment.Builder()
        .with_name("pvc-1-jiva-ctrl")
        .with_namespace("openebs")
        .with_replicas(1)
        .with_pod_template_spec_builder(template)
        .build()
    )
except BuildError as exc:
    print(exc)
```

To check how far a deployment has rolled out:

```python
status = deployment.new_for_api_object(deploy).rollout_status()
print(status.is_rolledout, status.message)
```

## What it does not do

The package only builds and inspects dictionaries. It has no client for a
Kubernetes cluster, so it does not create, fetch, update or delete anything
on an API server, and it does not watch a deployment as it rolls out. It has
no builder for pod volumes either. Add those to a pod template's `spec`
yourself.

## Running the tests

```
pip install -e ".[test]"
pytest
```