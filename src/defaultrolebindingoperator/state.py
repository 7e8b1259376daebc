"""Operator configuration as module-level attributes."""

import os

controller_names: list[str] = [
    name.strip()
    for name in os.environ.get(
        "DRB_CONTROLLERS", "DefaultRoleBindingController"
    ).split(",")
    if name.strip()
]
"""The controller variants enabled in this operator.

Each variant maintains its own set of default RoleBindings (see
`defaultrolebindingoperator.bindings`).
"""

read_from_cache = os.environ.get("DRB_READ_FROM_CACHE", "true").lower() in (
    "1",
    "true",
    "yes",
)
"""Look up Namespaces and RoleBindings in the operator's in-memory indices
rather than with live reads against the Kubernetes API.
"""

retry_backoff = int(os.environ.get("DRB_RETRY_BACKOFF", "60"))
"""Seconds to wait before retrying a failed namespace reconciliation."""

resync_interval = float(os.environ.get("DRB_RESYNC_INTERVAL", "600"))
"""Seconds between periodic reconciliations of every namespace.

A periodic pass recovers from failures in handlers that kopf does not
retry, such as recreating a deleted RoleBinding.
"""
