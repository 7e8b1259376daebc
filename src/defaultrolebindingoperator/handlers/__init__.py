"""Kopf handlers for the default-rolebinding-operator."""

__all__ = (
    "configure",
    "handle_rolebinding_event",
    "namespace_index",
    "reconcile_namespace",
    "resync_namespace",
    "rolebinding_index",
)

from defaultrolebindingoperator.handlers.namespaces import (
    namespace_index,
    reconcile_namespace,
    resync_namespace,
)
from defaultrolebindingoperator.handlers.rolebindings import (
    handle_rolebinding_event,
    rolebinding_index,
)
from defaultrolebindingoperator.startup import configure
