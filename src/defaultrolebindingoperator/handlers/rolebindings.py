"""Kopf handlers that watch the default RoleBindings and recreate them when
they are deleted.
"""

__all__ = (
    "handle_rolebinding_event",
    "is_managed_rolebinding",
    "rolebinding_index",
)

from typing import Any

import kopf

from defaultrolebindingoperator import state
from defaultrolebindingoperator.bindings import get_managed_rolebinding_names
from defaultrolebindingoperator.handlers.namespaces import create_controllers
from defaultrolebindingoperator.k8s import create_k8sclient


def is_managed_rolebinding(*, name: str, **kwargs: Any) -> bool:
    """Filter for RoleBindings maintained by the enabled controllers."""
    return name in get_managed_rolebinding_names(state.controller_names)


@kopf.index(  # type: ignore[arg-type]
    "rbac.authorization.k8s.io",
    "v1",
    "rolebindings",
    when=is_managed_rolebinding,
)
def rolebinding_index(
    *, namespace: str, name: str, body: kopf.Body, **kwargs: Any
) -> dict[tuple[str, str], dict[str, Any]]:
    """Index the managed RoleBindings by namespace and name."""
    return {
        (namespace, name): {
            "metadata": {"namespace": namespace, "name": name},
            "roleRef": dict(body.get("roleRef") or {}),
        }
    }


@kopf.on.event(  # type: ignore[arg-type]
    "rbac.authorization.k8s.io",
    "v1",
    "rolebindings",
    when=is_managed_rolebinding,
)
def handle_rolebinding_event(
    *,
    event: dict[str, Any],
    namespace: str,
    name: str,
    logger: Any,
    namespace_index: kopf.Index,
    rolebinding_index: kopf.Index,
    **kwargs: Any,
) -> None:
    """Recreate a default RoleBinding after it is deleted.

    Only the controllers that own the deleted RoleBinding reconcile the
    namespace.

    Parameters
    ----------
    event : `dict`
        The watch event; only ``DELETED`` events are acted on.
    namespace : `str`
        The namespace of the RoleBinding.
    name : `str`
        The name of the RoleBinding.
    logger : `Any`
        The kopf logger.
    namespace_index : `kopf.Index`
        The index of Namespaces.
    rolebinding_index : `kopf.Index`
        The index of managed RoleBindings.
    **kwargs : `Any`
        Additional keyword arguments provided by kopf.
    """
    if event["type"] != "DELETED":
        return

    controllers = [
        controller
        for controller in create_controllers(
            k8s_client=create_k8sclient(),
            namespace_index=namespace_index,
            rolebinding_index=rolebinding_index,
        )
        if name in controller.rolebinding_names
    ]
    if not controllers:
        return

    logger.info(f"RoleBinding {name} deleted from {namespace}")
    for controller in controllers:
        controller.reconcile(namespace, logger=logger)
