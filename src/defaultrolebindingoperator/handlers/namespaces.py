"""Kopf handlers that reconcile the default RoleBindings of namespaces as
they are created, updated, found when the operator starts, and
periodically thereafter.
"""

__all__ = (
    "create_controllers",
    "namespace_index",
    "reconcile_namespace",
    "resync_namespace",
)

from collections.abc import Iterable
from typing import Any

import kopf

from defaultrolebindingoperator import state
from defaultrolebindingoperator.k8s import (
    ApiNamespaceReader,
    ApiRoleBindingReader,
    ApiRoleBindingWriter,
    IndexNamespaceReader,
    IndexRoleBindingReader,
    create_k8sclient,
)
from defaultrolebindingoperator.reconciler import RoleBindingController


@kopf.index("", "v1", "namespaces")  # type: ignore[arg-type]
def namespace_index(
    *, name: str, status: dict[str, Any], **kwargs: Any
) -> dict[str, dict[str, Any]]:
    """Index Namespaces by name, keeping only their name and phase."""
    return {
        name: {
            "metadata": {"name": name},
            "status": {"phase": status.get("phase")},
        }
    }


def create_controllers(
    *,
    k8s_client: Any,
    namespace_index: Any,
    rolebinding_index: Any,
    controller_names: Iterable[str] | None = None,
) -> list[RoleBindingController]:
    """Create a `RoleBindingController` for each enabled controller variant.

    Parameters
    ----------
    k8s_client
        A Kubernetes client (see
        `defaultrolebindingoperator.k8s.create_k8sclient`).
    namespace_index
        The kopf index of Namespaces (see `namespace_index`).
    rolebinding_index
        The kopf index of managed RoleBindings (see
        `defaultrolebindingoperator.handlers.rolebindings.rolebinding_index`).
    controller_names : iterable of `str`, optional
        The controller variants to create. Defaults to
        ``state.controller_names``.
    """
    if controller_names is None:
        controller_names = state.controller_names

    if state.read_from_cache:
        namespace_reader: Any = IndexNamespaceReader(namespace_index)
        rolebinding_reader: Any = IndexRoleBindingReader(rolebinding_index)
    else:
        namespace_reader = ApiNamespaceReader(k8s_client)
        rolebinding_reader = ApiRoleBindingReader(k8s_client)
    rolebinding_writer = ApiRoleBindingWriter(k8s_client)

    return [
        RoleBindingController(
            name,
            namespace_reader=namespace_reader,
            rolebinding_reader=rolebinding_reader,
            rolebinding_writer=rolebinding_writer,
        )
        for name in controller_names
    ]


@kopf.on.resume(  # type: ignore[arg-type]
    "", "v1", "namespaces", backoff=state.retry_backoff
)
@kopf.on.create(  # type: ignore[arg-type]
    "", "v1", "namespaces", backoff=state.retry_backoff
)
@kopf.on.update(  # type: ignore[arg-type]
    "", "v1", "namespaces", backoff=state.retry_backoff
)
def reconcile_namespace(
    *,
    name: str,
    logger: Any,
    namespace_index: kopf.Index,
    rolebinding_index: kopf.Index,
    **kwargs: Any,
) -> None:
    """Ensure the default RoleBindings exist in a namespace.

    Parameters
    ----------
    name : `str`
        The name of the Namespace.
    logger : `Any`
        The kopf logger.
    namespace_index : `kopf.Index`
        The index of Namespaces.
    rolebinding_index : `kopf.Index`
        The index of managed RoleBindings.
    **kwargs : `Any`
        Additional keyword arguments provided by kopf.
    """
    controllers = create_controllers(
        k8s_client=create_k8sclient(),
        namespace_index=namespace_index,
        rolebinding_index=rolebinding_index,
    )
    # kopf retries the namespace after the backoff if this raises.
    for controller in controllers:
        controller.reconcile(name, logger=logger)


@kopf.timer(  # type: ignore[arg-type]
    "",
    "v1",
    "namespaces",
    interval=state.resync_interval,
    initial_delay=state.resync_interval,
)
def resync_namespace(
    *,
    name: str,
    logger: Any,
    namespace_index: kopf.Index,
    rolebinding_index: kopf.Index,
    **kwargs: Any,
) -> None:
    """Periodically ensure the default RoleBindings exist in a namespace.

    This retries namespaces whose RoleBindings could not be recreated by
    `defaultrolebindingoperator.handlers.rolebindings.handle_rolebinding_event`,
    which kopf does not retry.
    """
    reconcile_namespace(
        name=name,
        logger=logger,
        namespace_index=namespace_index,
        rolebinding_index=rolebinding_index,
    )
