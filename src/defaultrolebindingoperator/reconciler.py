"""Reconciliation of the default RoleBindings of a single namespace."""

__all__ = ("RoleBindingController", "sync_namespace")

from typing import Any, Protocol

import structlog

from defaultrolebindingoperator.bindings import (
    create_rolebinding,
    get_role_binding_specs,
)
from defaultrolebindingoperator.k8s import AlreadyExistsError, NotFoundError


class NamespaceReader(Protocol):
    """Looks up a Namespace by name, raising `NotFoundError` if absent."""

    def get(self, name: str) -> dict[str, Any]: ...


class RoleBindingReader(Protocol):
    """Looks up a RoleBinding by namespace and name, raising
    `NotFoundError` if absent.
    """

    def get(self, namespace: str, name: str) -> dict[str, Any]: ...


class RoleBindingWriter(Protocol):
    """Creates a RoleBinding, raising `AlreadyExistsError` if it exists."""

    def create(self, body: dict[str, Any]) -> Any: ...


def sync_namespace(
    *,
    controller: str,
    namespace: str,
    namespace_reader: NamespaceReader,
    rolebinding_reader: RoleBindingReader,
    rolebinding_writer: RoleBindingWriter,
    logger: Any | None = None,
) -> list[str]:
    """Create whichever of a controller variant's RoleBindings are missing
    from a namespace.

    RoleBindings that already exist are left untouched, whatever their
    content. Creations happen in the order the controller variant lists its
    RoleBindings. The first unexpected error aborts the pass and is raised
    unchanged; RoleBindings created before it are kept.

    Parameters
    ----------
    controller : `str`
        The controller variant, which selects the RoleBindings that must
        exist in the namespace.
    namespace : `str`
        The name of the Kubernetes namespace to reconcile.
    namespace_reader
        Looks up namespaces by name, raising `NotFoundError` when absent.
    rolebinding_reader
        Looks up RoleBindings by namespace and name, raising `NotFoundError`
        when absent.
    rolebinding_writer
        Creates RoleBindings, raising `AlreadyExistsError` when the
        RoleBinding exists already.
    logger : `logging.Logger`, optional
        Logger to use for logging messages. If not provided, a default logger
        will be used.

    Returns
    -------
    created : `list` of `str`
        Names of the RoleBindings created by this pass.
    """
    if logger is None:
        logger = structlog.getLogger(__name__)

    specs = get_role_binding_specs(controller)

    try:
        ns = namespace_reader.get(namespace)
    except NotFoundError:
        logger.debug(f"Namespace {namespace} no longer exists, skipping")
        return []

    if (ns.get("status") or {}).get("phase") == "Terminating":
        logger.debug(f"Namespace {namespace} is terminating, skipping")
        return []

    created = []
    for spec in specs:
        try:
            rolebinding_reader.get(namespace, spec.name)
        except NotFoundError:
            pass
        else:
            continue

        try:
            rolebinding_writer.create(create_rolebinding(spec, namespace))
        except AlreadyExistsError:
            logger.debug(
                f"RoleBinding {spec.name} already exists in {namespace}"
            )
            continue
        logger.info(f"Created RoleBinding {spec.name} in {namespace}")
        created.append(spec.name)

    return created


class RoleBindingController:
    """A controller variant bound to its readers and writer.

    Parameters
    ----------
    name : `str`
        The controller variant, which selects the RoleBindings to maintain
        (see `defaultrolebindingoperator.bindings.get_role_binding_specs`).
    namespace_reader
        Looks up namespaces by name.
    rolebinding_reader
        Looks up RoleBindings by namespace and name.
    rolebinding_writer
        Creates RoleBindings.
    """

    def __init__(
        self,
        name: str,
        *,
        namespace_reader: NamespaceReader,
        rolebinding_reader: RoleBindingReader,
        rolebinding_writer: RoleBindingWriter,
    ) -> None:
        self.name = name
        self.specs = get_role_binding_specs(name)
        self._namespace_reader = namespace_reader
        self._rolebinding_reader = rolebinding_reader
        self._rolebinding_writer = rolebinding_writer

    def __repr__(self) -> str:
        return f"RoleBindingController({self.name!r})"

    @property
    def rolebinding_names(self) -> list[str]:
        return [spec.name for spec in self.specs]

    def reconcile(self, namespace: str, logger: Any | None = None) -> list[str]:
        """Ensure this controller's RoleBindings exist in a namespace.

        Safe to call any number of times for the same namespace; see
        `sync_namespace`.
        """
        return sync_namespace(
            controller=self.name,
            namespace=namespace,
            namespace_reader=self._namespace_reader,
            rolebinding_reader=self._rolebinding_reader,
            rolebinding_writer=self._rolebinding_writer,
            logger=logger,
        )
