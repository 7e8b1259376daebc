"""Helpers for interacting with Kubernetes APIs, and the namespace and
RoleBinding readers and writer used by the reconciler.
"""

__all__ = (
    "AlreadyExistsError",
    "ApiNamespaceReader",
    "ApiRoleBindingReader",
    "ApiRoleBindingWriter",
    "IndexNamespaceReader",
    "IndexRoleBindingReader",
    "NotFoundError",
    "ResourceError",
    "create_k8sclient",
    "get_namespace",
    "get_rolebinding",
)

import json
from collections.abc import Iterable, Mapping
from typing import Any

import kubernetes
from kubernetes.client.exceptions import ApiException


class ResourceError(Exception):
    """Base class for expected outcomes of Kubernetes lookups and writes."""


class NotFoundError(ResourceError):
    """The requested resource does not exist."""


class AlreadyExistsError(ResourceError):
    """The resource being created already exists."""


def create_k8sclient() -> kubernetes.client:
    """Get a Kubernetes client configured with available cluster
    authentication.

    If in-cluster authentication is available, that is used. Otherwise
    this function falls-back to using a kubectl config file, which is
    appropriate for development.
    """
    try:
        kubernetes.config.load_incluster_config()
    except kubernetes.config.ConfigException:
        kubernetes.config.load_kube_config()
    kubernetes.client.configuration.assert_hostname = False
    return kubernetes.client


def get_namespace(
    *,
    name: str,
    k8s_client: Any,
    raw: bool = True,
) -> dict[str, Any] | Any:
    """Get a Namespace resource.

    Parameters
    ----------
    name : `str`
        The name of the Namespace.
    k8s_client
        A Kubernetes client (see `create_k8sclient`).
    raw : `bool`
        If `True`, the raw Kubernetes manifest is returned as a `dict`.
        Otherwise the Python object representation of the resource is returned.

    Returns
    -------
    namespace
        The Kubernetes Namespace resource either as a `dict` or an object.
    """
    preload_content = not raw

    api = k8s_client.CoreV1Api()
    result = api.read_namespace(name=name, _preload_content=preload_content)
    if raw:
        return json.loads(result.data)
    else:
        return result


def get_rolebinding(
    *,
    namespace: str,
    name: str,
    k8s_client: Any,
    raw: bool = True,
) -> dict[str, Any] | Any:
    """Get a RoleBinding resource.

    Parameters
    ----------
    namespace : `str`
        The Kubernetes namespace of the RoleBinding.
    name : `str`
        The name of the RoleBinding.
    k8s_client
        A Kubernetes client (see `create_k8sclient`).
    raw : `bool`
        If `True`, the raw Kubernetes manifest is returned as a `dict`.
        Otherwise the Python object representation of the resource is returned.

    Returns
    -------
    rolebinding
        The Kubernetes RoleBinding resource either as a `dict` or an object.
    """
    preload_content = not raw

    api = k8s_client.RbacAuthorizationV1Api()
    result = api.read_namespaced_role_binding(
        name=name, namespace=namespace, _preload_content=preload_content
    )
    if raw:
        return json.loads(result.data)
    else:
        return result


class ApiNamespaceReader:
    """Look up Namespaces with live reads against the Kubernetes API."""

    def __init__(self, k8s_client: Any) -> None:
        self._k8s_client = k8s_client

    def get(self, name: str) -> dict[str, Any]:
        try:
            return get_namespace(name=name, k8s_client=self._k8s_client)
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(f"Namespace {name} not found") from e
            raise


class ApiRoleBindingReader:
    """Look up RoleBindings with live reads against the Kubernetes API."""

    def __init__(self, k8s_client: Any) -> None:
        self._k8s_client = k8s_client

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return get_rolebinding(
                namespace=namespace, name=name, k8s_client=self._k8s_client
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(
                    f"RoleBinding {name} not found in namespace {namespace}"
                ) from e
            raise


class ApiRoleBindingWriter:
    """Create RoleBindings through the Kubernetes API."""

    def __init__(self, k8s_client: Any) -> None:
        self._api = k8s_client.RbacAuthorizationV1Api()

    def create(self, body: dict[str, Any]) -> Any:
        """Create a RoleBinding in the namespace named by its metadata.

        Raises
        ------
        AlreadyExistsError
            Raised if a RoleBinding with the same name already exists in the
            namespace.
        kubernetes.client.exceptions.ApiException
            Raised for any other API failure.
        """
        namespace = body["metadata"]["namespace"]
        name = body["metadata"]["name"]
        try:
            return self._api.create_namespaced_role_binding(
                namespace=namespace, body=body
            )
        except ApiException as e:
            if e.status == 409:
                raise AlreadyExistsError(
                    f"RoleBinding {name} already exists in namespace "
                    f"{namespace}"
                ) from e
            raise


def _first(store: Iterable[Any] | None) -> Any:
    for value in store or ():
        return value
    return None


class IndexNamespaceReader:
    """Look up Namespaces in a kopf index keyed by namespace name.

    The index is a mapping of keys to collections of values, as provided by
    ``kopf.Index``. Any mapping of the same shape works too.
    """

    def __init__(self, index: Mapping[str, Iterable[dict[str, Any]]]) -> None:
        self._index = index

    def get(self, name: str) -> dict[str, Any]:
        namespace = _first(self._index.get(name))
        if namespace is None:
            raise NotFoundError(f"Namespace {name} not found")
        return namespace


class IndexRoleBindingReader:
    """Look up RoleBindings in a kopf index keyed by ``(namespace, name)``."""

    def __init__(
        self, index: Mapping[tuple[str, str], Iterable[dict[str, Any]]]
    ) -> None:
        self._index = index

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        rolebinding = _first(self._index.get((namespace, name)))
        if rolebinding is None:
            raise NotFoundError(
                f"RoleBinding {name} not found in namespace {namespace}"
            )
        return rolebinding
