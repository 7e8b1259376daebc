"""Tests for the defaultrolebindingoperator.k8s module."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
from kubernetes.client.exceptions import ApiException

from defaultrolebindingoperator.k8s import (
    AlreadyExistsError,
    ApiNamespaceReader,
    ApiRoleBindingReader,
    ApiRoleBindingWriter,
    IndexNamespaceReader,
    IndexRoleBindingReader,
    NotFoundError,
)


@pytest.fixture
def k8s_client() -> MagicMock:
    return MagicMock()


def test_api_namespace_reader(k8s_client: MagicMock) -> None:
    api = k8s_client.CoreV1Api.return_value
    api.read_namespace.return_value.data = json.dumps(
        {"metadata": {"name": "foo"}, "status": {"phase": "Active"}}
    )

    namespace = ApiNamespaceReader(k8s_client).get("foo")

    assert namespace["metadata"]["name"] == "foo"
    api.read_namespace.assert_called_once_with(
        name="foo", _preload_content=False
    )


def test_api_namespace_reader_not_found(k8s_client: MagicMock) -> None:
    api = k8s_client.CoreV1Api.return_value
    api.read_namespace.side_effect = ApiException(status=404)

    with pytest.raises(NotFoundError):
        ApiNamespaceReader(k8s_client).get("foo")


def test_api_namespace_reader_error(k8s_client: MagicMock) -> None:
    api = k8s_client.CoreV1Api.return_value
    api.read_namespace.side_effect = ApiException(status=403)

    with pytest.raises(ApiException) as excinfo:
        ApiNamespaceReader(k8s_client).get("foo")
    assert excinfo.value.status == 403


def test_api_rolebinding_reader(k8s_client: MagicMock) -> None:
    api = k8s_client.RbacAuthorizationV1Api.return_value
    api.read_namespaced_role_binding.return_value.data = json.dumps(
        {"metadata": {"namespace": "foo", "name": "system:deployers"}}
    )

    rolebinding = ApiRoleBindingReader(k8s_client).get(
        "foo", "system:deployers"
    )

    assert rolebinding["metadata"]["name"] == "system:deployers"
    api.read_namespaced_role_binding.assert_called_once_with(
        name="system:deployers", namespace="foo", _preload_content=False
    )


def test_api_rolebinding_reader_not_found(k8s_client: MagicMock) -> None:
    api = k8s_client.RbacAuthorizationV1Api.return_value
    api.read_namespaced_role_binding.side_effect = ApiException(status=404)

    with pytest.raises(NotFoundError):
        ApiRoleBindingReader(k8s_client).get("foo", "system:deployers")


def test_api_rolebinding_writer(k8s_client: MagicMock) -> None:
    api = k8s_client.RbacAuthorizationV1Api.return_value
    body = {"metadata": {"namespace": "foo", "name": "system:deployers"}}

    ApiRoleBindingWriter(k8s_client).create(body)

    api.create_namespaced_role_binding.assert_called_once_with(
        namespace="foo", body=body
    )


def test_api_rolebinding_writer_conflict(k8s_client: MagicMock) -> None:
    api = k8s_client.RbacAuthorizationV1Api.return_value
    api.create_namespaced_role_binding.side_effect = ApiException(status=409)
    body = {"metadata": {"namespace": "foo", "name": "system:deployers"}}

    with pytest.raises(AlreadyExistsError):
        ApiRoleBindingWriter(k8s_client).create(body)


def test_api_rolebinding_writer_error(k8s_client: MagicMock) -> None:
    api = k8s_client.RbacAuthorizationV1Api.return_value
    api.create_namespaced_role_binding.side_effect = ApiException(status=422)
    body = {"metadata": {"namespace": "foo", "name": "system:deployers"}}

    with pytest.raises(ApiException) as excinfo:
        ApiRoleBindingWriter(k8s_client).create(body)
    assert excinfo.value.status == 422


def test_index_namespace_reader() -> None:
    foo = {"metadata": {"name": "foo"}}
    reader = IndexNamespaceReader({"foo": [foo], "gone": []})

    assert reader.get("foo") is foo
    with pytest.raises(NotFoundError):
        reader.get("bar")
    # kopf keeps emptied stores around until the key is purged.
    with pytest.raises(NotFoundError):
        reader.get("gone")


def test_index_rolebinding_reader() -> None:
    rolebinding = {"metadata": {"namespace": "foo", "name": "system:deployers"}}
    reader = IndexRoleBindingReader(
        {("foo", "system:deployers"): [rolebinding]}
    )

    assert reader.get("foo", "system:deployers") is rolebinding
    with pytest.raises(NotFoundError):
        reader.get("bar", "system:deployers")
    with pytest.raises(NotFoundError):
        reader.get("foo", "system:image-pullers")
