"""Shared fixtures: an in-memory cluster standing in for the operator's
indices and the Kubernetes API.
"""

from __future__ import annotations

from typing import Any

import pytest
import yaml

from defaultrolebindingoperator.k8s import (
    AlreadyExistsError,
    IndexNamespaceReader,
    IndexRoleBindingReader,
)


class FakeCluster:
    """Namespaces and RoleBindings held in mappings shaped like kopf
    indices, with a RoleBinding writer that records each creation.
    """

    def __init__(self) -> None:
        self.namespaces: dict[str, list[dict[str, Any]]] = {}
        self.rolebindings: dict[tuple[str, str], list[dict[str, Any]]] = {}
        self.created: list[dict[str, Any]] = []
        self.create_errors: dict[str, Exception] = {}

    def load(self, manifests: str) -> None:
        for obj in yaml.safe_load_all(manifests):
            if obj is None:
                continue
            meta = obj["metadata"]
            if obj["kind"] == "Namespace":
                self.namespaces[meta["name"]] = [obj]
            else:
                key = (meta["namespace"], meta["name"])
                self.rolebindings[key] = [obj]

    @property
    def namespace_reader(self) -> IndexNamespaceReader:
        return IndexNamespaceReader(self.namespaces)

    @property
    def rolebinding_reader(self) -> IndexRoleBindingReader:
        return IndexRoleBindingReader(self.rolebindings)

    @property
    def created_names(self) -> list[str]:
        return [body["metadata"]["name"] for body in self.created]

    def create(self, body: dict[str, Any]) -> dict[str, Any]:
        meta = body["metadata"]
        if meta["name"] in self.create_errors:
            raise self.create_errors[meta["name"]]
        key = (meta["namespace"], meta["name"])
        if key in self.rolebindings:
            raise AlreadyExistsError(meta["name"])
        self.rolebindings[key] = [body]
        self.created.append(body)
        return body


@pytest.fixture
def cluster() -> FakeCluster:
    return FakeCluster()
