"""The default RoleBindings that every namespace carries, grouped by the
controller variant responsible for them.
"""

from __future__ import annotations

__all__ = (
    "BUILDER_CONTROLLER",
    "DEFAULT_CONTROLLER",
    "DEPLOYER_CONTROLLER",
    "IMAGE_PULLER_CONTROLLER",
    "RoleBindingSpec",
    "Subject",
    "create_rolebinding",
    "get_managed_rolebinding_names",
    "get_role_binding_specs",
)

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

DEFAULT_CONTROLLER = "DefaultRoleBindingController"
IMAGE_PULLER_CONTROLLER = "ImagePullerRoleBindingController"
BUILDER_CONTROLLER = "BuilderRoleBindingController"
DEPLOYER_CONTROLLER = "DeployerRoleBindingController"

DESCRIPTION_ANNOTATION = "openshift.io/description"

_RBAC_API_GROUP = "rbac.authorization.k8s.io"


@dataclass(frozen=True)
class Subject:
    """A subject of a default RoleBinding.

    The ``name`` may contain a ``{namespace}`` placeholder, which is replaced
    with the namespace the RoleBinding is created in. ServiceAccount subjects
    always live in that namespace.
    """

    kind: str
    name: str

    def render(self, namespace: str) -> dict[str, str]:
        subject = {
            "kind": self.kind,
            "name": self.name.format(namespace=namespace),
        }
        if self.kind == "ServiceAccount":
            subject["namespace"] = namespace
        else:
            subject["apiGroup"] = _RBAC_API_GROUP
        return subject


@dataclass(frozen=True)
class RoleBindingSpec:
    """A RoleBinding that must exist in every managed namespace."""

    name: str
    role: str
    """Name of the ClusterRole granted by the binding."""

    subjects: tuple[Subject, ...]
    description: str = ""


IMAGE_PULLERS = RoleBindingSpec(
    name="system:image-pullers",
    role="system:image-puller",
    subjects=(Subject(kind="Group", name="system:serviceaccounts:{namespace}"),),
    description=(
        "Allows all pods in this namespace to pull images from this "
        "namespace.  It is auto-managed by a controller; remove subjects to "
        "disable."
    ),
)

IMAGE_BUILDERS = RoleBindingSpec(
    name="system:image-builders",
    role="system:image-builder",
    subjects=(Subject(kind="ServiceAccount", name="builder"),),
    description=(
        "Allows builds in this namespace to push images to this namespace.  "
        "It is auto-managed by a controller; remove subjects to disable."
    ),
)

DEPLOYERS = RoleBindingSpec(
    name="system:deployers",
    role="system:deployer",
    subjects=(Subject(kind="ServiceAccount", name="deployer"),),
    description=(
        "Allows deploymentconfigs in this namespace to rollout pods in this "
        "namespace.  It is auto-managed by a controller; remove subjects to "
        "disable."
    ),
)

# Order matters: RoleBindings are created in this order.
_ROLE_BINDING_SPECS: dict[str, tuple[RoleBindingSpec, ...]] = {
    DEFAULT_CONTROLLER: (IMAGE_PULLERS, IMAGE_BUILDERS, DEPLOYERS),
    IMAGE_PULLER_CONTROLLER: (IMAGE_PULLERS,),
    BUILDER_CONTROLLER: (IMAGE_BUILDERS,),
    DEPLOYER_CONTROLLER: (DEPLOYERS,),
}


def get_role_binding_specs(controller: str) -> tuple[RoleBindingSpec, ...]:
    """Get the ordered RoleBinding specs owned by a controller variant.

    Parameters
    ----------
    controller : `str`
        The name of the controller variant, such as
        ``DefaultRoleBindingController``.

    Returns
    -------
    specs : `tuple` of `RoleBindingSpec`
        The specs, in the order their RoleBindings are created.

    Raises
    ------
    ValueError
        Raised if ``controller`` is not a known variant.
    """
    try:
        return _ROLE_BINDING_SPECS[controller]
    except KeyError:
        known = ", ".join(sorted(_ROLE_BINDING_SPECS))
        raise ValueError(
            f"Unknown controller {controller!r}; expected one of {known}"
        ) from None


def get_managed_rolebinding_names(controllers: Iterable[str]) -> set[str]:
    """Get the names of all RoleBindings owned by the given controllers."""
    return {
        spec.name
        for controller in controllers
        for spec in get_role_binding_specs(controller)
    }


def create_rolebinding(spec: RoleBindingSpec, namespace: str) -> dict[str, Any]:
    """Create the RoleBinding resource body for a default RoleBinding.

    Parameters
    ----------
    spec : `RoleBindingSpec`
        The desired RoleBinding.
    namespace : `str`
        The Kubernetes namespace the RoleBinding is created in.

    Returns
    -------
    rolebinding : `dict`
        The RoleBinding manifest.
    """
    metadata: dict[str, Any] = {"name": spec.name, "namespace": namespace}
    if spec.description:
        metadata["annotations"] = {DESCRIPTION_ANNOTATION: spec.description}

    return {
        "apiVersion": f"{_RBAC_API_GROUP}/v1",
        "kind": "RoleBinding",
        "metadata": metadata,
        "roleRef": {
            "apiGroup": _RBAC_API_GROUP,
            "kind": "ClusterRole",
            "name": spec.role,
        },
        "subjects": [subject.render(namespace) for subject in spec.subjects],
    }
