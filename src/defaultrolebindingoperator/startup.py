"""Code intended to run on start-up, before running any handlers."""

__all__ = ("ANNOTATION_PREFIX", "configure", "start_operator")

import logging
from typing import Any

import kopf
import structlog

from defaultrolebindingoperator import state
from defaultrolebindingoperator.bindings import get_managed_rolebinding_names
from defaultrolebindingoperator.version import get_version

ANNOTATION_PREFIX = "defaultrolebindings.openshift.io"
"""Prefix of the annotations kopf uses to track handler progress."""


def start_operator(settings: kopf.OperatorSettings, logger: Any) -> None:
    """Validate the operator's configuration and apply its kopf settings.

    Raises
    ------
    ValueError
        Raised if no controller is enabled, or an enabled controller is not
        a known variant.
    """
    if logger is None:
        logger = structlog.getLogger(__name__)

    if not state.controller_names:
        raise ValueError("No controllers enabled; set DRB_CONTROLLERS")
    rolebinding_names = get_managed_rolebinding_names(state.controller_names)

    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage(
        prefix=ANNOTATION_PREFIX
    )
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage(
        prefix=ANNOTATION_PREFIX,
        key="last-handled-configuration",
    )
    settings.posting.level = logging.WARNING

    logger.info(f"Starting default-rolebinding-operator {get_version()}")
    logger.info(
        f"Enabled controllers: {', '.join(state.controller_names)}; "
        f"maintaining RoleBindings {', '.join(sorted(rolebinding_names))}"
    )
    if not state.read_from_cache:
        logger.info("Reading Namespaces and RoleBindings from the API")


@kopf.on.startup()
def configure(
    *, settings: kopf.OperatorSettings, logger: Any, **kwargs: Any
) -> None:
    """Kopf start-up handler; see `start_operator`."""
    start_operator(settings, logger)
