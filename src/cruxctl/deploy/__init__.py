"""Deployment management module."""

from cruxctl.deploy.models import (
    Audit,
    Deployment,
    DeploymentEvent,
    Image,
    Instance,
    NodeRef,
)
from cruxctl.deploy.service import DeployService
from cruxctl.deploy.state import DeploymentState

__all__ = [
    "Audit",
    "Deployment",
    "DeploymentEvent",
    "DeploymentState",
    "DeployService",
    "Image",
    "Instance",
    "NodeRef",
]
