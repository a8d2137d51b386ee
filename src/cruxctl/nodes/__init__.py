"""Node registration and agent operations."""

from cruxctl.nodes.models import Node
from cruxctl.nodes.registry import NodeRegistry
from cruxctl.nodes.service import NodeService

__all__ = ["Node", "NodeRegistry", "NodeService"]
