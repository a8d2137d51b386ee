"""Translation between protocol enumerations and display literals."""

from cruxctl.mappers.node import (
    connection_status_to_display,
    container_state_to_display,
    node_type_to_display,
    node_type_to_protocol,
    operation_to_protocol,
)

__all__ = [
    "connection_status_to_display",
    "container_state_to_display",
    "node_type_to_display",
    "node_type_to_protocol",
    "operation_to_protocol",
]
