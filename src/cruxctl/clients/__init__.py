"""HTTP clients for the crux API and node agents."""

from cruxctl.clients.agent import AgentClient
from cruxctl.clients.crux import CruxApiClient

__all__ = ["AgentClient", "CruxApiClient"]
