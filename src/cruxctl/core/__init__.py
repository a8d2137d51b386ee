"""Core utilities and shared components for cruxctl."""

# Note: Import context lazily to avoid circular imports
# Use: from cruxctl.core.context import CruxContext, pass_context
from cruxctl.core.exceptions import (
    CruxError,
    ConfigError,
    ValidationError,
    NotFoundError,
    DeploymentError,
)
from cruxctl.core.output import OutputFormatter, console

__all__ = [
    "CruxError",
    "ConfigError",
    "ValidationError",
    "NotFoundError",
    "DeploymentError",
    "OutputFormatter",
    "console",
]
