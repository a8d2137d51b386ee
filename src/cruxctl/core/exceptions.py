"""Custom exceptions for cruxctl."""

from typing import Any


class CruxError(Exception):
    """Base exception for all cruxctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(CruxError):
    """Configuration-related errors."""

    pass


class ValidationError(CruxError):
    """Input validation errors."""

    pass


class NotFoundError(CruxError):
    """Requested entity does not exist."""

    def __init__(
        self,
        message: str,
        entity: str | None = None,
        entity_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.entity = entity
        self.entity_id = entity_id


class DeploymentError(CruxError):
    """Deployment lifecycle errors."""

    def __init__(
        self,
        message: str,
        deployment_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.deployment_id = deployment_id


class ApiError(CruxError):
    """Crux REST API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class AgentError(CruxError):
    """Node agent errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class AuthenticationError(CruxError):
    """Authentication/authorization errors."""

    pass
