"""Click context object for sharing state across commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from cruxctl.config import CruxConfig, ProfileConfig, get_default_config
from cruxctl.core.output import OutputFormat, OutputFormatter
from cruxctl.core.logging import LogLevel, setup_logging

if TYPE_CHECKING:
    from cruxctl.clients.crux import CruxApiClient
    from cruxctl.deploy.service import DeployService
    from cruxctl.nodes.service import NodeService


class CruxContext:
    """Shared context object for cruxctl commands.

    This object is passed through Click's context mechanism and provides
    access to configuration, services, and utilities.
    """

    def __init__(
        self,
        config: CruxConfig | None = None,
        profile: str | None = None,
        output_format: OutputFormat | None = None,
        verbose: int = 0,
        quiet: bool = False,
        dry_run: bool = False,
        color: bool = True,
    ):
        self._config = config or get_default_config()
        self._profile_name = profile or "default"

        # Output settings (CLI overrides config)
        self._output_format = output_format or self._config.global_settings.output_format
        self._verbose = verbose
        self._quiet = quiet
        self._dry_run = dry_run or self._config.global_settings.dry_run
        self._color = color

        if verbose >= 2:
            log_level = LogLevel.DEBUG
        elif verbose == 1:
            log_level = LogLevel.INFO
        elif quiet:
            log_level = LogLevel.ERROR
        else:
            log_level = self._config.global_settings.verbosity

        setup_logging(log_level, rich_output=color)

        self._output = OutputFormatter(
            format=self._output_format,
            color=color,
            quiet=quiet,
        )

        # Lazily built services
        self._node_service: NodeService | None = None
        self._deploy_service: DeployService | None = None
        self._api_client: CruxApiClient | None = None

    @property
    def config(self) -> CruxConfig:
        return self._config

    @property
    def profile(self) -> ProfileConfig:
        """Get the current profile configuration."""
        return self._config.get_profile(self._profile_name)

    @property
    def profile_name(self) -> str:
        return self._profile_name

    @property
    def output(self) -> OutputFormatter:
        return self._output

    @property
    def output_format(self) -> OutputFormat:
        return self._output_format

    @property
    def dry_run(self) -> bool:
        return self._dry_run

    @property
    def verbose(self) -> int:
        return self._verbose

    @property
    def quiet(self) -> bool:
        return self._quiet

    @property
    def identity(self) -> str:
        return self.profile.get_identity()

    @property
    def is_remote(self) -> bool:
        """True when deployments are served by a remote crux API."""
        return bool(self.profile.api.get_url())

    @property
    def nodes(self) -> "NodeService":
        """Get or create the node service."""
        if self._node_service is None:
            from cruxctl.nodes import NodeRegistry, NodeService

            registry = NodeRegistry(self.profile.state.get_state_dir())
            self._node_service = NodeService(registry, self.profile.agent)
        return self._node_service

    @property
    def local_deployments(self) -> "DeployService":
        """Get or create the local deployment service."""
        if self._deploy_service is None:
            from cruxctl.deploy import DeploymentState, DeployService

            state = DeploymentState(self.profile.state.get_state_dir())
            self._deploy_service = DeployService(state, self.nodes)
        return self._deploy_service

    @property
    def deployments(self) -> "DeployService | CruxApiClient":
        """Deployment backend: the remote API when configured, local state otherwise."""
        if self.is_remote:
            if self._api_client is None:
                from cruxctl.clients.crux import CruxApiClient

                self._api_client = CruxApiClient(self.profile.api)
            return self._api_client
        return self.local_deployments

    def confirm(self, message: str, default: bool = False) -> bool:
        """Ask for user confirmation.

        In dry-run mode, always returns True without prompting.
        """
        if self._dry_run:
            self._output.print(f"[dim]\\[dry-run] Would prompt: {message}[/dim]")
            return True
        if not self._config.global_settings.confirm_destructive:
            return True
        return self._output.confirm(message, default)

    def log_dry_run(self, action: str, details: dict[str, Any] | None = None) -> None:
        """Log a dry-run action."""
        if self._dry_run:
            msg = f"\\[dry-run] {action}"
            if details:
                detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
                msg = f"{msg} ({detail_str})"
            self._output.print(f"[dim]{msg}[/dim]")

    def close(self) -> None:
        if self._api_client is not None:
            self._api_client.close()
            self._api_client = None


# Click decorator for passing context
pass_context = click.make_pass_decorator(CruxContext, ensure=True)
