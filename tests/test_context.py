"""Tests for the shared CLI context."""

from cruxctl.clients.crux import CruxApiClient
from cruxctl.core.context import CruxContext
from cruxctl.core.output import OutputFormat
from cruxctl.deploy import DeployService


class TestCruxContext:
    """Tests for CruxContext."""

    def test_local_backend(self, mock_context):
        assert mock_context.is_remote is False
        assert isinstance(mock_context.deployments, DeployService)
        assert mock_context.deployments is mock_context.deployments
        assert mock_context.identity == "tester"

    def test_remote_backend(self, mock_config):
        ctx = CruxContext(config=mock_config, profile="remote", output_format=OutputFormat.JSON, color=False)

        assert ctx.is_remote is True
        client = ctx.deployments
        assert isinstance(client, CruxApiClient)

        ctx.close()
        assert ctx.deployments is not client

    def test_confirm_in_dry_run(self, mock_config):
        ctx = CruxContext(config=mock_config, dry_run=True, color=False)
        assert ctx.confirm("Delete everything?") is True

    def test_confirm_disabled(self, mock_config):
        mock_config.global_settings.confirm_destructive = False
        ctx = CruxContext(config=mock_config, color=False)
        assert ctx.confirm("Delete everything?") is True

    def test_output_format_from_config(self, mock_config):
        mock_config.global_settings.output_format = OutputFormat.YAML
        ctx = CruxContext(config=mock_config, color=False)
        assert ctx.output_format == OutputFormat.YAML
