"""Main CLI entry point for cruxctl."""

import sys
from typing import Any

import click
from rich.console import Console

from cruxctl import __version__
from cruxctl.config import load_config
from cruxctl.core.context import CruxContext
from cruxctl.core.output import OutputFormat
from cruxctl.core.exceptions import CruxError, ConfigError


CONTEXT_SETTINGS = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 120,
}


class OutputFormatType(click.ParamType):
    """Custom Click parameter type for output format."""

    name = "format"

    def convert(
        self,
        value: Any,
        param: click.Parameter | None,
        ctx: click.Context | None,
    ) -> OutputFormat:
        if isinstance(value, OutputFormat):
            return value
        try:
            return OutputFormat(value.lower())
        except ValueError:
            self.fail(
                f"Invalid format '{value}'. Choose from: table, json, yaml, raw",
                param,
                ctx,
            )


OUTPUT_FORMAT = OutputFormatType()


def print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(f"cruxctl version {__version__}")
    ctx.exit()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-p",
    "--profile",
    metavar="NAME",
    envvar="CRUXCTL_PROFILE",
    help="Configuration profile to use",
)
@click.option(
    "-o",
    "--output",
    "output_format",
    type=OUTPUT_FORMAT,
    metavar="FORMAT",
    help="Output format: table, json, yaml, raw",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for info, -vv for debug)",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress non-essential output",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would happen without making changes",
)
@click.option(
    "--no-color",
    is_flag=True,
    help="Disable colored output",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True),
    metavar="FILE",
    envvar="CRUXCTL_CONFIG",
    help="Path to config file",
)
@click.option(
    "--version",
    is_flag=True,
    callback=print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit",
)
@click.pass_context
def cli(
    ctx: click.Context,
    profile: str | None,
    output_format: OutputFormat | None,
    verbose: int,
    quiet: bool,
    dry_run: bool,
    no_color: bool,
    config_file: str | None,
) -> None:
    """CruxCtl - manage deployments, nodes and containers.

    \b
    Examples:
        cruxctl nodes add --name edge-1 --type docker --address http://10.0.0.5:5000
        cruxctl deployments create --node <id> --prefix shop --product shop --version 1.2.0 --image nginx:1.25
        cruxctl deployments start <id>
        cruxctl containers restart <node-id> shop web

    \b
    Configuration:
        ~/.cruxctl/config.yaml   User configuration
        ./cruxctl.yaml           Project configuration
        CRUXCTL_*                Environment variables
    """
    try:
        config = load_config(config_file, profile)

        ctx.obj = CruxContext(
            config=config,
            profile=profile,
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            dry_run=dry_run,
            color=not no_color,
        )
        ctx.call_on_close(ctx.obj.close)

        if dry_run and not quiet:
            ctx.obj.output.print_warning("Dry-run mode enabled - no changes will be made")

    except ConfigError as e:
        console = Console(stderr=True)
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)


def register_commands() -> None:
    """Register all command groups."""
    from cruxctl.commands.containers import containers
    from cruxctl.commands.deployments import deployments
    from cruxctl.commands.nodes import nodes

    cli.add_command(deployments)
    cli.add_command(nodes)
    cli.add_command(containers)


register_commands()


@cli.command()
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show current configuration."""
    crux_ctx: CruxContext = ctx.obj
    profile = crux_ctx.profile
    config_data = {
        "profile": crux_ctx.profile_name,
        "output_format": crux_ctx.output_format.value,
        "dry_run": crux_ctx.dry_run,
        "verbose": crux_ctx.verbose,
        "identity": profile.get_identity(),
        "state_dir": str(profile.state.get_state_dir()),
        "api": {
            "url": profile.api.get_url(),
            "has_token": bool(profile.api.get_token()),
        },
        "agent": {
            "url": profile.agent.get_url(),
            "has_token": bool(profile.agent.get_token()),
        },
    }
    crux_ctx.output.print_data(config_data, title="Current Configuration")


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except CruxError as e:
        console = Console(stderr=True)
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console = Console(stderr=True)
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
