"""Container commands."""

import click

from cruxctl.core.context import pass_context, CruxContext
from cruxctl.core.exceptions import CruxError
from cruxctl.models import ContainerOperation


@click.group()
@pass_context
def containers(ctx: CruxContext) -> None:
    """Containers - start, stop, restart and inspect containers on a node.

    \b
    Examples:
        cruxctl containers states <node-id> shop
        cruxctl containers restart <node-id> shop web
    """
    pass


def _run_operation(ctx: CruxContext, operation: ContainerOperation, node_id: str, prefix: str, name: str) -> None:
    if ctx.dry_run:
        ctx.log_dry_run(f"{operation.value} container", {"node": node_id, "container": f"{prefix}-{name}"})
        return

    try:
        ctx.nodes.container_command(node_id, prefix, name, operation.value)
        ctx.output.print_success(f"Sent {operation.value} to {prefix}/{name}")
    except CruxError as e:
        ctx.output.print_error(f"Failed to {operation.value} container: {e}")
        raise click.Abort()


@containers.command("start")
@click.argument("node_id")
@click.argument("prefix")
@click.argument("name")
@pass_context
def start(ctx: CruxContext, node_id: str, prefix: str, name: str) -> None:
    """Start a container."""
    _run_operation(ctx, ContainerOperation.START, node_id, prefix, name)


@containers.command("stop")
@click.argument("node_id")
@click.argument("prefix")
@click.argument("name")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def stop(ctx: CruxContext, node_id: str, prefix: str, name: str, yes: bool) -> None:
    """Stop a container."""
    if not ctx.dry_run and not yes and not ctx.confirm(f"Stop {prefix}/{name}?"):
        ctx.output.print_info("Cancelled")
        return
    _run_operation(ctx, ContainerOperation.STOP, node_id, prefix, name)


@containers.command("restart")
@click.argument("node_id")
@click.argument("prefix")
@click.argument("name")
@pass_context
def restart(ctx: CruxContext, node_id: str, prefix: str, name: str) -> None:
    """Restart a container."""
    _run_operation(ctx, ContainerOperation.RESTART, node_id, prefix, name)


@containers.command("states")
@click.argument("node_id")
@click.argument("prefix")
@pass_context
def states(ctx: CruxContext, node_id: str, prefix: str) -> None:
    """Show the state of every container under a prefix."""
    try:
        items = ctx.nodes.container_states(node_id, prefix)
        if not items:
            ctx.output.print_info(f"No containers found for prefix {prefix}")
            return
        ctx.output.print_data(items, headers=["prefix", "name", "state", "status", "image"], title="Containers")
    except CruxError as e:
        ctx.output.print_error(f"Failed to get container states: {e}")
        raise click.Abort()
