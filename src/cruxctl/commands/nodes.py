"""Node commands."""

import click

from cruxctl.core.context import pass_context, CruxContext
from cruxctl.core.exceptions import CruxError
from cruxctl.models import NODE_TYPE_VALUES


@click.group()
@pass_context
def nodes(ctx: CruxContext) -> None:
    """Nodes - register agents and check their connectivity.

    \b
    Examples:
        cruxctl nodes add --name edge-1 --type docker --address http://10.0.0.5:5000
        cruxctl nodes refresh <node-id>
        cruxctl nodes list
    """
    pass


@nodes.command("list")
@pass_context
def list_nodes(ctx: CruxContext) -> None:
    """List registered nodes."""
    try:
        items = ctx.nodes.list_nodes()
        if not items:
            ctx.output.print_info("No nodes registered")
            return
        ctx.output.print_data(
            items,
            headers=["id", "name", "type", "status", "address", "connectedAt"],
            title="Nodes",
        )
    except CruxError as e:
        ctx.output.print_error(f"Failed to list nodes: {e}")
        raise click.Abort()


@nodes.command("get")
@click.argument("node_id")
@pass_context
def get(ctx: CruxContext, node_id: str) -> None:
    """Show a node."""
    try:
        ctx.output.print_data(ctx.nodes.get_node(node_id).to_dto(), title="Node")
    except CruxError as e:
        ctx.output.print_error(f"Failed to get node: {e}")
        raise click.Abort()


@nodes.command("add")
@click.option("--name", required=True, help="Node name")
@click.option("--type", "node_type", type=click.Choice(NODE_TYPE_VALUES), default=NODE_TYPE_VALUES[0], help="Node type")
@click.option("--address", default=None, help="Agent URL, e.g. http://10.0.0.5:5000")
@pass_context
def add(ctx: CruxContext, name: str, node_type: str, address: str | None) -> None:
    """Register a node."""
    if ctx.dry_run:
        ctx.log_dry_run("register node", {"name": name, "type": node_type})
        return

    try:
        node = ctx.nodes.create_node(name, node_type, address)
        ctx.output.print_success(f"Node {node.name} registered with id {node.id}")
    except CruxError as e:
        ctx.output.print_error(f"Failed to register node: {e}")
        raise click.Abort()


@nodes.command("remove")
@click.argument("node_id")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def remove(ctx: CruxContext, node_id: str, yes: bool) -> None:
    """Remove a node from the registry."""
    if ctx.dry_run:
        ctx.log_dry_run("remove node", {"id": node_id})
        return

    if not yes and not ctx.confirm(f"Remove node {node_id}?"):
        ctx.output.print_info("Cancelled")
        return

    try:
        ctx.nodes.delete_node(node_id)
        ctx.output.print_success(f"Node {node_id} removed")
    except CruxError as e:
        ctx.output.print_error(f"Failed to remove node: {e}")
        raise click.Abort()


@nodes.command("refresh")
@click.argument("node_id")
@pass_context
def refresh(ctx: CruxContext, node_id: str) -> None:
    """Poll the node's agent and update its status."""
    try:
        node = ctx.nodes.refresh_node(node_id)
        if node.is_running:
            ctx.output.print_success(f"Node {node.name} is {node.status.value}")
        else:
            ctx.output.print_warning(f"Node {node.name} is {node.status.value}")
    except CruxError as e:
        ctx.output.print_error(f"Failed to refresh node: {e}")
        raise click.Abort()
