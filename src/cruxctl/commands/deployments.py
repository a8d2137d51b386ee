"""Deployment commands."""

import click

from cruxctl.core.context import pass_context, CruxContext
from cruxctl.core.exceptions import CruxError
from cruxctl.core.utils import parse_image, parse_key_value_pairs


@click.group()
@pass_context
def deployments(ctx: CruxContext) -> None:
    """Deployments - create, inspect, start, copy, delete.

    Runs against the crux API when api.url is configured, local state otherwise.

    \b
    Examples:
        cruxctl deployments list
        cruxctl deployments create --node <node-id> --prefix shop --product shop --version 1.2.0 --image nginx:1.25
        cruxctl deployments start <deployment-id>
        cruxctl deployments copy <deployment-id> --force
    """
    pass


@deployments.command("list")
@pass_context
def list_deployments(ctx: CruxContext) -> None:
    """List deployments, newest first."""
    try:
        items = ctx.deployments.get_deployments()

        if not items:
            ctx.output.print_info("No deployments found")
            return

        rows = [
            {
                "id": d["id"],
                "prefix": d["prefix"],
                "status": d["status"],
                "product": (d.get("product") or {}).get("name", ""),
                "version": (d.get("version") or {}).get("name", ""),
                "node": (d.get("node") or {}).get("name", ""),
                "note": d.get("note"),
            }
            for d in items
        ]
        ctx.output.print_data(
            rows,
            headers=["id", "prefix", "status", "product", "version", "node", "note"],
            title="Deployments",
        )

    except CruxError as e:
        ctx.output.print_error(f"Failed to list deployments: {e}")
        raise click.Abort()


@deployments.command("get")
@click.argument("deployment_id")
@pass_context
def get(ctx: CruxContext, deployment_id: str) -> None:
    """Show details of a deployment, including its instances."""
    try:
        details = ctx.deployments.get_deployment_details(deployment_id)

        if ctx.output_format.value != "table":
            ctx.output.print_data(details)
            return

        node = details.get("node") or {}
        ctx.output.print_header(f"Deployment: {details['id']}")
        ctx.output.print(f"Prefix: {details['prefix']}")
        ctx.output.print(f"Status: {details['status']}")
        ctx.output.print(f"Product: {(details.get('product') or {}).get('name', '')}")
        ctx.output.print(f"Version: {(details.get('version') or {}).get('name', '')}")
        ctx.output.print(f"Node: {node.get('name', '')} ({node.get('type', '')})")
        if details.get("note"):
            ctx.output.print(f"Note: {details['note']}")

        environment = details.get("environment") or []
        if environment:
            ctx.output.print("\nEnvironment:")
            for item in environment:
                ctx.output.print(f"  {item['key']}={item['value']}")

        instances = details.get("instances") or []
        if instances:
            rows = [
                {
                    "id": i["id"],
                    "image": f"{i['image']['name']}:{i['image']['tag']}",
                    "state": i.get("state"),
                    "updated": i.get("updatedAt"),
                }
                for i in instances
            ]
            ctx.output.print_data(rows, headers=["id", "image", "state", "updated"], title="Instances")

    except CruxError as e:
        ctx.output.print_error(f"Failed to get deployment: {e}")
        raise click.Abort()


@deployments.command("events")
@click.argument("deployment_id")
@pass_context
def events(ctx: CruxContext, deployment_id: str) -> None:
    """Show the event log of a deployment."""
    try:
        items = ctx.deployments.get_deployment_events(deployment_id)

        if not items:
            ctx.output.print_info("No events recorded")
            return

        rows = []
        for event in items:
            if event["type"] == "log":
                value = " | ".join(event.get("log") or [])
            elif event["type"] == "deployment-status":
                value = event.get("deploymentStatus")
            else:
                state = event.get("containerState") or {}
                value = f"{state.get('instanceId')}: {state.get('state')}"
            rows.append({"time": event["createdAt"], "type": event["type"], "value": value})

        ctx.output.print_data(rows, headers=["time", "type", "value"], title="Events")

    except CruxError as e:
        ctx.output.print_error(f"Failed to get events: {e}")
        raise click.Abort()


@deployments.command("instance")
@click.argument("deployment_id")
@click.argument("instance_id")
@pass_context
def instance(ctx: CruxContext, deployment_id: str, instance_id: str) -> None:
    """Show a deployed container."""
    try:
        ctx.output.print_data(
            ctx.deployments.get_instance(deployment_id, instance_id),
            title="Instance",
        )
    except CruxError as e:
        ctx.output.print_error(f"Failed to get instance: {e}")
        raise click.Abort()


@deployments.command("secrets")
@click.argument("deployment_id")
@click.argument("instance_id")
@pass_context
def secrets(ctx: CruxContext, deployment_id: str, instance_id: str) -> None:
    """Show the secret keys of a deployed container."""
    try:
        ctx.output.print_data(
            ctx.deployments.get_instance_secrets(deployment_id, instance_id),
            title="Secrets",
        )
    except CruxError as e:
        ctx.output.print_error(f"Failed to get secrets: {e}")
        raise click.Abort()


@deployments.command("create")
@click.option("--node", "node_id", required=True, help="Target node ID")
@click.option("--prefix", required=True, help="Container name prefix")
@click.option("--product", required=True, help="Product name")
@click.option("--version", "version", required=True, help="Version name")
@click.option("--note", default=None, help="Free-form note")
@click.option("--image", "images", multiple=True, help="Image as NAME[:TAG] (repeatable)")
@click.option("-e", "--env", "env", multiple=True, help="Environment KEY=VALUE (repeatable)")
@pass_context
def create(
    ctx: CruxContext,
    node_id: str,
    prefix: str,
    product: str,
    version: str,
    note: str | None,
    images: tuple[str, ...],
    env: tuple[str, ...],
) -> None:
    """Create a deployment in preparing state.

    \b
    Examples:
        cruxctl deployments create --node <id> --prefix shop --product shop --version 1.2.0 \\
            --image nginx:1.25 --image redis -e LOG_LEVEL=debug
    """
    request = {
        "nodeId": node_id,
        "prefix": prefix,
        "product": product,
        "version": version,
        "note": note,
        "environment": parse_key_value_pairs(env),
        "images": [dict(zip(("name", "tag"), parse_image(image))) for image in images],
    }

    if ctx.dry_run:
        ctx.log_dry_run("create deployment", {"prefix": prefix, "node": node_id, "images": len(images)})
        return

    try:
        created = ctx.deployments.create_deployment(request, ctx.identity)
        ctx.output.print_success(f"Deployment created: {created['url']}")
        ctx.output.print_data(created["body"], title="Deployment")
    except CruxError as e:
        ctx.output.print_error(f"Failed to create deployment: {e}")
        raise click.Abort()


@deployments.command("patch")
@click.argument("deployment_id")
@click.option("--note", default=None, help="New note")
@click.option("--prefix", default=None, help="New prefix")
@click.option("-e", "--env", "env", multiple=True, help="Replace environment with KEY=VALUE pairs")
@pass_context
def patch(
    ctx: CruxContext,
    deployment_id: str,
    note: str | None,
    prefix: str | None,
    env: tuple[str, ...],
) -> None:
    """Update a preparing or failed deployment."""
    request: dict[str, object] = {}
    if note is not None:
        request["note"] = note
    if prefix is not None:
        request["prefix"] = prefix
    if env:
        request["environment"] = parse_key_value_pairs(env)

    if not request:
        ctx.output.print_warning("Nothing to update")
        return

    if ctx.dry_run:
        ctx.log_dry_run("patch deployment", {"id": deployment_id, **request})
        return

    try:
        ctx.deployments.patch_deployment(deployment_id, request, ctx.identity)
        ctx.output.print_success(f"Deployment {deployment_id} updated")
    except CruxError as e:
        ctx.output.print_error(f"Failed to update deployment: {e}")
        raise click.Abort()


@deployments.command("patch-instance")
@click.argument("deployment_id")
@click.argument("instance_id")
@click.option("--set", "set_values", multiple=True, help="Config KEY=VALUE to set (repeatable)")
@click.option("--unset", "unset_keys", multiple=True, help="Config key to remove (repeatable)")
@pass_context
def patch_instance(
    ctx: CruxContext,
    deployment_id: str,
    instance_id: str,
    set_values: tuple[str, ...],
    unset_keys: tuple[str, ...],
) -> None:
    """Update the configuration of one instance."""
    config: dict[str, str | None] = dict(parse_key_value_pairs(set_values))
    for key in unset_keys:
        config[key] = None

    if not config:
        ctx.output.print_warning("Nothing to update")
        return

    if ctx.dry_run:
        ctx.log_dry_run("patch instance", {"id": instance_id, "keys": ",".join(config)})
        return

    try:
        ctx.deployments.patch_instance(deployment_id, instance_id, {"config": config}, ctx.identity)
        ctx.output.print_success(f"Instance {instance_id} updated")
    except CruxError as e:
        ctx.output.print_error(f"Failed to update instance: {e}")
        raise click.Abort()


@deployments.command("delete")
@click.argument("deployment_id")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def delete(ctx: CruxContext, deployment_id: str, yes: bool) -> None:
    """Delete a deployment that is not in progress."""
    if ctx.dry_run:
        ctx.log_dry_run("delete deployment", {"id": deployment_id})
        return

    if not yes and not ctx.confirm(f"Delete deployment {deployment_id}?"):
        ctx.output.print_info("Cancelled")
        return

    try:
        ctx.deployments.delete_deployment(deployment_id)
        ctx.output.print_success(f"Deployment {deployment_id} deleted")
    except CruxError as e:
        ctx.output.print_error(f"Failed to delete deployment: {e}")
        raise click.Abort()


@deployments.command("start")
@click.argument("deployment_id")
@click.option("-y", "--yes", is_flag=True, help="Skip confirmation")
@pass_context
def start(ctx: CruxContext, deployment_id: str, yes: bool) -> None:
    """Start a deployment on its node."""
    if ctx.dry_run:
        ctx.log_dry_run("start deployment", {"id": deployment_id})
        return

    if not yes and not ctx.confirm(f"Start deployment {deployment_id}?"):
        ctx.output.print_info("Cancelled")
        return

    try:
        ctx.deployments.start_deployment(deployment_id, ctx.identity)
        ctx.output.print_success(f"Deployment {deployment_id} started")
    except CruxError as e:
        ctx.output.print_error(f"Failed to start deployment: {e}")
        raise click.Abort()


@deployments.command("copy")
@click.argument("deployment_id")
@click.option("--force", is_flag=True, help="Replace an existing preparing deployment")
@pass_context
def copy(ctx: CruxContext, deployment_id: str, force: bool) -> None:
    """Copy a deployment into a new preparing one."""
    if ctx.dry_run:
        ctx.log_dry_run("copy deployment", {"id": deployment_id, "force": force})
        return

    try:
        copied = ctx.deployments.copy_deployment(deployment_id, ctx.identity, force=force)
        ctx.output.print_success(f"Deployment copied: {copied['url']}")
    except CruxError as e:
        ctx.output.print_error(f"Failed to copy deployment: {e}")
        raise click.Abort()


@deployments.command("log")
@click.argument("deployment_id")
@click.option("--skip", type=int, default=0, help="Entries to skip")
@click.option("--take", type=click.IntRange(1, 100), default=100, help="Entries to return")
@pass_context
def log(ctx: CruxContext, deployment_id: str, skip: int, take: int) -> None:
    """Show deployment log lines."""
    try:
        page = ctx.deployments.get_deployment_log(deployment_id, skip=skip, take=take)

        if ctx.output_format.value != "table":
            ctx.output.print_data(page)
            return

        for item in page["items"]:
            for line in item["log"]:
                ctx.output.print(f"[dim]{item['createdAt']}[/dim] {line}")
        ctx.output.print(f"[dim]{len(page['items'])} of {page['total']} entries[/dim]")

    except CruxError as e:
        ctx.output.print_error(f"Failed to get log: {e}")
        raise click.Abort()


@deployments.command("sync")
@click.argument("deployment_id")
@pass_context
def sync(ctx: CruxContext, deployment_id: str) -> None:
    """Pull deployment status and container states from the node agent."""
    if ctx.is_remote:
        ctx.output.print_error("sync works on local state only; the crux API tracks agents itself")
        raise click.Abort()

    try:
        deployment = ctx.local_deployments.sync_deployment(deployment_id)
        ctx.output.print_success(f"Deployment {deployment.id} is {deployment.status.value}")
        rows = [
            {"instance": i.id, "container": i.container_name, "state": i.state}
            for i in deployment.instances
        ]
        if rows:
            ctx.output.print_data(rows, headers=["instance", "container", "state"], title="Instances")
    except CruxError as e:
        ctx.output.print_error(f"Failed to sync deployment: {e}")
        raise click.Abort()
