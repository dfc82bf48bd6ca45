"""jvmbuild CLI - ArtifactBuild commands."""

import json
from typing import Optional

import click
import yaml

from jvmbuild.contracts.types import ArtifactBuildState
from jvmbuild.models import ArtifactBuild, new_artifact_build
from jvmbuild.naming import generate_resource_name
from jvmbuild.storage import NotFoundError, StoreError

from ._common import format_table, get_store, resolve_namespace


@click.group()
def artifacts():
    """Request and inspect ArtifactBuilds."""
    pass


@artifacts.command("list")
@click.option("--namespace", "-n", help="Namespace (default from JVMBUILD_NAMESPACE)")
@click.option("--failed", is_flag=True, help="Only failed builds")
@click.option("--building", is_flag=True, help="Only builds in progress")
@click.option("--complete", is_flag=True, help="Only completed builds")
@click.option("--missing", is_flag=True, help="Only builds whose source could not be found")
@click.pass_context
def artifacts_list(ctx, namespace: Optional[str], failed: bool, building: bool, complete: bool, missing: bool):
    """List ArtifactBuilds as GAV, state and name."""
    store = get_store(ctx)
    wanted = set()
    if failed:
        wanted.add(ArtifactBuildState.FAILED)
    if building:
        wanted.add(ArtifactBuildState.BUILDING)
    if complete:
        wanted.add(ArtifactBuildState.COMPLETE)
    if missing:
        wanted.add(ArtifactBuildState.MISSING)

    try:
        builds = store.list(ArtifactBuild, resolve_namespace(namespace))
    except StoreError as e:
        raise click.ClickException(f"Failed to list ArtifactBuilds: {e}")

    rows = [
        (abr.gav, abr.state.value, abr.name)
        for abr in sorted(builds, key=lambda b: b.gav)
        if not wanted or abr.state in wanted
    ]
    if not rows:
        click.echo("No ArtifactBuilds found.")
        return
    for line in format_table(rows):
        click.echo(line)


@artifacts.command("create")
@click.argument("gav")
@click.option("--namespace", "-n", help="Namespace (default from JVMBUILD_NAMESPACE)")
@click.pass_context
def artifacts_create(ctx, gav: str, namespace: Optional[str]):
    """Request a build of GAV (group:artifact:version)."""
    if gav.count(":") < 2:
        raise click.BadParameter(f"expected group:artifact:version, got '{gav}'", param_hint="GAV")
    store = get_store(ctx)
    ns = resolve_namespace(namespace)
    name = generate_resource_name(gav)

    try:
        existing = store.find(ArtifactBuild, ns, name)
        if existing is not None:
            click.echo(f"ArtifactBuild {name} already exists for {gav} ({existing.state.value})")
            return
        store.create(new_artifact_build(gav, name, ns))
    except StoreError as e:
        raise click.ClickException(f"Failed to create ArtifactBuild for {gav}: {e}")
    click.echo(f"Created ArtifactBuild {name} for {gav}")


@artifacts.command("rebuild")
@click.argument("name")
@click.option("--namespace", "-n", help="Namespace (default from JVMBUILD_NAMESPACE)")
@click.pass_context
def artifacts_rebuild(ctx, name: str, namespace: Optional[str]):
    """Reset an ArtifactBuild to New so it is discovered and built again."""
    store = get_store(ctx)
    ns = resolve_namespace(namespace)
    try:
        abr = store.get(ArtifactBuild, ns, name)
        previous = abr.state
        abr.status.state = ArtifactBuildState.NEW
        store.update_status(abr)
    except NotFoundError:
        raise click.ClickException(f"ArtifactBuild {ns}/{name} not found")
    except StoreError as e:
        raise click.ClickException(f"Failed to reset ArtifactBuild {ns}/{name}: {e}")
    click.echo(f"Reset ArtifactBuild {name} from {previous.value} to {ArtifactBuildState.NEW.value}")


@artifacts.command("show")
@click.argument("name")
@click.option("--namespace", "-n", help="Namespace (default from JVMBUILD_NAMESPACE)")
@click.option("--format", "output_format", type=click.Choice(["yaml", "json"]), default="yaml")
@click.pass_context
def artifacts_show(ctx, name: str, namespace: Optional[str], output_format: str):
    """Print an ArtifactBuild."""
    store = get_store(ctx)
    ns = resolve_namespace(namespace)
    try:
        abr = store.get(ArtifactBuild, ns, name)
    except NotFoundError:
        raise click.ClickException(f"ArtifactBuild {ns}/{name} not found")
    except StoreError as e:
        raise click.ClickException(f"Failed to read ArtifactBuild {ns}/{name}: {e}")

    body = abr.to_body()
    if output_format == "json":
        click.echo(json.dumps(body, indent=2))
    else:
        click.echo(yaml.safe_dump(body, default_flow_style=False, sort_keys=False))
