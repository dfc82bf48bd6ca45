"""jvmbuild CLI - DependencyBuild commands."""

from typing import Optional

import click

from jvmbuild.contracts.types import DEPENDENCY_BUILD_ID_LABEL
from jvmbuild.models import DependencyBuild
from jvmbuild.storage import StoreError

from ._common import format_table, get_store, resolve_namespace


@click.group()
def dependencies():
    """Inspect shared DependencyBuilds."""
    pass


@dependencies.command("list")
@click.option("--namespace", "-n", help="Namespace (default from JVMBUILD_NAMESPACE)")
@click.option("--contaminated", is_flag=True, help="Only builds with outstanding contaminants")
@click.pass_context
def dependencies_list(ctx, namespace: Optional[str], contaminated: bool):
    """List DependencyBuilds with their source and number of requesters."""
    store = get_store(ctx)
    try:
        builds = store.list(DependencyBuild, resolve_namespace(namespace))
    except StoreError as e:
        raise click.ClickException(f"Failed to list DependencyBuilds: {e}")

    if contaminated:
        builds = [b for b in builds if b.status.contaminants]
    if not builds:
        click.echo("No DependencyBuilds found.")
        return

    rows = [("NAME", "STATE", "SCM URL", "TAG", "ID", "OWNERS")]
    for build in sorted(builds, key=lambda b: b.name):
        scm = build.spec.scm_info
        rows.append((
            build.name,
            build.state or "-",
            scm.scm_url,
            scm.tag,
            build.metadata.labels.get(DEPENDENCY_BUILD_ID_LABEL, "-"),
            str(len(build.metadata.owner_references)),
        ))
    for line in format_table(rows):
        click.echo(line)
