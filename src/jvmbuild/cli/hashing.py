"""jvmbuild CLI - Print generated names and lookup hashes."""

import click

from jvmbuild.naming import coordinate_key, generate_resource_name, source_identity


@click.group("hash")
def hashing():
    """Compute the names and labels the controller derives."""
    pass


@hashing.command("name")
@click.argument("gav")
def hash_name(gav: str):
    """ArtifactBuild name for GAV."""
    click.echo(generate_resource_name(gav))


@hashing.command("gav")
@click.argument("gav")
def hash_gav(gav: str):
    """Discovery task label value for GAV."""
    click.echo(coordinate_key(gav))


@hashing.command("source")
@click.argument("url")
@click.argument("tag")
@click.argument("path", default="")
def hash_source(url: str, tag: str, path: str):
    """DependencyBuild label value for a source location."""
    click.echo(source_identity(url, tag, path))
