"""
jvmbuild CLI - Request builds and run the controller.

Commands:
    jvmbuild controller     Run the ArtifactBuild controller (kopf)
    jvmbuild artifacts      Request and inspect ArtifactBuilds
    jvmbuild dependencies   Inspect shared DependencyBuilds
    jvmbuild hash           Compute generated names and lookup hashes
"""

import click

from jvmbuild import __version__

from .artifacts import artifacts
from .core import controller
from .dependencies import dependencies
from .hashing import hashing


@click.group()
@click.version_option(version=__version__)
def main():
    """jvmbuild - Deduplicated builds of Java library coordinates."""
    pass


main.add_command(controller)
main.add_command(artifacts)
main.add_command(dependencies)
main.add_command(hashing)


if __name__ == "__main__":
    main()
