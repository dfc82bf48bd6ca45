"""jvmbuild CLI - Core commands (controller)."""

import os
import shutil
import subprocess
from typing import Optional

import click


@click.command()
@click.option("--kubeconfig", envvar="KUBECONFIG", help="Path to kubeconfig")
@click.option("--namespace", default="", help="Namespace to watch (empty for all)")
@click.option("--verbose", is_flag=True, help="Verbose kopf logging")
def controller(kubeconfig: Optional[str], namespace: str, verbose: bool):
    """Run the ArtifactBuild controller."""
    click.echo("Starting jvmbuild controller...")
    click.echo(f"  kubeconfig: {kubeconfig or 'in-cluster'}")
    click.echo(f"  namespace: {namespace or 'all'}")

    if not shutil.which("kopf"):
        raise click.ClickException(
            "kopf not found in PATH.\n"
            "Install with: pip install kopf\n"
            "Or ensure kopf is in your PATH."
        )

    cmd = ["kopf", "run", "-m", "jvmbuild.operator", "--standalone"]
    if namespace:
        cmd.extend(["--namespace", namespace])
    else:
        cmd.append("--all-namespaces")
    if verbose:
        cmd.append("--verbose")

    click.echo(f"  Running: {' '.join(cmd)}")

    env = None
    if kubeconfig:
        env = dict(os.environ, KUBECONFIG=kubeconfig, JVMBUILD_KUBECONFIG=kubeconfig)

    try:
        result = subprocess.run(cmd, env=env)
    except FileNotFoundError:
        raise click.ClickException(
            "kopf executable not found.\n"
            "Install with: pip install kopf\n"
            "Or ensure kopf is accessible in your PATH."
        )
    if result.returncode != 0:
        raise click.ClickException(
            f"Controller exited with error.\n"
            f"Exit code: {result.returncode}\n"
            f"Command: {' '.join(cmd)}"
        )
