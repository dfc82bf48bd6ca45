"""Shared helpers for CLI commands: store access and table output."""

from typing import List, Optional, Sequence

import click

from jvmbuild.config import get_config
from jvmbuild.storage import BaseStore, StorageType, get_storage


def get_store(ctx: click.Context) -> BaseStore:
    """
    The object store for this invocation.

    Tests inject one through ``obj={"store": ...}``; otherwise it is built
    from configuration and cached on the root context.
    """
    obj = ctx.ensure_object(dict)
    if "store" not in obj:
        config = get_config()
        storage_type = None if config.storage_type == "auto" else StorageType(config.storage_type)
        try:
            obj["store"] = get_storage(storage_type, namespace=config.namespace, kubeconfig=config.kubeconfig)
        except RuntimeError as e:
            raise click.ClickException(str(e))
    return obj["store"]


def resolve_namespace(namespace: Optional[str]) -> str:
    return namespace or get_config().namespace


def format_table(rows: Sequence[Sequence[str]], gap: int = 3) -> List[str]:
    """Left-align columns; the last column is not padded."""
    if not rows:
        return []
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]) - 1)]
    sep = " " * gap
    lines = []
    for row in rows:
        cells = [cell.ljust(widths[i]) for i, cell in enumerate(row[:-1])]
        lines.append(sep.join(cells + [row[-1]]))
    return lines
