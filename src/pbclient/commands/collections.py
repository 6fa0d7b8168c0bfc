"""Collections command -- list the collections the active profile can see."""

from __future__ import annotations

import typer

from pbclient.commands.common import reported_errors, run_with_dispatcher
from pbclient.output import get_output, info


def collections_command(ctx: typer.Context) -> None:
    """List collection names and ids.

    Example::

        pbclient collections --plain
    """
    from pbclient.resources import CollectionsResource

    with reported_errors():
        refs = run_with_dispatcher(ctx, lambda dispatcher: CollectionsResource(dispatcher).list())

    if not refs:
        info("No collections found.")
        return
    rows = [[ref.name, ref.id or "-"] for ref in sorted(refs, key=lambda r: r.name)]
    get_output().table(["Name", "ID"], rows, title="Collections")
