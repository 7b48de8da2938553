"""CLI assets command: list asset directories under the output root."""

from __future__ import annotations

import json
from pathlib import Path

import click

from hlsladder.config import get_config
from hlsladder.store.asset_store import AssetStore


@click.command("assets")
@click.option(
    "--output-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding published assets (default: from config).",
)
@click.option(
    "--published-only",
    is_flag=True,
    default=False,
    help="Only list assets that have a master playlist.",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON.")
def assets_command(
    output_root: Path | None,
    published_only: bool,
    json_output: bool,
) -> None:
    """List assets under the output root.

    Assets without a master playlist are still being encoded, or failed.
    """
    config = get_config(output_root=output_root)
    store = AssetStore(config.storage.output_root)

    entries = store.list_assets()
    if published_only:
        entries = [e for e in entries if e.published]

    if json_output:
        click.echo(json.dumps({"assets": [e.to_dict() for e in entries]}, indent=2))
        return

    if not entries:
        click.echo("No assets found.")
        return

    for entry in entries:
        state = "published" if entry.published else "incomplete"
        click.echo(f"{entry.asset_id}  {state}")
