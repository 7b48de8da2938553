"""CLI transcode command: publish HLS assets from local files."""

from __future__ import annotations

import json
import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from hlsladder.cli.exit_codes import ExitCode
from hlsladder.cli.output import error_exit
from hlsladder.config import get_config
from hlsladder.domain.models import PublishedAsset
from hlsladder.pipeline.exceptions import PipelineError
from hlsladder.pipeline.runner import TranscodePipeline

logger = logging.getLogger(__name__)

# Serializes terminal output from concurrent workers
_output_lock = threading.Lock()


@dataclass
class TranscodeOutcome:
    """Result of transcoding one file."""

    source: Path
    asset: PublishedAsset | None = None
    error: PipelineError | None = None

    @property
    def success(self) -> bool:
        return self.asset is not None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"source": str(self.source), "success": self.success}
        if self.asset is not None:
            body.update(self.asset.to_dict())
        if self.error is not None:
            body["error"] = self.error.to_dict()
        return body


def _transcode_one(
    pipeline: TranscodePipeline,
    source: Path,
    cancel_event: threading.Event,
) -> TranscodeOutcome:
    try:
        asset = pipeline.run(source.resolve(), cancel_event=cancel_event)
    except PipelineError as e:
        return TranscodeOutcome(source=source, error=e)
    except Exception as e:
        logger.exception("Unexpected error for %s", source)
        return TranscodeOutcome(source=source, error=PipelineError(f"Internal error: {e}"))
    return TranscodeOutcome(source=source, asset=asset)


def _format_outcome(outcome: TranscodeOutcome) -> str:
    if outcome.asset is not None:
        labels = ", ".join(outcome.asset.renditions)
        return f"[OK] {outcome.source.name} -> {outcome.asset.asset_id} ({labels})"
    assert outcome.error is not None
    return (
        f"[FAILED] {outcome.source.name}: {outcome.error} "
        f"(stage: {outcome.error.stage})"
    )


@click.command("transcode")
@click.argument("files", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file.",
)
@click.option(
    "--output-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for published HLS assets (default: from config).",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of files processed in parallel.",
)
@click.option(
    "--max-encodes",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum simultaneous ffmpeg encodes (default: from config).",
)
@click.option("--json", "json_output", is_flag=True, help="Output results as JSON.")
def transcode_command(
    files: tuple[Path, ...],
    config_path: Path | None,
    output_root: Path | None,
    workers: int,
    max_encodes: int | None,
    json_output: bool,
) -> None:
    """Transcode FILES into HLS assets.

    Each file becomes one asset directory under the output root with a
    master playlist and one sub-playlist per rendition.
    """
    from hlsladder.executor.interface import ToolNotAvailableError
    from hlsladder.pipeline.runner import build_pipeline

    missing = [str(f) for f in files if not f.is_file()]
    if missing:
        error_exit(
            f"File(s) not found: {', '.join(missing)}",
            ExitCode.TARGET_NOT_FOUND,
            json_output,
        )

    try:
        config = get_config(
            config_path=config_path,
            output_root=output_root,
            max_concurrent_encodes=max_encodes,
        )
    except ValueError as e:
        error_exit(f"Invalid configuration: {e}", ExitCode.CONFIG_ERROR, json_output)

    try:
        pipeline = build_pipeline(config)
    except ToolNotAvailableError as e:
        error_exit(str(e), ExitCode.TOOL_NOT_AVAILABLE, json_output)

    cancel_event = threading.Event()
    outcomes: list[TranscodeOutcome] = []

    interrupted = False

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(_transcode_one, pipeline, path, cancel_event): path
            for path in files
        }
        try:
            for future in as_completed(futures):
                outcome = future.result()
                outcomes.append(outcome)
                if not json_output:
                    with _output_lock:
                        click.echo(_format_outcome(outcome))
        except KeyboardInterrupt:
            # Running encodes are killed; queued files never start
            interrupted = True
            cancel_event.set()
            for f in futures:
                f.cancel()

    if interrupted:
        click.echo("Interrupted, remaining encodes cancelled", err=True)
        sys.exit(ExitCode.INTERRUPTED)

    failed = [o for o in outcomes if not o.success]
    if json_output:
        click.echo(
            json.dumps(
                {
                    "status": "failed" if failed else "completed",
                    "results": [o.to_dict() for o in outcomes],
                },
                indent=2,
            )
        )
    elif len(files) > 1:
        click.echo(f"{len(outcomes) - len(failed)} succeeded, {len(failed)} failed")

    if failed:
        sys.exit(ExitCode.OPERATION_FAILED)
