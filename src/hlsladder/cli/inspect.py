"""CLI inspect command: show what a source would be transcoded into."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from hlsladder.cli.exit_codes import ExitCode
from hlsladder.domain.models import FeasiblePlan, InputDescriptor
from hlsladder.pipeline.exceptions import PipelineError, ProbeFailure


def _build_report(
    descriptor: InputDescriptor,
    plan: FeasiblePlan | None,
    plan_error: PipelineError | None,
) -> dict[str, Any]:
    report: dict[str, Any] = {
        "path": str(descriptor.path),
        "width": descriptor.width,
        "height": descriptor.height,
        "audio_tracks": [
            {"stream_index": t.stream_index, "codec": t.codec}
            for t in descriptor.audio_tracks
        ],
        "feasible": plan is not None,
    }
    if plan is not None:
        report["selected_audio"] = plan.selected_audio.stream_index
        report["renditions"] = [
            {
                "label": r.label,
                "resolution": r.resolution,
                "video_bitrate": r.video_bitrate,
                "bandwidth": r.bandwidth_bits,
            }
            for r in plan.renditions
        ]
    if plan_error is not None:
        report["error"] = plan_error.to_dict()
    return report


def format_human(report: dict[str, Any]) -> str:
    """Format an inspection report for the terminal."""
    lines = [
        f"File: {report['path']}",
        f"Resolution: {report['width']}x{report['height']}",
        "Audio streams:",
    ]
    if report["audio_tracks"]:
        for track in report["audio_tracks"]:
            marker = " *" if track["stream_index"] == report.get("selected_audio") else ""
            lines.append(f"  #{track['stream_index']} {track['codec']}{marker}")
    else:
        lines.append("  (none)")

    if report["feasible"]:
        lines.append("Renditions:")
        for r in report["renditions"]:
            lines.append(
                f"  {r['label']:>5}  {r['resolution']:<10} {r['video_bitrate']:>6}"
            )
    else:
        lines.append(f"Not transcodable: {report['error']['error']}")
    return "\n".join(lines)


@click.command("inspect")
@click.argument("file", type=click.Path(exists=False, path_type=Path))
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["human", "json"]),
    default="human",
    help="Output format (default: human)",
)
def inspect_command(file: Path, output_format: str) -> None:
    """Inspect a video and show the renditions it would produce.

    FILE is the path to the video to inspect. Nothing is encoded.
    """
    from hlsladder.executor.interface import get_tool_path
    from hlsladder.introspector.ffprobe import FFprobeInspector
    from hlsladder.planner.planner import plan as build_plan

    if not file.exists():
        click.echo(f"Error: File not found: {file}", err=True)
        sys.exit(ExitCode.TARGET_NOT_FOUND)

    ffprobe_path = get_tool_path("ffprobe")
    if ffprobe_path is None:
        click.echo(
            "Error: ffprobe is not installed or not in PATH.\n"
            "Install ffmpeg or set HLSLADDER_FFPROBE_PATH.",
            err=True,
        )
        sys.exit(ExitCode.TOOL_NOT_AVAILABLE)

    try:
        descriptor = FFprobeInspector(ffprobe_path=ffprobe_path).inspect(file)
    except ProbeFailure as e:
        click.echo(f"Error: Could not inspect file: {file}", err=True)
        click.echo(f"Reason: {e}", err=True)
        if e.diagnostics:
            click.echo(e.diagnostics, err=True)
        sys.exit(ExitCode.OPERATION_FAILED)

    plan = None
    plan_error = None
    try:
        plan = build_plan(descriptor, file.parent)
    except PipelineError as e:
        plan_error = e

    report = _build_report(descriptor, plan, plan_error)
    if output_format == "json":
        click.echo(json.dumps(report, indent=2))
    else:
        click.echo(format_human(report))
