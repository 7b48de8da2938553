"""Encode plan building.

Turns a FeasiblePlan into an EncodeJob and the ffmpeg argument list that
runs it. The source is decoded once; its video is split into one scaled
branch per rendition and each branch is muxed into its own HLS output
together with the selected audio stream.

Arguments are always built as lists and passed to ffmpeg without a shell,
so file names can never be interpreted as shell syntax.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from hlsladder.config.models import EncodingConfig
from hlsladder.domain.models import (
    EncodeJob,
    FeasiblePlan,
    OutputTarget,
    RenditionProfile,
)

logger = logging.getLogger(__name__)


def build_filter_graph(renditions: Sequence[RenditionProfile]) -> str:
    """Build the fan-out filter graph for the given renditions.

    Branch ``[v<i>]`` carries the video for ``renditions[i]``.

    Example:
        >>> build_filter_graph(RENDITION_LADDER[2:])
        '[0:v]split=2[s0][s1];[s0]scale=w=854:h=480[v0];[s1]scale=w=640:h=360[v1]'
    """
    if not renditions:
        raise ValueError("At least one rendition is required")

    count = len(renditions)
    split_outputs = "".join(f"[s{i}]" for i in range(count))
    chains = [f"[0:v]split={count}{split_outputs}"]
    for i, rendition in enumerate(renditions):
        chains.append(f"[s{i}]scale=w={rendition.width}:h={rendition.height}[v{i}]")
    return ";".join(chains)


def build_encode_job(plan: FeasiblePlan) -> EncodeJob:
    """Build the EncodeJob for a plan.

    Each rendition writes into its own directory under the asset root:
    ``<root>/<label>/segment_%d_<label>.ts`` and
    ``<root>/<label>/index_<label>.m3u8``.
    """
    targets = []
    for rendition in plan.renditions:
        rendition_dir = plan.output_root / rendition.label
        targets.append(
            OutputTarget(
                rendition=rendition,
                segment_pattern=rendition_dir / rendition.segment_template,
                playlist_path=rendition_dir / rendition.playlist_name,
            )
        )

    return EncodeJob(
        source_path=plan.source_path,
        audio_stream_index=plan.selected_audio.stream_index,
        filter_graph=build_filter_graph(plan.renditions),
        output_targets=tuple(targets),
    )


def build_output_args(
    index: int,
    target: OutputTarget,
    audio_stream_index: int,
    encoding: EncodingConfig,
) -> list[str]:
    """Build the per-output arguments for one HLS rendition."""
    rendition = target.rendition
    return [
        "-map",
        f"[v{index}]",
        "-map",
        f"0:{audio_stream_index}",
        "-c:v",
        encoding.video_encoder,
        "-b:v",
        rendition.video_bitrate,
        "-maxrate",
        rendition.max_rate,
        "-bufsize",
        rendition.buffer_size,
        "-c:a",
        encoding.audio_codec,
        "-b:a",
        encoding.audio_bitrate,
        "-f",
        "hls",
        "-hls_time",
        str(encoding.segment_seconds),
        "-hls_playlist_type",
        "vod",
        "-hls_segment_filename",
        str(target.segment_pattern),
        str(target.playlist_path),
    ]


def build_ffmpeg_command(
    job: EncodeJob,
    ffmpeg_path: Path,
    encoding: EncodingConfig | None = None,
) -> list[str]:
    """Build the complete ffmpeg argument list for an EncodeJob.

    Args:
        job: Encode job to run.
        ffmpeg_path: Path to the ffmpeg executable.
        encoding: Encoder settings. Defaults are used when None.

    Returns:
        ffmpeg argv, starting with the executable.
    """
    if encoding is None:
        encoding = EncodingConfig()

    cmd = [
        str(ffmpeg_path),
        "-hide_banner",
        "-nostdin",
        "-y",
        "-i",
        str(job.source_path),
        "-filter_complex",
        job.filter_graph,
    ]
    for index, target in enumerate(job.output_targets):
        cmd.extend(build_output_args(index, target, job.audio_stream_index, encoding))

    logger.debug(
        "Built ffmpeg command with %d output(s)",
        len(job.output_targets),
        extra={"labels": [t.label for t in job.output_targets]},
    )
    return cmd


def prepare_output_dirs(job: EncodeJob) -> list[Path]:
    """Create the per-rendition output directories.

    Returns:
        The directories, in ladder order.
    """
    dirs = []
    for target in job.output_targets:
        directory = target.playlist_path.parent
        directory.mkdir(parents=True, exist_ok=True)
        dirs.append(directory)
    return dirs
