"""Sequential transcode pipeline for a single upload.

Stages run strictly in order: inspect, plan, build the encode job, encode,
assemble the master playlist. Each stage either returns its result or
raises a PipelineError, which ends the run. Many pipelines may run at once
(one per upload); the number of simultaneous encodes is bounded by a
shared semaphore.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from hlsladder.config.models import HLSLadderConfig
from hlsladder.domain.models import PublishedAsset
from hlsladder.executor.command import build_encode_job
from hlsladder.executor.encoder import EncodeExecutor
from hlsladder.introspector.interface import MediaInspector
from hlsladder.logging.context import asset_context, set_stage
from hlsladder.manifest.master import assemble
from hlsladder.pipeline.exceptions import (
    STAGE_ENCODE,
    STAGE_INSPECT,
    STAGE_INTAKE,
    STAGE_MANIFEST,
    STAGE_PLAN,
    EncodeCancelled,
    EncodeFailure,
    MissingUpload,
    PipelineError,
)
from hlsladder.planner.planner import plan as build_plan
from hlsladder.store.asset_store import AssetStore

logger = logging.getLogger(__name__)

StageCallback = Callable[[str], None]


class TranscodePipeline:
    """Runs the transcode stages for one upload at a time per call.

    Instances are thread-safe: run() may be called concurrently from many
    threads, each handling its own upload.
    """

    def __init__(
        self,
        store: AssetStore,
        inspector: MediaInspector,
        executor: EncodeExecutor,
        encode_slots: threading.BoundedSemaphore | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            store: Asset store that owns the output root.
            inspector: Media inspector used for the source.
            executor: Encode executor.
            encode_slots: Semaphore bounding concurrent encodes. None
                allows a single encode at a time.
        """
        self.store = store
        self.inspector = inspector
        self.executor = executor
        self.encode_slots = encode_slots or threading.BoundedSemaphore(1)

    def run(
        self,
        source_path: Path | None,
        asset_id: str | None = None,
        cancel_event: threading.Event | None = None,
        on_stage: StageCallback | None = None,
    ) -> PublishedAsset:
        """Transcode one source into a published HLS asset.

        Args:
            source_path: Uploaded file. None means nothing was uploaded.
            asset_id: Pre-allocated asset id. Allocated here when None.
            cancel_event: Cancellation hook checked between stages and
                watched during the encode.
            on_stage: Called with each stage name as it starts.

        Returns:
            PublishedAsset describing the master playlist and renditions.

        Raises:
            PipelineError: The terminal failure of this run. On
                cancellation the asset directory is removed; on any other
                failure its contents are removed so no master exists.
        """
        if source_path is None:
            raise MissingUpload("No video file uploaded")

        if asset_id is None:
            asset_id = self.store.allocate(source_path.name)

        def enter(stage: str) -> None:
            set_stage(stage)
            if on_stage is not None:
                on_stage(stage)
            if cancel_event is not None and cancel_event.is_set():
                raise EncodeCancelled(f"Cancelled before {stage}", stage=stage)

        with asset_context(asset_id):
            try:
                return self._run_stages(source_path, asset_id, cancel_event, enter)
            except EncodeCancelled:
                logger.info("Transcode cancelled, discarding asset")
                self.store.discard(asset_id)
                raise
            except PipelineError as e:
                logger.warning(
                    "Transcode failed at %s: %s",
                    e.stage,
                    e,
                    extra={"error": e},
                )
                self.store.purge_partial(asset_id)
                raise
            except Exception:
                logger.exception("Unexpected error during transcode")
                self.store.purge_partial(asset_id)
                raise

    def _run_stages(
        self,
        source_path: Path,
        asset_id: str,
        cancel_event: threading.Event | None,
        enter: Callable[[str], None],
    ) -> PublishedAsset:
        enter(STAGE_INTAKE)
        if not source_path.is_file():
            raise MissingUpload(f"Uploaded file not found: {source_path}")

        enter(STAGE_INSPECT)
        descriptor = self.inspector.inspect(source_path)

        enter(STAGE_PLAN)
        asset_root = self.store.asset_dir(asset_id)
        feasible = build_plan(descriptor, asset_root)
        job = build_encode_job(feasible)

        enter(STAGE_ENCODE)
        with self.encode_slots:
            if cancel_event is not None and cancel_event.is_set():
                raise EncodeCancelled("Cancelled while waiting for an encode slot")
            try:
                self.executor.execute(job, cancel_event=cancel_event)
            except OSError as e:
                raise EncodeFailure(f"Could not run encoder: {e}") from e

        enter(STAGE_MANIFEST)
        master = assemble(feasible, asset_root)

        logger.info("Published %s (%s)", asset_id, ", ".join(feasible.labels))
        return PublishedAsset(
            asset_id=asset_id,
            root=asset_root,
            master_playlist=master,
            renditions=feasible.labels,
        )


def build_pipeline(config: HLSLadderConfig) -> TranscodePipeline:
    """Wire a TranscodePipeline from configuration.

    Raises:
        ToolNotAvailableError: If ffprobe or ffmpeg cannot be found.
    """
    from hlsladder.executor.interface import require_tool
    from hlsladder.introspector.ffprobe import FFprobeInspector

    store = AssetStore(config.storage.output_root, config.storage.upload_root)
    store.ensure_roots()

    inspector = FFprobeInspector(
        ffprobe_path=config.tools.ffprobe or require_tool("ffprobe"),
        timeout=config.encoding.probe_timeout,
    )
    executor = EncodeExecutor(
        ffmpeg_path=config.tools.ffmpeg or require_tool("ffmpeg"),
        encoding=config.encoding,
    )
    return TranscodePipeline(
        store=store,
        inspector=inspector,
        executor=executor,
        encode_slots=threading.BoundedSemaphore(
            config.encoding.max_concurrent_encodes
        ),
    )
