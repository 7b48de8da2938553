"""Tests for the text and JSON log formatters."""

import json
import logging
import sys

from hlsladder.logging.formatters import (
    DIAGNOSTIC_TAIL_LINES,
    JSONFormatter,
    PipelineTextFormatter,
    diagnostic_lines,
)
from hlsladder.pipeline.exceptions import EncodeFailure, ProbeFailure


def _record(msg="hello", level=logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="hlsladder.test",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestDiagnosticLines:
    """Tests for diagnostic_lines."""

    def test_none(self):
        assert diagnostic_lines(_record()) == []

    def test_keeps_only_the_tail(self):
        text = "\n".join(f"line {i}" for i in range(30))
        lines = diagnostic_lines(_record(diagnostics=text))

        assert len(lines) == DIAGNOSTIC_TAIL_LINES
        assert lines[-1] == "line 29"

    def test_blank_lines_dropped(self):
        assert diagnostic_lines(_record(diagnostics="a\n\n  \nb")) == ["a", "b"]

    def test_falls_back_to_error_diagnostics(self):
        error = ProbeFailure("bad file", diagnostics="moov atom not found")
        assert diagnostic_lines(_record(error=error)) == ["moov atom not found"]


class TestPipelineTextFormatter:
    """Tests for PipelineTextFormatter."""

    def test_plain_record(self):
        line = PipelineTextFormatter().format(_record())
        assert line.endswith(" INFO    hlsladder.test: hello")
        assert not line.startswith("[")

    def test_asset_and_stage_prefix(self):
        line = PipelineTextFormatter().format(_record(asset_id="clip-1", stage="plan"))
        assert line.startswith("[clip-1:plan] ")

    def test_asset_without_stage(self):
        line = PipelineTextFormatter().format(_record(asset_id="clip-1", stage=None))
        assert line.startswith("[clip-1] ")

    def test_error_code_and_diagnostics(self):
        error = EncodeFailure("ffmpeg exited with code 1", diagnostics="x\nConversion failed!")
        text = PipelineTextFormatter().format(_record("failed", error=error))

        first, *rest = text.splitlines()
        assert first.endswith("failed [ENCODE_FAILED]")
        assert rest == ["    | x", "    | Conversion failed!"]

    def test_traceback_comes_last(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record(level=logging.ERROR, diagnostics="tool said no")
            record.exc_info = sys.exc_info()

        lines = PipelineTextFormatter().format(record).splitlines()
        assert lines[1] == "    | tool said no"
        assert lines[-1] == "RuntimeError: boom"


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))

        assert entry["level"] == "INFO"
        assert entry["message"] == "hello"
        assert entry["logger"] == "hlsladder.test"
        assert entry["timestamp"].endswith("+00:00")
        assert "extra" not in entry
        assert "asset_id" not in entry

    def test_asset_context_is_top_level(self):
        entry = json.loads(
            JSONFormatter().format(_record(asset_id="clip-1", stage="encode"))
        )
        assert entry["asset_id"] == "clip-1"
        assert entry["stage"] == "encode"
        assert "extra" not in entry

    def test_pipeline_error_fields(self):
        error = ProbeFailure("bad file", diagnostics="moov atom not found")
        entry = json.loads(JSONFormatter().format(_record("failed", error=error)))

        assert entry["error"] == {"code": "PROBE_FAILED", "stage": "inspect"}
        assert entry["diagnostics"] == ["moov atom not found"]
        assert "extra" not in entry

    def test_error_from_exc_info(self):
        try:
            raise EncodeFailure("ffmpeg timed out")
        except EncodeFailure:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        entry = json.loads(JSONFormatter().format(record))
        assert entry["error"]["code"] == "ENCODE_FAILED"
        assert "EncodeFailure: ffmpeg timed out" in entry["exception"]

    def test_other_fields_go_to_extra(self):
        entry = json.loads(
            JSONFormatter().format(_record(master_playlist="/srv/hls/a/master.m3u8"))
        )
        assert entry["extra"] == {"master_playlist": "/srv/hls/a/master.m3u8"}

    def test_non_serializable_values_use_str(self):
        entry = json.loads(JSONFormatter().format(_record(obj=object())))
        assert entry["extra"]["obj"].startswith("<object object")
