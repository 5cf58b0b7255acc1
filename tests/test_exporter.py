"""Tests for PNG snapshots and the FFmpeg clip pipeline (FFmpeg faked)."""

import io

import numpy as np
import pytest
from PIL import Image

from mesh_core import exporter as exporter_mod
from mesh_core.exporter import MeshExporter, render_still
from mesh_core.params import MeshParams


class _RecordingStdin:
    def __init__(self):
        self.chunks = []
        self.closed = False

    def write(self, data):
        self.chunks.append(bytes(data))
        return len(data)

    def close(self):
        self.closed = True


class _FakeProc:
    returncode_on_exit = 0
    stderr_text = b""
    instances = []

    def __init__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs
        self.stdin = _RecordingStdin()
        self.stderr = io.BytesIO(self.stderr_text)
        self.returncode = None
        self.killed = False
        _FakeProc.instances.append(self)

    def wait(self, timeout=None):
        self.returncode = self.returncode_on_exit
        return self.returncode

    def kill(self):
        self.killed = True


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    _FakeProc.instances = []
    _FakeProc.returncode_on_exit = 0
    _FakeProc.stderr_text = b""
    monkeypatch.setattr(exporter_mod.subprocess, "Popen", _FakeProc)
    return _FakeProc


def _run_clip(exp, path, params, size=(32, 18), fps=10, duration=1.0, progress=None):
    result = {}

    def on_done(success, message):
        result["success"] = success
        result["message"] = message

    exp.export_clip(str(path), params, size, fps=fps, duration=duration,
                    progress_callback=progress, done_callback=on_done)
    exp.join(timeout=30)
    return result


def test_render_still_is_deterministic():
    params = MeshParams(seed=99, animation="orbit")
    a = render_still(params, (80, 45), 1500.0)
    b = render_still(params, (80, 45), 1500.0)
    assert a.shape == (45, 80, 3)
    assert np.array_equal(a, b)
    assert not np.array_equal(a, render_still(params, (80, 45), 0.0))


def test_snapshot_writes_png(tmp_path):
    out = tmp_path / "snap.png"
    MeshExporter().export_snapshot(str(out), MeshParams(seed=5), (64, 36))
    with Image.open(out) as img:
        assert img.size == (64, 36)
        assert img.mode == "RGB"


def test_invalid_size_rejected(tmp_path):
    with pytest.raises(ValueError):
        render_still(MeshParams(), (0, 10))
    with pytest.raises(ValueError):
        MeshExporter().export_clip(str(tmp_path / "x.mp4"), MeshParams(), (10, 10), fps=0)


def test_clip_pipes_every_frame(fake_ffmpeg, tmp_path):
    progress = []
    result = _run_clip(MeshExporter(), tmp_path / "clip.mp4", MeshParams(seed=3),
                       progress=lambda pct, text: progress.append((pct, text)))

    assert result["success"] is True
    assert result["message"].startswith("Clip saved to:")
    proc = fake_ffmpeg.instances[0]
    assert proc.stdin.closed
    assert len(proc.stdin.chunks) == 10
    assert all(len(c) == 32 * 18 * 3 for c in proc.stdin.chunks)
    assert progress[0] == (0.0, "Starting encoder...")
    assert progress[-1] == (1.0, "Complete!")


def test_clip_command_line(fake_ffmpeg, tmp_path, monkeypatch):
    monkeypatch.setenv("MESH_OVERLAY_FFMPEG", "/opt/ffmpeg/bin/ffmpeg")
    out = tmp_path / "clip.mp4"
    _run_clip(MeshExporter(), out, MeshParams(), fps=30, duration=0.1)
    cmd = fake_ffmpeg.instances[0].cmd
    assert cmd[0] == "/opt/ffmpeg/bin/ffmpeg"
    assert cmd[cmd.index("-s") + 1] == "32x18"
    assert cmd[cmd.index("-pix_fmt") + 1] == "rgb24"
    assert cmd[-1] == str(out)


def test_static_clip_repeats_one_frame(fake_ffmpeg, tmp_path):
    _run_clip(MeshExporter(), tmp_path / "s.mp4", MeshParams(animation="none"))
    chunks = fake_ffmpeg.instances[0].stdin.chunks
    assert len(set(chunks)) == 1


def test_animated_clip_changes_over_time(fake_ffmpeg, tmp_path):
    _run_clip(MeshExporter(), tmp_path / "a.mp4", MeshParams(animation="orbit", speed=3.0))
    chunks = fake_ffmpeg.instances[0].stdin.chunks
    assert chunks[0] != chunks[-1]


def test_encoder_failure_reported(fake_ffmpeg, tmp_path):
    fake_ffmpeg.returncode_on_exit = 1
    fake_ffmpeg.stderr_text = b"Unknown encoder 'libx264'\n"
    result = _run_clip(MeshExporter(), tmp_path / "f.mp4", MeshParams())
    assert result["success"] is False
    assert "FFmpeg encoding failed (code 1)" in result["message"]
    assert "libx264" in result["message"]
    assert fake_ffmpeg.instances[0].killed


def test_stop_cancels_export(fake_ffmpeg, tmp_path):
    exp = MeshExporter()

    def progress(pct, text):
        if pct > 0:
            exp.stop()

    result = _run_clip(exp, tmp_path / "c.mp4", MeshParams(), fps=30, duration=2.0, progress=progress)
    assert result == {"success": False, "message": "Export cancelled"}
    assert len(fake_ffmpeg.instances[0].stdin.chunks) == 10
    assert not exp.is_exporting


def test_second_export_refused_while_busy(fake_ffmpeg, tmp_path):
    exp = MeshExporter()
    refused = []

    def progress(pct, text):
        if not refused:
            exp.export_clip(str(tmp_path / "b.mp4"), MeshParams(), (8, 8),
                            done_callback=lambda ok, msg: refused.append((ok, msg)))

    result = _run_clip(exp, tmp_path / "a.mp4", MeshParams(), progress=progress)
    assert refused == [(False, "Already exporting a clip")]
    assert result["success"] is True
