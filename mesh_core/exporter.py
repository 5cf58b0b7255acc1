"""
Mesh Overlay — Still & Clip Export
Renders the mesh offline: PNG snapshots via Pillow and H.264 clips by piping
raw frames into FFmpeg.

Clips are driven by a ManualFrameScheduler at exact ``frame / fps``
timestamps, so the same parameters always produce the same frames.
"""

import os
import sys
import time
import shutil
import logging
import threading
import subprocess
from typing import Callable, Optional, Tuple

import numpy as np
from PIL import Image

from mesh_core.frame_driver import ManualFrameScheduler
from mesh_core.mesh import MeshOverlay
from mesh_core.params import MeshParams
from mesh_core.surface import compose_frame

logger = logging.getLogger(__name__)

# Output presets, accepted by name wherever a size is asked for
RESOLUTIONS = {
    "720p": (1280, 720),
    "1080p": (1920, 1080),
    "1440p": (2560, 1440),
}
FPS_OPTIONS = [30, 60]

_NO_WINDOW = getattr(subprocess, "CREATE_NO_WINDOW", 0)


def _get_ffmpeg_path() -> str:
    """Find FFmpeg executable: env override, bundled copy, then system PATH."""
    override = os.environ.get("MESH_OVERLAY_FFMPEG", "")
    if override:
        return override
    if hasattr(sys, '_MEIPASS'):
        bundled = os.path.join(sys._MEIPASS, "ffmpeg", "ffmpeg.exe")
        if os.path.isfile(bundled):
            return bundled
    found = shutil.which("ffmpeg")
    if found:
        return found
    # Last resort: let the OS resolve it
    return "ffmpeg"


def _validate_output(size: Tuple[int, int], fps: int = 1, duration: float = 1.0):
    w, h = size
    if w <= 0 or h <= 0:
        raise ValueError(f"Output size must be positive, got {w}x{h}")
    if fps <= 0:
        raise ValueError(f"FPS must be positive, got {fps}")
    if duration <= 0:
        raise ValueError(f"Duration must be positive, got {duration}")


def render_still(params: MeshParams, size: Tuple[int, int], timestamp_ms: float = 0.0) -> np.ndarray:
    """Render one composed RGB frame of the mesh at ``timestamp_ms``."""
    _validate_output(size)
    overlay = MeshOverlay(params)
    overlay.on_frame(timestamp_ms)
    return compose_frame(overlay.buffer, params, size)


class MeshExporter:
    """
    Exports mesh snapshots and clips.
    Clip export runs in a background thread with progress callbacks.
    """

    def __init__(self):
        self._stop_event = threading.Event()
        self._exporting = False
        self._thread = None

    @property
    def is_exporting(self) -> bool:
        return self._exporting

    def stop(self):
        """Signal the running export to stop."""
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def export_snapshot(
        self,
        output_path: str,
        params: MeshParams,
        size: Tuple[int, int],
        timestamp_ms: float = 0.0,
    ) -> str:
        """Write a single PNG frame. Returns the written path."""
        frame = render_still(params, size, timestamp_ms)
        Image.fromarray(frame).save(output_path)
        logger.info("Snapshot saved to %s (%dx%d)", output_path, size[0], size[1])
        return output_path

    def export_clip(
        self,
        output_path: str,
        params: MeshParams,
        size: Tuple[int, int],
        fps: int = 30,
        duration: float = 10,
        bitrate: int = 8,
        progress_callback: Optional[Callable[[float, str], None]] = None,
        done_callback: Optional[Callable[[bool, str], None]] = None,
    ):
        """
        Start clip export in a background thread.

        Args:
            output_path: Output .mp4 path
            params: Mesh parameters
            size: (width, height) tuple
            fps: Frames per second
            duration: Duration in seconds
            bitrate: Bitrate in Mbps
            progress_callback: Called with (progress_0_to_1, status_text)
            done_callback: Called with (success, message)
        """
        if self._exporting:
            if done_callback:
                done_callback(False, "Already exporting a clip")
            return

        _validate_output(size, fps, duration)
        self._stop_event.clear()
        self._exporting = True

        def _worker():
            try:
                self._do_export(output_path, params, size, fps, duration, bitrate, progress_callback)
                if self._stop_event.is_set():
                    # Clean up partial file
                    if os.path.exists(output_path):
                        try:
                            os.remove(output_path)
                        except OSError as e:
                            logger.warning("Could not remove partial clip %s: %s", output_path, e)
                    if done_callback:
                        done_callback(False, "Export cancelled")
                elif done_callback:
                    done_callback(True, f"Clip saved to:\n{output_path}")
            except Exception as e:
                logger.error("Clip export error: %s", e, exc_info=True)
                if done_callback:
                    done_callback(False, f"Error: {e}")
            finally:
                self._exporting = False

        self._thread = threading.Thread(target=_worker, daemon=True)
        self._thread.start()

    def _build_ffmpeg_cmd(self, output_path, size, fps, bitrate):
        w, h = size
        return [
            _get_ffmpeg_path(), "-y", "-hide_banner", "-loglevel", "error",
            "-f", "rawvideo",
            "-vcodec", "rawvideo",
            "-pix_fmt", "rgb24",
            "-s", f"{w}x{h}",
            "-r", str(fps),
            "-i", "pipe:0",
            "-c:v", "libx264",
            "-preset", "medium",
            "-b:v", f"{bitrate}M",
            "-maxrate", f"{int(bitrate * 1.2)}M",
            "-bufsize", f"{bitrate * 2}M",
            "-pix_fmt", "yuv420p",
            "-movflags", "+faststart",
            output_path,
        ]

    def _do_export(self, output_path, params, size, fps, duration, bitrate, progress_callback):
        """
        Internal: render every frame and pipe it into FFmpeg.

        Static meshes render once; the composed frame is reused for the
        whole clip.
        """
        total_frames = max(1, int(round(fps * duration)))
        ff_cmd = self._build_ffmpeg_cmd(output_path, size, fps, bitrate)
        logger.info("FFmpeg cmd: %s", " ".join(ff_cmd))

        if progress_callback:
            progress_callback(0.0, "Starting encoder...")

        proc = subprocess.Popen(
            ff_cmd,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            creationflags=_NO_WINDOW,
        )

        stderr_lines = []

        def _drain_stderr():
            for line in iter(proc.stderr.readline, b''):
                stderr_lines.append(line.decode('utf-8', errors='replace').strip())

        stderr_thread = threading.Thread(target=_drain_stderr, daemon=True)
        stderr_thread.start()

        scheduler = ManualFrameScheduler()
        overlay = MeshOverlay(params)
        latest = {}

        def _present(buffer):
            latest["frame"] = compose_frame(buffer, params, size)

        overlay.on_present = _present
        overlay.start(scheduler)
        render_start = time.time()

        try:
            for frame_idx in range(total_frames):
                if self._stop_event.is_set():
                    break
                scheduler.tick(frame_idx * 1000.0 / fps)
                try:
                    proc.stdin.write(latest["frame"].tobytes())
                except (BrokenPipeError, OSError):
                    logger.warning("FFmpeg closed its input at frame %d", frame_idx)
                    break

                done = frame_idx + 1
                if progress_callback and done % 10 == 0:
                    progress_callback(done / total_frames, f"Frame {done}/{total_frames}")

            proc.stdin.close()
            proc.wait()
            stderr_thread.join(timeout=5)

            if proc.returncode != 0 and not self._stop_event.is_set():
                err = "\n".join(stderr_lines[-10:]) if stderr_lines else "Unknown error"
                raise RuntimeError(
                    f"FFmpeg encoding failed (code {proc.returncode}):\n{err[-500:]}"
                )
        except Exception:
            proc.kill()
            raise
        finally:
            overlay.stop()

        elapsed = time.time() - render_start
        logger.info(
            "Clip export finished: %d frames (%d rasterized) in %.1fs",
            total_frames, overlay.render_count, elapsed,
        )
        if progress_callback and not self._stop_event.is_set():
            progress_callback(1.0, "Complete!")
