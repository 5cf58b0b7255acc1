"""
Mesh Overlay - Command Line Entry Point
Procedural mesh-gradient backgrounds for OBS stream overlays.

Commands:
    preview   live window driven by the Tk event loop
    snapshot  write one composited frame as PNG
    export    render an H.264 clip through FFmpeg
"""

import sys
import logging
import argparse

from mesh_core.exporter import FPS_OPTIONS, RESOLUTIONS, MeshExporter
from mesh_core.params import MeshParams, random_seed

logger = logging.getLogger(__name__)

_PARAM_FLAGS = ("seed", "points", "palette", "animation", "speed", "blur",
                "scale", "opacity", "blend", "bg")
_SIZE_HELP = f"WIDTHxHEIGHT or a preset ({', '.join(RESOLUTIONS)})"


def _parse_size(text: str):
    preset = RESOLUTIONS.get(text.lower())
    if preset is not None:
        return preset
    try:
        w, h = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected WIDTHxHEIGHT or one of {', '.join(RESOLUTIONS)}, got {text!r}"
        )
    return w, h


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    group = common.add_argument_group("mesh parameters")
    group.add_argument("--seed", help="Integer seed (1-999999)")
    group.add_argument("--random-seed", action="store_true", help="Pick a fresh seed")
    group.add_argument("--points", help="Number of blobs (2-4)")
    group.add_argument("--palette", help="Palette name, e.g. pastel, ocean, sunset")
    group.add_argument("--animation", help="drift, orbit, breathe, wave or none")
    group.add_argument("--speed", help="Animation speed multiplier (0.1-3)")
    group.add_argument("--blur", help="Blend softness (20-200)")
    group.add_argument("--scale", help="Point spread (0.5-2)")
    group.add_argument("--opacity", help="Layer opacity (0-1)")
    group.add_argument("--blend", help="normal, screen, multiply or overlay")
    group.add_argument("--bg", help="Background color as hex, e.g. 000000")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    sub = parser.add_subparsers(dest="command", required=True)

    p_preview = sub.add_parser("preview", parents=[common], help="Open a live preview window")
    p_preview.add_argument("--fps", type=int, default=60)

    p_snap = sub.add_parser("snapshot", parents=[common], help="Write a PNG frame")
    p_snap.add_argument("output")
    p_snap.add_argument("--size", type=_parse_size, default=RESOLUTIONS["1080p"], help=_SIZE_HELP)
    p_snap.add_argument("--time", type=float, default=0.0, help="Timestamp in milliseconds")

    p_export = sub.add_parser("export", parents=[common], help="Render an MP4 clip")
    p_export.add_argument("output")
    p_export.add_argument("--size", type=_parse_size, default=RESOLUTIONS["1080p"], help=_SIZE_HELP)
    p_export.add_argument("--fps", type=int, choices=FPS_OPTIONS, default=FPS_OPTIONS[0])
    p_export.add_argument("--duration", type=float, default=10.0)
    p_export.add_argument("--bitrate", type=int, default=8, help="Mbps")

    return parser


def params_from_args(args) -> MeshParams:
    values = {name: getattr(args, name) for name in _PARAM_FLAGS if getattr(args, name) is not None}
    if args.random_seed:
        values["seed"] = random_seed()
    return MeshParams.from_mapping(values)


def _run_export(args, params: MeshParams) -> int:
    exporter = MeshExporter()
    result = {"ok": False}

    def on_progress(pct, text):
        print(f"\r[{int(pct * 100):3d}%] {text}", end="", flush=True)

    def on_done(success, message):
        result["ok"] = success
        print()
        print(message)

    exporter.export_clip(
        args.output, params, args.size,
        fps=args.fps, duration=args.duration, bitrate=args.bitrate,
        progress_callback=on_progress, done_callback=on_done,
    )
    try:
        exporter.join()
    except KeyboardInterrupt:
        exporter.stop()
        exporter.join()
    return 0 if result["ok"] else 1


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    params = params_from_args(args)
    logger.info("Mesh params: %s", params)

    if args.command == "preview":
        from mesh_ui.preview import MeshPreviewWindow
        window = MeshPreviewWindow(params, fps=args.fps)
        window.mainloop()
        return 0

    if args.command == "snapshot":
        MeshExporter().export_snapshot(args.output, params, args.size, args.time)
        print(f"Snapshot saved to {args.output}")
        return 0

    return _run_export(args, params)


if __name__ == "__main__":
    sys.exit(main())
