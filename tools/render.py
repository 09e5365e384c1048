#!/usr/bin/env python3
"""
Renderer / previewer tool.

Usage:
    python tools/render.py <subcommand> [options]

Subcommands:
    render <input>        Render a file offline and save a 16-bit WAV
    play <input>          Preview a file live through the default output device

Options:
    --speed <float>       Playback rate 0.5..1.5 (default: 1.0)
    --wetness <float>     Reverb mix 0..1 (default: 0.5)
    --seed <int>          Fixed impulse seed (render only; default: random)
    --debug               Save resolved.json with param trace (render only)
    --output-dir <path>   Output directory (default: unique timestamped dir)
"""
import sys
import os
import time
import argparse
import logging
from pathlib import Path

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tools.render_core import render_file, get_unique_output_dir
from slowverb.core.errors import SlowverbError
from slowverb.core.io import container_from_filename
from slowverb.processor import AudioProcessor


def _params(args) -> dict:
    params = {}
    if args.speed is not None:
        params["speed"] = args.speed
    if args.wetness is not None:
        params["wetness"] = args.wetness
    return params


def cmd_render(args):
    """Render a single file."""
    input_path = Path(args.input)
    output_dir = Path(args.output_dir) if args.output_dir else get_unique_output_dir("render")
    filename = args.filename or f"{input_path.stem}_slowverb"

    rendered, debug_info = render_file(
        input_path,
        _params(args),
        output_dir,
        filename,
        seed=args.seed,
        debug=args.debug,
        script_name="render.py render",
    )

    qc = debug_info["qc_result"]
    print(f"\n=== Render Complete ===")
    print(f"Output: {debug_info['wav_path']}")
    print(f"Params: {debug_info['resolved_params']}")
    print(f"Seed: {debug_info['seed']}")
    print(f"Duration: {rendered.duration:.2f}s ({rendered.frame_count} frames)")
    print(f"Fingerprint SHA256: {qc['sha256'][:16]}...")
    print(f"Peak: {qc['peak']:.4f} ({qc['peak_dbfs']:.1f} dBFS), RMS: {qc['rms']:.4f}")
    if not qc["passed"]:
        print(f"QC: {qc['clipped_samples']} clipped samples, DC {qc['dc_offset']:.4f}")
    if args.debug:
        print(f"Debug JSON: {output_dir / (filename + '.resolved.json')}")
    return 0


def cmd_play(args):
    """Preview a file live for --seconds (or the whole time-scaled clip)."""
    input_path = Path(args.input)
    with AudioProcessor() as processor:
        buffer = processor.load_file(input_path.read_bytes(), container_from_filename(input_path.name))
        processor.set_params(**_params(args))
        seconds = args.seconds or buffer.duration / processor.params.speed
        processor.play()
        try:
            time.sleep(seconds)
        except KeyboardInterrupt:
            print("\nInterrupted")
        processor.stop()
    return 0


def main():
    logging.basicConfig(level=logging.INFO)
    parser = argparse.ArgumentParser(description="Slowed + reverb renderer and previewer")

    subparsers = parser.add_subparsers(dest="command", help="Subcommand")

    # Common arguments
    def add_common_args(p):
        p.add_argument("input", help="WAV or MP3 file")
        p.add_argument("--speed", type=float, default=None, help="Playback rate 0.5..1.5")
        p.add_argument("--wetness", type=float, default=None, help="Reverb mix 0..1")

    p_render = subparsers.add_parser("render", help="Render a file offline")
    add_common_args(p_render)
    p_render.add_argument("--filename", type=str, help="Output filename (without extension)")
    p_render.add_argument("--seed", type=int, default=None, help="Fixed seed (default: random)")
    p_render.add_argument("--debug", action="store_true", help="Save resolved.json with param trace")
    p_render.add_argument("--output-dir", type=str, help="Output directory (default: unique timestamped)")

    p_play = subparsers.add_parser("play", help="Preview a file live")
    add_common_args(p_play)
    p_play.add_argument("--seconds", type=float, default=None, help="Stop after this many seconds")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "render":
            return cmd_render(args)
        elif args.command == "play":
            return cmd_play(args)
    except SlowverbError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
