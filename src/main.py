"""
Resonant Low-pass - Main Entry Point

Command line front end for the filter effect:

Usage:
    python src/main.py response                         # Print the response curve
    python src/main.py response --cutoff 800 --count 16
    python src/main.py render in.wav out.wav --preset "Preset Two"
"""

import sys
import os
import argparse
import logging
from typing import List, Optional

# Add src to path
src_path = os.path.dirname(os.path.abspath(__file__))
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from core.dsp import ParameterId  # noqa: E402
from models.filter_errors import FilterEffectError  # noqa: E402
from models.frequency_response import log_spaced_frequencies  # noqa: E402

logger = logging.getLogger("resonant_lowpass")


def setup_logging(verbosity: int = 0, default_level: str = "WARNING") -> None:
    """Configure root logging; each -v lowers the threshold one step."""
    level = getattr(logging, str(default_level).upper(), logging.WARNING)
    if verbosity:
        level = [logging.WARNING, logging.INFO, logging.DEBUG][min(verbosity, 2)]

    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s", datefmt="%H:%M:%S"
        ))
        root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Resonant low-pass filter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python src/main.py response --cutoff 1000 --resonance 6
  python src/main.py render song.flac filtered.wav --preset "Preset One"
        """
    )
    parser.add_argument("--config", "-c", default=None, help="Path to a YAML config file")
    parser.add_argument("--cutoff", type=float, default=None, help="Cutoff frequency (Hz)")
    parser.add_argument("--resonance", type=float, default=None, help="Resonance (dB, -20 to 20)")
    parser.add_argument("--preset", default=None, help="Factory preset name or number")
    parser.add_argument("--sample-rate", type=float, default=None, help="Sample rate (Hz)")
    parser.add_argument("--verbose", "-v", action="count", default=0, help="More logging (-v, -vv)")

    sub = parser.add_subparsers(dest="command", required=True)

    response = sub.add_parser("response", help="Print the magnitude response")
    response.add_argument("--count", type=int, default=24, help="Number of frequencies (default: 24)")
    response.add_argument("--min-hz", type=float, default=None, help="Lowest frequency (Hz)")

    render = sub.add_parser("render", help="Filter an audio file to a WAV file")
    render.add_argument("input", help="Input audio file")
    render.add_argument("output", help="Output WAV file")
    render.add_argument("--block-size", type=int, default=None, help="Frames per processing block")

    sub.add_parser("presets", help="List factory presets")

    return parser


def _configure_effect(effect, args: argparse.Namespace) -> None:
    if args.preset is not None:
        effect.apply_preset(args.preset)
    if args.cutoff is not None:
        effect.set_parameter(ParameterId.CUTOFF_FREQUENCY, args.cutoff)
    if args.resonance is not None:
        effect.set_parameter(ParameterId.RESONANCE, args.resonance)


def cmd_response(effect, args: argparse.Namespace, config) -> int:
    effect.initialize(sample_rate=args.sample_rate)
    min_hz = args.min_hz if args.min_hz is not None else config.get_float("response.min_hz")
    frequencies = log_spaced_frequencies(args.count, min_hz, effect.sample_rate * 0.5)

    print(f"{'frequency (Hz)':>16}  {'magnitude':>12}  {'dB':>8}")
    for point in effect.get_frequency_response(frequencies):
        print(f"{point.frequency_hz:16.2f}  {point.magnitude:12.6f}  {point.magnitude_db:8.2f}")
    return 0


def cmd_render(effect, args: argparse.Namespace, config) -> int:
    if args.sample_rate is not None:
        config.set("audio.sample_rate", int(args.sample_rate))
    frames = effect.render_file(args.input, args.output, block_size=args.block_size)
    print(f"Rendered {frames} frames to {args.output}")
    return 0


def cmd_presets(effect, args: argparse.Namespace, config) -> int:
    for number, preset in enumerate(effect.presets()):
        print(f"{number}: {preset.name} ({preset.cutoff_hz:g} Hz, {preset.resonance_db:+g} dB)")
    return 0


COMMANDS = {
    "response": cmd_response,
    "render": cmd_render,
    "presets": cmd_presets,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point"""
    args = build_parser().parse_args(argv)

    # Lazy import so --help works without the service stack
    from services.config_service import ConfigService
    from services.filter_service import FilterEffectService
    from core.audio_file import UnsupportedFormatError

    config = ConfigService(args.config)
    setup_logging(args.verbose, config.get("logging.level", "WARNING"))

    try:
        effect = FilterEffectService(config=config)
        _configure_effect(effect, args)
        return COMMANDS[args.command](effect, args, config)
    except (FilterEffectError, UnsupportedFormatError, ValueError) as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
