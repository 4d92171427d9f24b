"""Defaults and command-line options for the visualiser."""

import argparse
from dataclasses import dataclass
from typing import Optional

from dropviz.errors import ConfigurationError
from dropviz.sample_format import BYTES, PCM16, SAMPLE_FORMATS
from dropviz.spectrum_engine import BLOCK_SIZE, NUM_BANDS, PEAK_FALLOFF

TARGET_FPS = 30
DEFAULT_WINDOW_WIDTH = 800
DEFAULT_WINDOW_HEIGHT = 450
WINDOW_TITLE = "Demo Audio Visualizer"

# bytes mode reads one sample per byte: 4x the bytes keeps the same
# amount of stereo audio per frame as pcm16
DEFAULT_BLOCK_SIZES = {PCM16: BLOCK_SIZE, BYTES: BLOCK_SIZE * 4}


@dataclass
class EngineConfig:
    """Everything needed to build the engine, player and renderer."""

    file: Optional[str] = None
    block_size: int = BLOCK_SIZE
    num_bands: int = NUM_BANDS
    falloff: float = PEAK_FALLOFF
    fps: int = TARGET_FPS
    sample_format: str = PCM16
    width: int = DEFAULT_WINDOW_WIDTH
    height: int = DEFAULT_WINDOW_HEIGHT
    console: bool = False

    def validate(self):
        if self.fps <= 0:
            raise ConfigurationError(f"fps must be positive, got {self.fps}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(
                f"window size must be positive, got {self.width}x{self.height}"
            )
        if self.console and not self.file:
            raise ConfigurationError("console mode needs a file to play")
        return self


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dropviz",
        description="Play an audio file and draw its spectrum as bars. "
                    "In window mode, drop files onto the window to play them.",
    )
    parser.add_argument("file", nargs="?",
                        help="Audio file to start playing (optional in window mode)")
    parser.add_argument("--block-size", type=int, default=None,
                        help="FFT block length, a power of two "
                             f"(default: {BLOCK_SIZE} for pcm16, "
                             f"{BLOCK_SIZE * 4} for bytes)")
    parser.add_argument("--bands", type=int, default=NUM_BANDS,
                        help=f"Number of bars (default: {NUM_BANDS})")
    parser.add_argument("--falloff", type=float, default=PEAK_FALLOFF,
                        help=f"Bar decay per frame (default: {PEAK_FALLOFF:g})")
    parser.add_argument("--fps", type=int, default=TARGET_FPS,
                        help=f"Target frame rate (default: {TARGET_FPS})")
    parser.add_argument("--sample-format", choices=SAMPLE_FORMATS,
                        default=PCM16,
                        help="How decoded bytes become samples (default: pcm16)")
    parser.add_argument("--width", type=int, default=DEFAULT_WINDOW_WIDTH,
                        help=f"Initial window width (default: {DEFAULT_WINDOW_WIDTH})")
    parser.add_argument("--height", type=int, default=DEFAULT_WINDOW_HEIGHT,
                        help="Initial window height, or the bar scale in "
                             f"console mode (default: {DEFAULT_WINDOW_HEIGHT})")
    parser.add_argument("--console", action="store_true",
                        help="Print bars to the terminal instead of opening a window")
    return parser


def parse_args(argv=None) -> EngineConfig:
    args = build_parser().parse_args(argv)
    block_size = args.block_size
    if block_size is None:
        block_size = DEFAULT_BLOCK_SIZES[args.sample_format]
    return EngineConfig(
        file=args.file,
        block_size=block_size,
        num_bands=args.bands,
        falloff=args.falloff,
        fps=args.fps,
        sample_format=args.sample_format,
        width=args.width,
        height=args.height,
        console=args.console,
    )
