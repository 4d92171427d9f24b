"""dropviz entry point.

Decodes an audio file, plays it through the default output device and
draws its spectrum as bars at ~30 FPS.

Modes:
  (default)   pygame window; drop an audio file onto it to play it
  --console   ASCII bars in the terminal for the file given on the
              command line; exits when the track ends

Usage:
    dropviz [FILE] [--bands 80] [--falloff 8] [--fps 30]
    dropviz FILE --console
"""

import signal
import sys
import time

import pygame

from dropviz.audio_sink import AudioSink
from dropviz.config import WINDOW_TITLE, parse_args
from dropviz.errors import DropvizError, UnsupportedFileType
from dropviz.player import Player
from dropviz.renderer import ConsoleRenderer, WindowRenderer
from dropviz.spectrum_engine import SpectrumEngine


def build_player(config) -> Player:
    engine = SpectrumEngine(config.block_size, config.num_bands,
                            config.falloff)
    return Player(engine, sink_factory=AudioSink,
                  sample_format=config.sample_format)


def handle_drop(player: Player, path: str):
    """Load a dropped file; a bad file type is reported and ignored."""
    try:
        player.load(path)
    except UnsupportedFileType as e:
        print(f"[viz] {e}")


def run_window(config):
    """Window mode: frame loop with drag-and-drop until the window closes."""
    print(f"[viz] {config.num_bands} bands, {config.block_size}-sample blocks, "
          f"falloff {config.falloff:g}, {config.fps} FPS")

    with build_player(config) as player:
        pygame.init()
        try:
            screen = pygame.display.set_mode((config.width, config.height),
                                             pygame.RESIZABLE)
            pygame.display.set_caption(WINDOW_TITLE)
            clock = pygame.time.Clock()
            renderer = WindowRenderer(screen)

            if config.file:
                handle_drop(player, config.file)

            running = True
            while running:
                dropped = None
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.DROPFILE and dropped is None:
                        dropped = event.file
                    elif event.type == pygame.VIDEORESIZE:
                        renderer.surface = pygame.display.get_surface()
                if not running:
                    break

                if dropped is not None:
                    handle_drop(player, dropped)

                bars = player.tick(renderer.max_height)
                if bars is None:
                    renderer.draw_idle()
                else:
                    renderer.draw_bars(bars, player.now_playing)
                renderer.present()
                clock.tick(player.frame_rate(config.fps))
        finally:
            print("[viz] Shutting down...")
            pygame.quit()


def run_console(config):
    """Console mode: play one file, print bars, stop at end of track."""
    renderer = ConsoleRenderer(max_height=config.height)
    running = True

    def shutdown(sig, frame):
        nonlocal running
        running = False

    with build_player(config) as player:
        player.load(config.file)
        signal.signal(signal.SIGINT, shutdown)
        signal.signal(signal.SIGTERM, shutdown)
        print("[viz] Console mode, press Ctrl+C to quit")
        try:
            while running:
                t0 = time.monotonic()

                bars = player.tick(renderer.max_height)
                if bars is None:
                    break
                renderer.draw_bars(bars, player.now_playing)
                renderer.present()

                # Sleep remainder of frame
                cap = player.frame_rate(config.fps)
                elapsed = time.monotonic() - t0
                if cap and elapsed < 1.0 / cap:
                    time.sleep(1.0 / cap - elapsed)
        finally:
            renderer.draw_idle()
            print("[viz] Shutting down...")


def main(argv=None):
    try:
        config = parse_args(argv).validate()
        if config.console:
            run_console(config)
        else:
            run_window(config)
    except DropvizError as e:
        sys.exit(f"[viz] error: {e}")
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
