"""Bar-graph renderers: a pygame window and a one-line terminal meter.

Window view:
    One column per band, width // num_bands pixels wide, rising from the
    bottom edge.  Each bar carries a vertical gradient (orange at the top,
    green at the bottom) and a black outline.  The track caption sits at
    the top left.

Idle view:
    "Drop your files to this window!" centred inside a light grey frame
    inset 20 px from the window edges.
"""

import sys

import numpy as np
import pygame

BACKGROUND = (0, 0, 0)
BAR_TOP = (255, 161, 0)      # orange
BAR_BOTTOM = (0, 228, 48)    # green
OUTLINE = (0, 0, 0)
TEXT = (255, 255, 255)
FRAME = (200, 200, 200)

CAPTION_POS = (40, 40)
CAPTION_SIZE = 28
IDLE_TEXT_SIZE = 24
DROPZONE_INSET = 20
IDLE_MESSAGE = "Drop your files to this window!"

GRADIENT_STEPS = 256
CONSOLE_BARS = "▁▂▃▄▅▆▇█"
CONSOLE_WIDTH = 80


def _gradient_column(top, bottom, steps=GRADIENT_STEPS) -> pygame.Surface:
    """1 px wide surface blending `top` into `bottom`."""
    column = pygame.Surface((1, steps))
    for y in range(steps):
        t = y / (steps - 1)
        colour = tuple(int(a + (b - a) * t) for a, b in zip(top, bottom))
        column.set_at((0, y), colour)
    return column


class WindowRenderer:
    """Draws bars and the idle view onto a pygame surface."""

    def __init__(self, surface: pygame.Surface):
        if not pygame.font.get_init():
            pygame.font.init()
        self._surface = surface
        self._gradient = _gradient_column(BAR_TOP, BAR_BOTTOM)
        self._caption_font = pygame.font.Font(None, CAPTION_SIZE)
        self._idle_font = pygame.font.Font(None, IDLE_TEXT_SIZE)

    @property
    def surface(self) -> pygame.Surface:
        return self._surface

    @surface.setter
    def surface(self, surface: pygame.Surface):
        self._surface = surface

    @property
    def max_height(self) -> int:
        """Tallest bar that fits; tracks the current window height."""
        return self._surface.get_height()

    def bar_rects(self, bars) -> list:
        """Screen rectangles for each non-empty bar."""
        width, height = self._surface.get_size()
        column_width = width // max(len(bars), 1)
        rects = []
        for i, value in enumerate(bars):
            bar_height = int(min(max(value, 0), height))
            if bar_height <= 0 or column_width <= 0:
                continue
            rects.append(pygame.Rect(i * column_width, height - bar_height,
                                     column_width, bar_height))
        return rects

    def draw_bars(self, bars, caption: str = ""):
        """Draw one frame of bars plus the now-playing caption."""
        surf = self._surface
        surf.fill(BACKGROUND)

        for rect in self.bar_rects(bars):
            fill = pygame.transform.scale(self._gradient, rect.size)
            surf.blit(fill, rect.topleft)
            pygame.draw.rect(surf, OUTLINE, rect, 1)

        if caption:
            text = self._caption_font.render(caption, True, TEXT)
            surf.blit(text, CAPTION_POS)

    def draw_idle(self, message: str = IDLE_MESSAGE):
        """Draw the drop zone shown while nothing is playing."""
        surf = self._surface
        surf.fill(BACKGROUND)
        width, height = surf.get_size()

        text = self._idle_font.render(message, True, TEXT)
        surf.blit(text, text.get_rect(center=(width // 2, height // 2)))

        inset = DROPZONE_INSET
        frame = pygame.Rect(inset, inset, width - 2 * inset, height - 2 * inset)
        if frame.width > 0 and frame.height > 0:
            pygame.draw.rect(surf, FRAME, frame, 1)

    def present(self):
        pygame.display.flip()


class ConsoleRenderer:
    """Renders bars as a single, continuously rewritten terminal line."""

    def __init__(self, max_height: float, width: int = CONSOLE_WIDTH,
                 out=None):
        self._max_height = max_height
        self._width = width
        self._out = out if out is not None else sys.stdout

    @property
    def max_height(self) -> float:
        return self._max_height

    def format_bars(self, bars) -> str:
        bars = np.asarray(bars, dtype=np.float64)
        # Compress down to the terminal width
        step = max(1, -(-len(bars) // self._width))
        compressed = bars[::step]
        if self._max_height > 0:
            levels = np.ceil(compressed / self._max_height * len(CONSOLE_BARS))
        else:
            levels = np.zeros_like(compressed)
        levels = np.clip(levels, 0, len(CONSOLE_BARS)).astype(int)
        return "".join(CONSOLE_BARS[v - 1] if v > 0 else " " for v in levels)

    def draw_bars(self, bars, caption: str = ""):
        self._out.write(f"\r|{self.format_bars(bars)}|")

    def draw_idle(self, message: str = ""):
        self._out.write(f"\r{message}\n" if message else "\n")

    def present(self):
        self._out.flush()
