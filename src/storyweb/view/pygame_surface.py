"""Pygame backend: a :class:`Surface` over a pygame surface, plus the viewer loop.

Colours carry alpha, and pygame's primitive draws do not blend, so every
shape is drawn onto a small per-alpha scratch layer and blitted onto the
target.  Coordinates pass through the pushed viewport transform and then
the pixel ratio, so callers work in graph space exactly as with any other
surface.
"""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Callable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from storyweb.view.interaction import CURSOR_POINTER
from storyweb.view.overlay import CHARACTER_KEYS, FILTER_KEYS, OVERLAY_KEY

if TYPE_CHECKING:
    from storyweb.config.models import ViewerConfig
    from storyweb.view.graph_view import GraphView

logger = logging.getLogger(__name__)

type RGBA = tuple[int, int, int, int]

PygameError = pygame.error

BACKGROUND = "#f9fafb"


@lru_cache(maxsize=128)
def parse_color(value: str) -> RGBA:
    """Parse ``#rgb``, ``#rrggbb``, ``#rrggbbaa``, ``rgb(...)`` or ``rgba(...)``."""
    text = value.strip().lower()
    if text.startswith("#"):
        digits = text[1:]
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        if len(digits) not in (6, 8):
            msg = f"Invalid hex colour: {value!r}"
            raise ValueError(msg)
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        a = int(digits[6:8], 16) if len(digits) == 8 else 255
        return r, g, b, a
    if text.startswith(("rgb(", "rgba(")) and text.endswith(")"):
        parts = [p.strip() for p in text[text.index("(") + 1 : -1].split(",")]
        if len(parts) not in (3, 4):
            msg = f"Invalid colour: {value!r}"
            raise ValueError(msg)
        r, g, b = (max(0, min(255, round(float(p)))) for p in parts[:3])
        a = round(max(0.0, min(1.0, float(parts[3]))) * 255) if len(parts) == 4 else 255
        return r, g, b, a
    color = pygame.Color(text)
    return color.r, color.g, color.b, color.a


def with_alpha(value: str, alpha: float) -> RGBA:
    r, g, b, a = parse_color(value)
    return r, g, b, round(a * max(0.0, min(1.0, alpha)))


def dash_segments(
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    pattern: tuple[float, ...],
) -> Iterator[tuple[float, float, float, float]]:
    """Split a line into the "on" runs of a dash *pattern* (on, off, on, ...)."""
    length = math.hypot(x2 - x1, y2 - y1)
    if not pattern or sum(pattern) <= 0 or length == 0:
        yield x1, y1, x2, y2
        return
    ux = (x2 - x1) / length
    uy = (y2 - y1) / length
    pos = 0.0
    i = 0
    while pos < length:
        end = min(pos + pattern[i % len(pattern)], length)
        if i % 2 == 0 and end > pos:
            yield x1 + ux * pos, y1 + uy * pos, x1 + ux * end, y1 + uy * end
        pos = end
        i += 1


class PygameSurface:
    """Drawing surface backed by a pygame ``Surface`` (window or offscreen)."""

    def __init__(
        self,
        target: pygame.Surface,
        *,
        pixel_ratio: float = 1.0,
        background: str = BACKGROUND,
    ) -> None:
        if not pygame.font.get_init():
            pygame.font.init()
        self.target = target
        self._ratio = pixel_ratio
        self._background = parse_color(background)
        self._stack: list[tuple[float, float, float]] = []
        self._fonts: dict[tuple[int, bool], pygame.font.Font] = {}

    @property
    def width(self) -> float:
        return self.target.get_width() / self._ratio

    @property
    def height(self) -> float:
        return self.target.get_height() / self._ratio

    @property
    def pixel_ratio(self) -> float:
        return self._ratio

    # -- transform ------------------------------------------------------

    def _current(self) -> tuple[float, float, float]:
        return self._stack[-1] if self._stack else (0.0, 0.0, 1.0)

    def push_transform(self, offset_x: float, offset_y: float, scale: float) -> None:
        ox, oy, s = self._current()
        self._stack.append((ox + offset_x * s, oy + offset_y * s, s * scale))

    def pop_transform(self) -> None:
        if self._stack:
            self._stack.pop()

    def _point(self, x: float, y: float) -> tuple[float, float]:
        ox, oy, s = self._current()
        return (x * s + ox) * self._ratio, (y * s + oy) * self._ratio

    def _length(self, value: float) -> float:
        return value * self._current()[2] * self._ratio

    def _stroke_px(self, line_width: float) -> int:
        return max(1, round(self._length(line_width)))

    # -- drawing --------------------------------------------------------

    def _layer(
        self,
        rect: pygame.Rect,
        paint: Callable[[pygame.Surface, float, float], None],
    ) -> None:
        """Paint the on-target part of *rect* onto a transparent layer and blend it in.

        *paint* receives the layer and the target coordinates of its top-left
        corner, which it subtracts from every point it draws.
        """
        clipped = rect.clip(self.target.get_rect())
        if clipped.width <= 0 or clipped.height <= 0:
            return
        layer = pygame.Surface(clipped.size, pygame.SRCALPHA)
        paint(layer, clipped.x, clipped.y)
        self.target.blit(layer, clipped.topleft)

    def clear(self) -> None:
        self._stack.clear()
        self.target.fill(self._background)

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: str,
        width: float,
        dash: tuple[float, ...] = (),
    ) -> None:
        rgba = parse_color(color)
        px = self._stroke_px(width)
        scaled_dash = tuple(self._length(d) for d in dash)
        ax, ay = self._point(x1, y1)
        bx, by = self._point(x2, y2)
        left = math.floor(min(ax, bx)) - px
        top = math.floor(min(ay, by)) - px
        rect = pygame.Rect(
            left,
            top,
            math.ceil(abs(bx - ax)) + px * 2 + 1,
            math.ceil(abs(by - ay)) + px * 2 + 1,
        )

        def paint(layer: pygame.Surface, ox: float, oy: float) -> None:
            for sx, sy, ex, ey in dash_segments(ax, ay, bx, by, scaled_dash):
                pygame.draw.line(layer, rgba, (sx - ox, sy - oy), (ex - ox, ey - oy), px)

        self._layer(rect, paint)

    def circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        fill: str | None = None,
        stroke: str | None = None,
        line_width: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        x, y = self._point(cx, cy)
        r = max(1.0, self._length(radius))
        px = self._stroke_px(line_width)
        reach = math.ceil(r) + px + 1
        rect = pygame.Rect(math.floor(x) - reach, math.floor(y) - reach, reach * 2, reach * 2)

        def paint(layer: pygame.Surface, ox: float, oy: float) -> None:
            center = (x - ox, y - oy)
            if fill is not None:
                pygame.draw.circle(layer, with_alpha(fill, alpha), center, r)
            if stroke is not None:
                pygame.draw.circle(layer, with_alpha(stroke, alpha), center, r + px / 2, px)

        self._layer(rect, paint)

    def rounded_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        corner: float,
        *,
        fill: str | None = None,
        stroke: str | None = None,
        line_width: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        left, top = self._point(x, y)
        dw = max(1, round(self._length(w)))
        dh = max(1, round(self._length(h)))
        radius = round(self._length(corner))
        px = self._stroke_px(line_width)
        rect = pygame.Rect(math.floor(left) - px, math.floor(top) - px, dw + px * 2, dh + px * 2)

        def paint(layer: pygame.Surface, ox: float, oy: float) -> None:
            inner = pygame.Rect(rect.x + px - ox, rect.y + px - oy, dw, dh)
            if fill is not None:
                pygame.draw.rect(layer, with_alpha(fill, alpha), inner, 0, radius)
            if stroke is not None:
                pygame.draw.rect(layer, with_alpha(stroke, alpha), inner.inflate(px, px), px, radius)

        self._layer(rect, paint)

    def _font(self, size_px: int, bold: bool) -> pygame.font.Font:
        key = (size_px, bold)
        font = self._fonts.get(key)
        if font is None:
            font = pygame.font.Font(None, size_px)
            font.set_bold(bold)
            self._fonts[key] = font
        return font

    def text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        color: str,
        size: float,
        bold: bool = False,
    ) -> None:
        # pygame's default font sizes by cap height, ~4/3 of a CSS pixel size
        size_px = round(self._length(size) * 4 / 3)
        if size_px < 2 or not text:
            return
        r, g, b, a = parse_color(color)
        rendered = self._font(size_px, bold).render(text, True, (r, g, b))
        if a < 255:
            rendered.set_alpha(a)
        bx, by = self._point(x, y)
        self.target.blit(rendered, rendered.get_rect(midbottom=(round(bx), round(by))))


# ── Snapshots and the interactive window ─────────────────────────────


def save_png(view: GraphView, path: Path, *, width: int, height: int) -> Path:
    """Draw *view* onto an offscreen surface framed to fit and save it as PNG."""
    offscreen = pygame.Surface((width, height), pygame.SRCALPHA)
    view.attach(PygameSurface(offscreen))
    try:
        view.fit_now()
        view.invalidate()
        path.parent.mkdir(parents=True, exist_ok=True)
        pygame.image.save(offscreen, str(path))
    finally:
        view.detach()
    logger.debug("snapshot saved: %s (%dx%d)", path, width, height)
    return path


def _handle_key(view: GraphView, event: pygame.event.Event) -> bool:
    """Apply a key press.  Returns False when the viewer should close."""
    if event.key == pygame.K_ESCAPE:
        return False
    char = event.unicode
    if char in ("+", "="):
        view.zoom_in()
    elif char == "-":
        view.zoom_out()
    elif char == "0":
        view.zoom_fit()
    elif char in FILTER_KEYS:
        view.toggle_filter(FILTER_KEYS[char])
        logger.debug("filter toggled: %s", FILTER_KEYS[char])
    elif char and char in CHARACTER_KEYS:
        index = CHARACTER_KEYS.index(char)
        characters = view.scene_characters
        if index < len(characters):
            view.toggle_character(characters[index].id)
            logger.debug("character toggled: %s", characters[index].id)
    elif char == OVERLAY_KEY:
        view.toggle_overlay()
    return True


def run_viewer(view: GraphView, config: ViewerConfig) -> None:
    """Open a resizable window on *view* and run until it is closed.

    Raises:
        PygameError: When no display is available.
    """
    pygame.init()
    try:
        window = pygame.display.set_mode((config.width, config.height), pygame.RESIZABLE)
        pygame.display.set_caption(config.title)
        view.show_overlay = config.legend
        view.attach(PygameSurface(window))
        clock = pygame.time.Clock()
        cursor = None
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    view.attach(PygameSurface(pygame.display.get_surface()))
                elif event.type == pygame.WINDOWLEAVE:
                    view.controller.pointer_leave()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    view.controller.pointer_down(*event.pos)
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                    view.controller.pointer_up(*event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    view.controller.pointer_move(*event.pos)
                elif event.type == pygame.MOUSEWHEEL:
                    mx, my = pygame.mouse.get_pos()
                    view.controller.wheel(mx, my, -event.y)
                elif event.type == pygame.KEYDOWN and not _handle_key(view, event):
                    running = False

            view.scheduler.run_frame(float(pygame.time.get_ticks()))

            wanted = view.state.cursor
            if wanted != cursor:
                pygame.mouse.set_cursor(
                    pygame.SYSTEM_CURSOR_HAND
                    if wanted == CURSOR_POINTER
                    else pygame.SYSTEM_CURSOR_SIZEALL
                )
                cursor = wanted
            pygame.display.flip()
            clock.tick(config.fps)
    finally:
        view.close()
        view.detach()
        pygame.quit()
