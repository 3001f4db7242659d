"""Viewport transform: pan offset and uniform zoom between screen and graph space.

``screen = graph * scale + offset`` and its inverse.  Every zoom keeps the
graph point under a fixed pivot in place: the cursor for wheel zoom, the
surface centre for the zoom buttons.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from storyweb.config.models import ViewportConfig

if TYPE_CHECKING:
    from storyweb.infrastructure.scheduler import FrameScheduler


@dataclass
class ViewportTransform:
    """Mutable pan/zoom state shared by the renderer and the controller."""

    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = 1.0

    def screen_to_graph(self, sx: float, sy: float) -> tuple[float, float]:
        return (sx - self.offset_x) / self.scale, (sy - self.offset_y) / self.scale

    def graph_to_screen(self, gx: float, gy: float) -> tuple[float, float]:
        return gx * self.scale + self.offset_x, gy * self.scale + self.offset_y

    def zoomed_about(self, px: float, py: float, new_scale: float) -> ViewportTransform:
        """Return the transform at *new_scale* that keeps ``(px, py)`` fixed."""
        ratio = new_scale / self.scale
        return ViewportTransform(
            offset_x=px - (px - self.offset_x) * ratio,
            offset_y=py - (py - self.offset_y) * ratio,
            scale=new_scale,
        )

    def copy(self) -> ViewportTransform:
        return replace(self)

    def assign(self, other: ViewportTransform) -> None:
        """Overwrite this transform in place, keeping shared references valid."""
        self.offset_x = other.offset_x
        self.offset_y = other.offset_y
        self.scale = other.scale


def clamp_scale(scale: float, config: ViewportConfig) -> float:
    return max(config.min_scale, min(config.max_scale, scale))


def wheel_zoom(
    transform: ViewportTransform,
    px: float,
    py: float,
    delta_y: float,
    config: ViewportConfig,
) -> ViewportTransform:
    """Zoom about the cursor; positive *delta_y* (scrolling down) zooms out."""
    factor = config.wheel_zoom_out if delta_y > 0 else config.wheel_zoom_in
    return transform.zoomed_about(px, py, clamp_scale(transform.scale * factor, config))


def button_zoom(
    transform: ViewportTransform,
    width: float,
    height: float,
    *,
    zoom_in: bool,
    config: ViewportConfig,
) -> ViewportTransform:
    """Target transform for the zoom buttons, pivoting on the surface centre."""
    if zoom_in:
        new_scale = min(config.max_scale, transform.scale * config.button_zoom_factor)
    else:
        new_scale = max(config.min_scale, transform.scale / config.button_zoom_factor)
    return transform.zoomed_about(width / 2, height / 2, new_scale)


def fit_transform(
    points: Iterable[tuple[float, float]],
    width: float,
    height: float,
    config: ViewportConfig,
) -> ViewportTransform | None:
    """Transform that frames every point, or None when there are none.

    The bounding box gets ``fit_padding`` on every side and the scale never
    exceeds ``fit_max_scale``, so a handful of nodes is not blown up.  It
    stays within ``[min_scale, max_scale]`` even when the padding leaves no
    room on a narrow surface.
    """
    xs: list[float] = []
    ys: list[float] = []
    for x, y in points:
        xs.append(x)
        ys.append(y)
    if not xs:
        return None

    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)
    graph_w = (max_x - min_x) or 1.0
    graph_h = (max_y - min_y) or 1.0
    pad = config.fit_padding
    # Padding can eat the whole surface; never drop below min_scale.
    scale = clamp_scale(
        min(
            (width - pad * 2) / graph_w,
            (height - pad * 2) / graph_h,
            config.fit_max_scale,
        ),
        config,
    )
    center_x = (min_x + max_x) / 2
    center_y = (min_y + max_y) / 2
    return ViewportTransform(
        offset_x=width / 2 - center_x * scale,
        offset_y=height / 2 - center_y * scale,
        scale=scale,
    )


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


class ZoomAnimator:
    """Animates a transform toward a target, one step per frame.

    Starting a new animation cancels the pending step of the previous one,
    so the latest request always wins.
    """

    def __init__(
        self,
        transform: ViewportTransform,
        scheduler: FrameScheduler,
        *,
        duration_ms: float = 200.0,
        on_frame: Callable[[], None] | None = None,
    ) -> None:
        self._transform = transform
        self._scheduler = scheduler
        self.duration_ms = duration_ms
        self._on_frame = on_frame
        self._handle: int | None = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        self._scheduler.cancel(self._handle)
        self._handle = None

    def animate_to(self, target: ViewportTransform) -> None:
        self.cancel()
        start = self._transform.copy()
        start_time = self._scheduler.now
        t = self._transform

        def step(now: float) -> None:
            if self.duration_ms <= 0:
                progress = 1.0
            else:
                progress = min(1.0, (now - start_time) / self.duration_ms)
            if progress >= 1:
                t.assign(target)
            else:
                ease = ease_out_cubic(progress)
                t.scale = start.scale + (target.scale - start.scale) * ease
                t.offset_x = start.offset_x + (target.offset_x - start.offset_x) * ease
                t.offset_y = start.offset_y + (target.offset_y - start.offset_y) * ease
            if self._on_frame is not None:
                self._on_frame()
            if progress < 1:
                self._handle = self._scheduler.request(step)
            else:
                self._handle = None

        self._handle = self._scheduler.request(step)
