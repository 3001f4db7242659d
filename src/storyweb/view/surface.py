"""Drawing surface contract used by the renderer.

Coordinates passed to drawing calls are in graph space once a transform is
pushed, and in logical (device-independent) pixels otherwise.  Surfaces
apply their own ``pixel_ratio`` so the renderer never deals in device
pixels.  Colours are CSS-style strings (``#rrggbb`` or ``rgba(r,g,b,a)``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Surface(Protocol):
    """A resizable 2D drawing target."""

    @property
    def width(self) -> float: ...

    @property
    def height(self) -> float: ...

    @property
    def pixel_ratio(self) -> float: ...

    def clear(self) -> None: ...

    def push_transform(self, offset_x: float, offset_y: float, scale: float) -> None: ...

    def pop_transform(self) -> None: ...

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
    ) -> None: ...

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
    ) -> None: ...

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
    ) -> None: ...

    def text(
        self,
        x: float,
        y: float,
        text: str,
        *,
        color: str,
        size: float,
        bold: bool = False,
    ) -> None: ...


@dataclass(frozen=True)
class DrawCommand:
    """One recorded drawing call."""

    op: str
    args: dict[str, Any]

    def __getitem__(self, key: str) -> Any:
        return self.args[key]


@dataclass
class RecordingSurface:
    """Surface that records drawing calls instead of rasterizing them.

    Used for headless runs and tests; ``commands`` holds the calls of the
    most recent frame (``clear`` starts a new frame).
    """

    width: float = 800.0
    height: float = 600.0
    pixel_ratio: float = 1.0
    commands: list[DrawCommand] = field(default_factory=list)
    frames: int = 0
    depth: int = 0

    def _record(self, op: str, **args: Any) -> None:
        self.commands.append(DrawCommand(op, args))

    def of(self, op: str) -> list[DrawCommand]:
        return [c for c in self.commands if c.op == op]

    def clear(self) -> None:
        self.commands = []
        self.frames += 1
        self._record("clear")

    def push_transform(self, offset_x: float, offset_y: float, scale: float) -> None:
        self.depth += 1
        self._record("push_transform", offset_x=offset_x, offset_y=offset_y, scale=scale)

    def pop_transform(self) -> None:
        self.depth -= 1
        self._record("pop_transform")

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
        self._record("line", x1=x1, y1=y1, x2=x2, y2=y2, color=color, width=width, dash=dash)

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
        self._record(
            "circle",
            cx=cx,
            cy=cy,
            radius=radius,
            fill=fill,
            stroke=stroke,
            line_width=line_width,
            alpha=alpha,
        )

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
        self._record(
            "rounded_rect",
            x=x,
            y=y,
            w=w,
            h=h,
            corner=corner,
            fill=fill,
            stroke=stroke,
            line_width=line_width,
            alpha=alpha,
        )

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
        self._record("text", x=x, y=y, text=text, color=color, size=size, bold=bold)
