from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw

Point = Tuple[float, float]
Confirm = Union[bool, Callable[[], bool]]

WHITE = (255, 255, 255, 255)
TRANSPARENT = (0, 0, 0, 0)


class Tool(str, Enum):
    DRAW = "draw"
    ERASE = "erase"


@dataclass
class StrokeSession:
    tool: Tool
    color: Tuple[int, int, int, int]
    width: float
    last: Point


def export_file_name(now: Optional[datetime] = None) -> str:
    """whiteboard_2026-10-19T08-30-00.png (UTC, second precision)."""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H:%M:%S").replace(":", "-")
    return f"whiteboard_{stamp}.png"


class CanvasSurface:
    """
    RGBA pixel buffer with freehand draw/erase strokes.

    The buffer does not exist until the first ``resize``; until then every
    operation is skipped and exports return None.
    """

    def __init__(self, width: Optional[int] = None, height: Optional[int] = None) -> None:
        self._image: Optional[Image.Image] = None
        self._draw: Optional[ImageDraw.ImageDraw] = None
        self._stroke: Optional[StrokeSession] = None
        if width is not None and height is not None:
            self.resize(width, height)

    # ------------------------------------------------------------------ state
    @property
    def ready(self) -> bool:
        return self._image is not None

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        return self._image.size if self._image is not None else None

    @property
    def stroke(self) -> Optional[StrokeSession]:
        return self._stroke

    def image(self) -> Optional[Image.Image]:
        """Copy of the current buffer."""
        return self._image.copy() if self._image is not None else None

    def _fill_white(self) -> None:
        self._draw.rectangle([0, 0, self._image.width, self._image.height], fill=WHITE)

    def resize(self, width: int, height: int) -> None:
        width, height = max(0, int(width)), max(0, int(height))
        self._stroke = None
        # A zero-area viewport (minimised window) leaves the surface without a buffer.
        if width == 0 or height == 0:
            self._image = None
            self._draw = None
            return
        self._image = Image.new("RGBA", (width, height), WHITE)
        self._draw = ImageDraw.Draw(self._image)

    def clear(self, confirm: Confirm) -> bool:
        if self._image is None:
            return False
        ok = confirm() if callable(confirm) else bool(confirm)
        if not ok:
            return False
        self._fill_white()
        return True

    # ---------------------------------------------------------------- strokes
    def begin_stroke(self, point: Point, tool: Union[Tool, str], color: str, width: float) -> None:
        if self._image is None:
            return
        tool = Tool(tool)
        rgb = ImageColor.getrgb(color)[:3]
        self._stroke = StrokeSession(
            tool=tool,
            color=(rgb[0], rgb[1], rgb[2], 255),
            width=float(width),
            last=(float(point[0]), float(point[1])),
        )

    def extend_stroke(self, point: Point) -> None:
        s = self._stroke
        if s is None or self._image is None:
            return
        nxt = (float(point[0]), float(point[1]))
        if s.width > 0:
            fill = TRANSPARENT if s.tool == Tool.ERASE else s.color
            self._segment(s.last, nxt, fill, s.width)
        s.last = nxt

    def end_stroke(self) -> None:
        self._stroke = None

    def _segment(self, a: Point, b: Point, fill, width: float) -> None:
        # ImageDraw writes RGBA values directly, so a transparent fill clears pixels.
        w = max(1, int(round(width)))
        if a != b:
            self._draw.line([a, b], fill=fill, width=w)
        r = width / 2.0
        for x, y in (a, b):
            self._draw.ellipse([x - r, y - r, x + r, y + r], fill=fill)

    # ---------------------------------------------------------------- queries
    def is_empty(self) -> bool:
        if self._image is None:
            return True
        arr = np.asarray(self._image)
        return bool((arr == 255).all())

    def _encode(self, image: Image.Image) -> str:
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return base64.b64encode(buf.getvalue()).decode("ascii")

    def export_png_base64(self) -> Optional[str]:
        if self._image is None:
            return None
        return self._encode(self._image)

    def snapshot_base64(self, max_side: Optional[int] = None) -> Optional[str]:
        """PNG payload for AI requests, downscaled when the longer side exceeds max_side."""
        if self._image is None:
            return None
        if not max_side or max(self._image.size) <= max_side:
            return self._encode(self._image)
        small = self._image.copy()
        small.thumbnail((max_side, max_side), Image.Resampling.LANCZOS)
        return self._encode(small)

    def export_png_file(self, directory: Union[str, Path], suggested_name: Optional[str] = None) -> Optional[Path]:
        if self._image is None:
            return None
        d = Path(directory)
        d.mkdir(parents=True, exist_ok=True)
        path = d / (suggested_name or export_file_name())
        self._image.save(path, format="PNG")
        return path


def decode_png_base64(payload: str) -> Image.Image:
    """Inverse of ``export_png_base64``; accepts an optional data-URL prefix."""
    if payload.startswith("data:"):
        payload = payload.split(",", 1)[1]
    img = Image.open(io.BytesIO(base64.b64decode(payload)))
    img.load()
    return img
