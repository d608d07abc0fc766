from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, runtime_checkable

logger = logging.getLogger(__name__)

# Same delimiter set the typesetter is configured with (longest first).
DISPLAY_DELIMS = [("$$", "$$"), ("\\[", "\\]")]
INLINE_DELIMS = [("$", "$"), ("\\(", "\\)")]


@dataclass(frozen=True)
class Segment:
    kind: str  # "text" | "inline" | "display"
    value: str


def _find_close(text: str, close: str, start: int) -> int:
    i = start
    while True:
        j = text.find(close, i)
        if j == -1:
            return -1
        if close == "$" and j > 0 and text[j - 1] == "\\":
            i = j + 1
            continue
        return j


def split_math(text: str) -> List[Segment]:
    """
    Split model output into plain text and math segments.
    Unterminated delimiters are kept as text; ``\\$`` is a literal dollar.
    """
    out: List[Segment] = []
    buf: List[str] = []
    i, n = 0, len(text or "")

    def flush() -> None:
        if buf:
            out.append(Segment("text", "".join(buf)))
            buf.clear()

    while i < n:
        if text.startswith("\\$", i):
            buf.append("$")
            i += 2
            continue
        matched = False
        for kind, delims in (("display", DISPLAY_DELIMS), ("inline", INLINE_DELIMS)):
            for open_, close in delims:
                if not text.startswith(open_, i):
                    continue
                j = _find_close(text, close, i + len(open_))
                body = text[i + len(open_):j] if j != -1 else ""
                if j == -1 or not body.strip():
                    continue
                flush()
                out.append(Segment(kind, body))
                i = j + len(close)
                matched = True
                break
            if matched:
                break
        if not matched:
            buf.append(text[i])
            i += 1
    flush()
    return out


def has_math(text: str) -> bool:
    return any(seg.kind != "text" for seg in split_math(text))


@runtime_checkable
class Typesetter(Protocol):
    def is_ready(self) -> bool:
        ...

    def typeset(self, segments: Sequence[Segment]) -> None:
        ...


class ResponseDisplay:
    """
    Response area: keeps the latest text and renders its math once the
    typesetter has finished loading. Polling is bounded and the pending task
    is cancelled on a new update or on ``close``.
    """

    def __init__(
        self,
        typesetter: Optional[Typesetter] = None,
        *,
        settle_delay: float = 0.15,
        interval: float = 0.1,
        max_attempts: int = 50,
    ) -> None:
        self.typesetter = typesetter
        self.settle_delay = settle_delay
        self.interval = interval
        self.max_attempts = max_attempts
        self.text = ""
        self.segments: List[Segment] = []
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def update(self, text: str) -> None:
        """
        Replace the shown text and typeset it. Inside a running event loop this
        schedules a task; otherwise the bounded poll runs inline.
        """
        self.text = text or ""
        self.segments = split_math(self.text)
        self._cancel()
        if not self.text or self.typesetter is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.typeset_blocking()
            return
        self._task = loop.create_task(self.typeset())

    def _try_render(self, segments: Sequence[Segment]) -> Optional[bool]:
        """True/False once the typesetter was ready, None while it is still loading."""
        if not self.typesetter.is_ready():
            return None
        try:
            self.typesetter.typeset(segments)
        except Exception as exc:
            logger.warning("typeset failed: %s", exc)
            return False
        return True

    async def typeset(self) -> bool:
        if self.typesetter is None:
            return False
        segments = list(self.segments)
        await asyncio.sleep(self.settle_delay)
        for _ in range(self.max_attempts):
            done = self._try_render(segments)
            if done is not None:
                return done
            await asyncio.sleep(self.interval)
        logger.info("typesetter not ready after %d attempts", self.max_attempts)
        return False

    def typeset_blocking(self) -> bool:
        if self.typesetter is None:
            return False
        segments = list(self.segments)
        time.sleep(self.settle_delay)
        for _ in range(self.max_attempts):
            done = self._try_render(segments)
            if done is not None:
                return done
            time.sleep(self.interval)
        logger.info("typesetter not ready after %d attempts", self.max_attempts)
        return False

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def close(self) -> None:
        self._cancel()
