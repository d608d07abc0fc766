from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

from .canvas import CanvasSurface, Confirm, Tool
from .errors import InvalidInput
from .mathtext import ResponseDisplay

logger = logging.getLogger(__name__)

ERROR_MESSAGE = "An error occurred. Please try again."
EMPTY_QUESTION_MESSAGE = "Please enter a question."
CLEAR_PROMPT = "Are you sure you want to clear all drawings?"
MIN_SIZE, MAX_SIZE = 1, 50
SNAPSHOT_MAX_SIDE = int(os.getenv("SNAPSHOT_MAX_SIDE", "2048") or 2048)


@runtime_checkable
class AIBackend(Protocol):
    def ask_question(self, question: str, image_data: Optional[str] = None) -> str:
        ...

    def generate_idea(self, image_data: Optional[str] = None) -> str:
        ...


class Whiteboard:
    """Page-level state: tools, canvas, AI panel."""

    def __init__(
        self,
        backend: AIBackend,
        canvas: Optional[CanvasSurface] = None,
        *,
        display: Optional[ResponseDisplay] = None,
        snapshot_max_side: Optional[int] = SNAPSHOT_MAX_SIDE,
    ) -> None:
        self.backend = backend
        self.canvas = canvas or CanvasSurface()
        self.display = display
        self.snapshot_max_side = snapshot_max_side
        self.tool = Tool.DRAW
        self.color = "#000000"
        self.size = 5
        self.loading = False
        self.question = ""
        self.response = ""
        self._drawing = False

    # ------------------------------------------------------------ toolbar
    def set_tool(self, tool: Union[Tool, str]) -> None:
        self.tool = Tool(tool)

    def set_color(self, color: str) -> None:
        self.color = color

    def set_size(self, size: int) -> None:
        self.size = max(MIN_SIZE, min(MAX_SIZE, int(size)))

    def resize(self, width: int, height: int) -> None:
        self.canvas.resize(width, height)

    def clear(self, confirm: Confirm) -> bool:
        return self.canvas.clear(confirm)

    def save(self, directory: Union[str, Path]) -> Optional[Path]:
        return self.canvas.export_png_file(directory)

    # ------------------------------------------------------------- pointer
    def pointer_down(self, x: float, y: float) -> None:
        self._drawing = True
        self.canvas.begin_stroke((x, y), self.tool, self.color, self.size)

    def pointer_move(self, x: float, y: float) -> None:
        if not self._drawing:
            return
        self.canvas.extend_stroke((x, y))

    def pointer_up(self) -> None:
        if not self._drawing:
            return
        self._drawing = False
        self.canvas.end_stroke()

    # Leaving the canvas ends the stroke like a release.
    pointer_out = pointer_up

    # ---------------------------------------------------------------- AI
    def _image_data(self) -> Optional[str]:
        if self.canvas.is_empty():
            return None
        return self.canvas.snapshot_base64(self.snapshot_max_side)

    def _show(self, text: str) -> str:
        self.response = text
        if self.display is not None:
            self.display.update(text)
        return text

    def ask_ai(self, question: Optional[str] = None) -> str:
        if question is not None:
            self.question = question
        if not self.question.strip():
            raise InvalidInput(EMPTY_QUESTION_MESSAGE)
        self.loading = True
        try:
            answer = self.backend.ask_question(self.question, self._image_data())
        except Exception:
            logger.exception("ask_ai failed")
            return self._show(ERROR_MESSAGE)
        finally:
            self.loading = False
        self.question = ""
        return self._show(answer)

    def generate_idea(self) -> str:
        self.loading = True
        try:
            idea = self.backend.generate_idea(self._image_data())
        except Exception:
            logger.exception("generate_idea failed")
            return self._show(ERROR_MESSAGE)
        finally:
            self.loading = False
        return self._show(idea)

    def close(self) -> None:
        if self.display is not None:
            self.display.close()
