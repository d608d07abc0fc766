from __future__ import annotations


class WhiteboardError(Exception):
    """Base class for errors raised by the whiteboard and its AI gateway."""


class InvalidInput(WhiteboardError):
    """User input rejected before any request was built."""


class AIRequestFailed(WhiteboardError):
    """The LLM call path failed; the cause is chained as ``__cause__``."""

    def __init__(self, operation: str, message: str = "AI request failed") -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation
