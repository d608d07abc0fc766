"""
Whiteboard drawing surface and AI panel state.
"""

from .board import AIBackend, Whiteboard
from .canvas import CanvasSurface, StrokeSession, Tool, decode_png_base64, export_file_name
from .errors import AIRequestFailed, InvalidInput, WhiteboardError
from .mathtext import ResponseDisplay, Segment, Typesetter, split_math

__all__ = [
    "AIBackend",
    "AIRequestFailed",
    "CanvasSurface",
    "InvalidInput",
    "ResponseDisplay",
    "Segment",
    "StrokeSession",
    "Tool",
    "Typesetter",
    "Whiteboard",
    "WhiteboardError",
    "decode_png_base64",
    "export_file_name",
    "split_math",
]
