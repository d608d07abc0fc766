import os
from types import SimpleNamespace

import pytest

# Keep the app's module-level event logger quiet during tests.
os.environ.setdefault("LOG_IO", "false")

from whiteboard import CanvasSurface


def _completion(content):
    """Minimal stand-in for an openai ChatCompletion."""
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture
def completion():
    return _completion


@pytest.fixture
def canvas():
    return CanvasSurface(120, 80)


@pytest.fixture
def drawn_canvas(canvas):
    canvas.begin_stroke((10, 40), "draw", "#ff0000", 6)
    canvas.extend_stroke((60, 40))
    canvas.end_stroke()
    return canvas


@pytest.fixture
def png_b64(drawn_canvas):
    return drawn_canvas.export_png_base64()
