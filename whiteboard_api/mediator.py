# -*- coding: utf-8 -*-
from __future__ import annotations
import base64, binascii, logging, os, time
from typing import Any, Callable, Dict, List, Optional

from whiteboard.errors import AIRequestFailed, InvalidInput

from whiteboard_api import prompting
from whiteboard_api.event_log import EventLogger
from whiteboard_api.llm_client import call_chat_completions
from whiteboard_api.prompting import Operation

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(8 * 1024 * 1024)) or 8 * 1024 * 1024)
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

Invoke = Callable[[List[Dict[str, Any]]], Any]


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj[key]
    return getattr(obj, key)


def extract_text(resp: Any, fallback: str) -> str:
    """First choice's message text, or the fallback when there is none."""
    choices = _get(resp, "choices")  # missing -> malformed response
    if not choices:
        return fallback
    message = _get(choices[0], "message") if choices[0] is not None else None
    content = _get(message, "content") if message is not None else None
    if not isinstance(content, str) or not content:
        return fallback
    return content


def validate_image(image_data: Optional[str], max_bytes: int = MAX_IMAGE_BYTES) -> Optional[str]:
    """
    Check an optional canvas snapshot before any request is built.
    Accepts bare base64 or a data URL; returns the bare base64 payload.
    """
    if not image_data:
        return None
    b64 = image_data
    if b64.startswith("data:"):
        header, _, b64 = b64.partition(",")
        if "image/png" not in header:
            raise InvalidInput("imageData must be a PNG image")
    try:
        raw = base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidInput("imageData is not valid base64") from exc
    if not raw.startswith(PNG_SIGNATURE):
        raise InvalidInput("imageData must be a PNG image")
    if len(raw) > max_bytes:
        raise InvalidInput(f"imageData too large: {len(raw)} bytes (limit {max_bytes})")
    return b64


class AIRequestMediator:
    """
    Builds one of the fixed prompts and forwards it as a single chat completion.
    Every failure past input validation surfaces as AIRequestFailed.
    """

    def __init__(
        self,
        invoke: Invoke = call_chat_completions,
        *,
        events: Optional[EventLogger] = None,
        max_image_bytes: int = MAX_IMAGE_BYTES,
    ) -> None:
        self.invoke = invoke
        self.events = events
        self.max_image_bytes = max_image_bytes

    def ask_question(self, question: str, image_data: Optional[str] = None) -> str:
        if not question or not question.strip():
            raise InvalidInput("Question is required")
        return self._run(Operation.ASK, question, image_data)

    def generate_idea(self, image_data: Optional[str] = None) -> str:
        return self._run(Operation.IDEA, None, image_data)

    def _run(self, operation: Operation, question: Optional[str], image_data: Optional[str]) -> str:
        image = validate_image(image_data, self.max_image_bytes)
        started = time.perf_counter()
        try:
            messages = prompting.build_messages(operation, question, image)
            resp = self.invoke(messages)
            text = extract_text(resp, prompting.FALLBACKS[operation])
        except Exception as exc:
            logger.error("%s request failed: %s", operation.value, exc, exc_info=True)
            self._event(operation, image, started, outcome="error", error=f"{exc.__class__.__name__}: {exc}")
            raise AIRequestFailed(operation.value) from exc
        self._event(operation, image, started, outcome="ok", chars=len(text))
        return text

    def _event(self, operation: Operation, image: Optional[str], started: float, **extra: Any) -> None:
        if self.events is None:
            return
        try:
            self.events.log("ai_request", {
                "operation": operation.value,
                "has_image": bool(image),
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 1),
                **extra,
            })
        except Exception as exc:
            # Logging failures should not impact primary flow
            logger.warning("event log write failed: %s", exc)
