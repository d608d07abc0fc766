# whiteboard_api/llm_client.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import json, os, time
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from openai import OpenAI, APIStatusError, APIConnectionError, RateLimitError
from pathlib import Path

from whiteboard_api.logging_setup import resolve_logs_dir

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")
TIMEOUT = float(os.getenv("OPENAI_TIMEOUT", "60") or 60)
# Extra attempts after the first call; 0 keeps one outbound call per operation.
MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", "0") or 0)
TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.7") or 0.7)
MAX_TOKENS = int(os.getenv("LLM_MAX_TOKENS", "1500") or 1500)

# ---------------------------------------- LLM client helpers ---------------------------------------- #
def _get_client() -> OpenAI:
    api_key  = (os.getenv("OPENAI_API_KEY") or "").strip()
    base_url = (os.getenv("OPENAI_BASE_URL") or "").strip() or None  # Recommended to include /v1
    if not api_key:
        raise HTTPException(503, "OPENAI_API_KEY missing. Set it in .env.")
    # The SDK retries on its own unless told not to; retry policy lives here instead.
    return OpenAI(api_key=api_key, base_url=base_url, timeout=TIMEOUT, max_retries=0)

def _redact(messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Copy of messages with image payloads replaced by their size."""
    out = []
    for m in messages:
        content = m.get("content")
        if isinstance(content, list):
            parts = []
            for p in content:
                if isinstance(p, dict) and p.get("type") == "image_url":
                    url = ((p.get("image_url") or {}).get("url") or "")
                    parts.append({"type": "image_url", "image_url": {"url": f"<{len(url)} chars>"}})
                else:
                    parts.append(p)
            out.append({**m, "content": parts})
        else:
            out.append(m)
    return out

# ---------------------------------------- Logging helpers ---------------------------------------- #
def _maybe_log(debug: Dict[str, Any]) -> Optional[Path]:
    """Persist raw request/response debug data under <LOGS_DIR>/llm when LOG_LLM is enabled."""
    try:
        if os.getenv("LOG_LLM", "").strip() not in ("1", "true", "yes", "on"):
            return None
        log_dir = resolve_logs_dir() / "llm"
        log_dir.mkdir(parents=True, exist_ok=True)
        ts = time.strftime("%Y%m%d_%H%M%S")
        fn = log_dir / f"llm_{ts}_{time.time_ns() % 1_000_000:06d}.json"
        with open(fn, "w", encoding="utf-8") as f:
            json.dump(debug, f, ensure_ascii=False, indent=2, default=str)
        return fn
    except Exception:
        # Logging failures should not impact primary flow
        return None

def call_chat_completions(
    messages: List[Dict[str, Any]],
    model: Optional[str] = None,
    temperature: float = TEMPERATURE,
    max_tokens: int = MAX_TOKENS,
    max_retries: Optional[int] = None,
):
    """Call /v1/chat/completions and return the raw completion object (plain text mode)."""
    client = _get_client()  # Build a fresh client per call to avoid import-time issues
    retries = MAX_RETRIES if max_retries is None else max_retries

    last_err: Optional[Exception] = None
    for attempt in range(retries + 1):
        try:
            resp = client.chat.completions.create(
                model=model or DEFAULT_MODEL,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            _maybe_log({
                "model": model or DEFAULT_MODEL,
                "temperature": temperature,
                "max_tokens": max_tokens,
                "attempt": attempt,
                "messages": _redact(messages),
                "response_dump": resp.model_dump(exclude_none=True) if hasattr(resp, "model_dump") else str(resp),
            })
            return resp
        except (APIConnectionError, RateLimitError) as e:
            last_err = e
        except APIStatusError as e:
            last_err = e
            # Client errors will not improve on retry.
            if getattr(e, "status_code", 500) < 500:
                break
        except Exception as e:
            last_err = e
            break
        if attempt < retries:
            time.sleep(0.8 * (2 ** attempt))

    raise HTTPException(502, f"LLM upstream failed: {last_err}")
