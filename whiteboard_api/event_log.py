from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class EventLogger:
    """
    JSON-lines log of AI requests.
    Each entry is appended to <base_dir>/YYYYMMDD.log; image payloads are never written.
    """

    def __init__(self, base_dir: Path, *, enabled: bool = True) -> None:
        self.base_dir = Path(base_dir)
        self.enabled = enabled
        self._lock = threading.Lock()

    def log(self, event: str, payload: Dict[str, Any]) -> Optional[Path]:
        if not self.enabled:
            return None
        now = datetime.now(timezone.utc)
        entry = {
            "ts": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "event": event,
        }
        entry.update(payload)
        line = json.dumps(entry, ensure_ascii=False, default=str)
        path = self.base_dir / (now.strftime("%Y%m%d") + ".log")
        with self._lock:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as fp:
                fp.write(line + "\n")
        return path
