"""Structured logging: one JSON line per event."""

from __future__ import annotations

import json
import sys
import time
import uuid
from typing import Any, Optional


class StructuredLogger:
    """Per-run structured logger writing JSON lines tagged with a trace id."""

    def __init__(self, trace_id: Optional[str] = None, output=None):
        self.trace_id = trace_id or str(uuid.uuid4())[:8]
        self._output = output or sys.stderr
        self._timers: dict[str, float] = {}

    def _emit(self, data: dict[str, Any]) -> None:
        data["trace_id"] = self.trace_id
        data["timestamp"] = time.time()
        try:
            line = json.dumps(data, ensure_ascii=False, default=str)
            self._output.write(line + "\n")
            self._output.flush()
        except (OSError, ValueError, TypeError) as exc:
            # fall back to raw stderr
            fallback = {
                "event": "logger_internal_error",
                "trace_id": self.trace_id,
                "timestamp": time.time(),
                "error": str(exc),
            }
            sys.stderr.write(json.dumps(fallback, default=str) + "\n")

    def phase_start(self, phase: str, **extra: Any) -> None:
        self._timers[phase] = time.time()
        self._emit({"event": "phase_start", "phase": phase, **extra})

    def phase_end(self, phase: str, **extra: Any) -> None:
        start = self._timers.pop(phase, time.time())
        duration_ms = round((time.time() - start) * 1000, 1)
        self._emit({"event": "phase_end", "phase": phase, "duration_ms": duration_ms, **extra})

    def agent_call(self, agent: str, **extra: Any) -> None:
        self._emit({"event": "agent_call", "agent": agent, **extra})

    def error(self, node: str, error: str, **extra: Any) -> None:
        self._emit({"event": "error", "node": node, "error": error, **extra})

    def warning(self, node: str, message: str, **extra: Any) -> None:
        self._emit({"event": "warning", "node": node, "message": message, **extra})

    def summary(self, **extra: Any) -> None:
        self._emit({"event": "summary", **extra})


__all__ = ["StructuredLogger"]
