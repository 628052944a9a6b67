from __future__ import annotations

import asyncio
import io
import json

from travlr.agents.mock import mock_agents
from travlr.infrastructure.logging import StructuredLogger
from travlr.orchestration.scheduler import PhaseScheduler


def _events(buffer: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in buffer.getvalue().splitlines()]


def test_events_carry_trace_id_and_duration():
    buffer = io.StringIO()
    logger = StructuredLogger(trace_id="run-1", output=buffer)
    logger.phase_start("flights")
    logger.phase_end("flights", skipped=True)
    logger.error("flight", "boom")

    events = _events(buffer)
    assert [e["event"] for e in events] == ["phase_start", "phase_end", "error"]
    assert all(e["trace_id"] == "run-1" for e in events)
    assert events[1]["duration_ms"] >= 0
    assert events[2]["node"] == "flight"


def test_scheduler_logs_each_phase_and_agent(paris_criteria):
    buffer = io.StringIO()
    logger = StructuredLogger(trace_id="run-2", output=buffer)
    asyncio.run(PhaseScheduler(mock_agents()).execute(paris_criteria, logger=logger))

    events = _events(buffer)
    phases = [e["phase"] for e in events if e["event"] == "phase_end"]
    agents = [e["agent"] for e in events if e["event"] == "agent_call"]
    assert phases == ["accommodation_first", "flights", "experiences"]
    assert agents == ["accommodation", "flight", "activity", "restaurant"]
