"""Orchestration core: phases, scheduler, synthesis."""

from travlr.orchestration.contracts import TripPlanResponse, TripRequest
from travlr.orchestration.orchestrator import TripOrchestrator, make_orchestrator
from travlr.orchestration.phases import DEFAULT_PHASES, Phase, resolve_phase_order
from travlr.orchestration.scheduler import PhaseScheduler, SchedulerOutcome
from travlr.orchestration.synthesizer import PlanSynthesizer

__all__ = [
    "DEFAULT_PHASES",
    "Phase",
    "PhaseScheduler",
    "PlanSynthesizer",
    "SchedulerOutcome",
    "TripOrchestrator",
    "TripPlanResponse",
    "TripRequest",
    "make_orchestrator",
    "resolve_phase_order",
]
