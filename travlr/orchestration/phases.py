"""Static execution phases and dependency resolution."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from travlr.domain.enums import AGENT_ROLE_LIST, AgentRole
from travlr.domain.exceptions import InvalidAgentSubset, SchedulerError


class Phase(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    agents: tuple[AgentRole, ...]
    parallel: bool = False
    dependencies: tuple[AgentRole, ...] = ()
    description: str = ""


DEFAULT_PHASES: tuple[Phase, ...] = (
    Phase(
        name="accommodation_first",
        agents=(AgentRole.ACCOMMODATION,),
        description="Find accommodation first to anchor the trip geographically",
    ),
    Phase(
        name="flights",
        agents=(AgentRole.FLIGHT,),
        dependencies=(AgentRole.ACCOMMODATION,),
        description="Find flights once lodging is known",
    ),
    Phase(
        name="experiences",
        agents=(AgentRole.ACTIVITY, AgentRole.RESTAURANT),
        dependencies=(AgentRole.ACCOMMODATION, AgentRole.FLIGHT),
        description="Find activities, then restaurants near them",
    ),
)


def resolve_phase_order(phases: Sequence[Phase]) -> list[Phase]:
    """Topologically order phases, stable by declaration order.

    Raises ``SchedulerError`` on duplicate phase names or agents, dependencies on
    agents no phase owns, and dependency cycles.
    """
    owner: dict[AgentRole, str] = {}
    names: set[str] = set()
    for phase in phases:
        if phase.name in names:
            raise SchedulerError(f"Duplicate phase name: {phase.name}")
        names.add(phase.name)
        for agent in phase.agents:
            if agent in owner:
                raise SchedulerError(
                    f"Agent '{agent.value}' appears in phases '{owner[agent]}' and '{phase.name}'"
                )
            owner[agent] = phase.name

    for phase in phases:
        unknown = [dep.value for dep in phase.dependencies if dep not in owner]
        if unknown:
            raise SchedulerError(f"Phase '{phase.name}' depends on unknown agents: {', '.join(unknown)}")

    ordered: list[Phase] = []
    placed: set[str] = set()
    remaining = list(phases)
    while remaining:
        for phase in remaining:
            if {owner[dep] for dep in phase.dependencies} <= placed:
                ordered.append(phase)
                placed.add(phase.name)
                remaining.remove(phase)
                break
        else:
            stuck = ", ".join(p.name for p in remaining)
            raise SchedulerError(f"Dependency cycle among phases: {stuck}")
    return ordered


def validate_agent_subset(subset: Optional[Iterable[str]]) -> Optional[frozenset[AgentRole]]:
    """Map a caller subset to roles; ``None`` or empty selects every agent."""
    if subset is None:
        return None
    names = [str(name).strip().lower() for name in subset]
    if not names:
        return None
    unknown = [name for name in names if name not in AGENT_ROLE_LIST]
    if unknown:
        raise InvalidAgentSubset(unknown)
    return frozenset(AgentRole(name) for name in names)


__all__ = ["DEFAULT_PHASES", "Phase", "resolve_phase_order", "validate_agent_subset"]
