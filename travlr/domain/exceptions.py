"""Domain semantic exceptions."""

from __future__ import annotations

from typing import Iterable


class DomainError(Exception):
    """Base domain exception."""


class NormalizationError(DomainError):
    """Raised when a raw agent item cannot be mapped to the canonical schema."""

    def __init__(self, message: str, fields: Iterable[str] = ()):
        self.fields = list(fields)
        suffix = f" (fields: {', '.join(self.fields)})" if self.fields else ""
        super().__init__(f"{message}{suffix}")


class InvalidAgentSubset(DomainError):
    """Raised when an agent subset names unknown agents."""

    def __init__(self, unknown: Iterable[str]):
        self.unknown = sorted(set(unknown))
        super().__init__(f"Unknown agents in subset: {', '.join(self.unknown)}")


class SchedulerError(DomainError):
    """Raised on control-flow faults in phase resolution or execution."""


class DependencyUnmetWarning(UserWarning):
    """A phase ran (or was skipped) while some of its dependencies were not selected."""

    def __init__(self, phase: str, missing: Iterable[str]):
        self.phase = phase
        self.missing = list(missing)
        super().__init__(
            f"Phase '{phase}' depends on unselected agents: {', '.join(self.missing)}"
        )

    def to_dict(self) -> dict:
        return {"phase": self.phase, "missing": list(self.missing), "message": str(self)}
