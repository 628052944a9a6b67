"""Plan-level confidence with an explainable breakdown."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from travlr.config.settings import ConfidenceSettings
from travlr.domain.enums import AgentStatus, BudgetWarningLevel
from travlr.domain.models import AgentResult, BudgetLedger
from travlr.planner.budget import is_within_budget


def _clamp_unit(value: float) -> float:
    if value < 0:
        return 0.0
    if value > 1:
        return 1.0
    return value


def category_averages(results: Sequence[AgentResult]) -> dict[str, float]:
    """Mean item confidence per executed category that produced items."""
    averages: dict[str, float] = {}
    for result in results:
        if result.status is not AgentStatus.COMPLETED or not result.recommendations:
            continue
        scores = [r.confidence.score for r in result.recommendations]
        averages[result.agent_name.value] = sum(scores) / len(scores)
    return averages


def weighted_base(averages: dict[str, float], weights: dict[str, float]) -> Optional[float]:
    """Weighted mean renormalized over the categories present; ``None`` when empty."""
    total_weight = sum(weights.get(category, 0.0) for category in averages)
    if total_weight <= 0:
        return None
    return sum(avg * weights.get(category, 0.0) for category, avg in averages.items()) / total_weight


def compute_plan_confidence(
    results: Sequence[AgentResult],
    ledger: BudgetLedger,
    geographic_coverage: float,
    settings: Optional[ConfidenceSettings] = None,
) -> dict[str, Any]:
    """Compute the integer plan confidence (0..100) and its breakdown."""
    cfg = settings or ConfidenceSettings()
    averages = category_averages(results)
    base = weighted_base(averages, cfg.weights)
    failed = sum(1 for r in results if r.status is AgentStatus.FAILED)

    if base is None:
        return {
            "confidence": cfg.empty_score,
            "confidence_score": cfg.empty_score / 100,
            "breakdown": {"category_averages": {}, "failed_agents": failed, "reason": "no_results"},
        }

    coverage_bonus = 0.0
    if geographic_coverage > cfg.coverage_threshold:
        span = 100.0 - cfg.coverage_threshold
        coverage_bonus = cfg.coverage_bonus_max * (geographic_coverage - cfg.coverage_threshold) / span

    budget_bonus = cfg.within_budget_bonus if is_within_budget(ledger) else 0.0
    critical = sum(
        1
        for w in ledger.warnings
        if w.level is BudgetWarningLevel.CRITICAL and w.category != "total"
    )
    budget_penalty = critical * cfg.critical_overage_penalty
    failure_penalty = failed * cfg.failed_agent_penalty

    score = _clamp_unit(base + coverage_bonus + budget_bonus - budget_penalty - failure_penalty)
    return {
        "confidence": int(round(score * 100)),
        "confidence_score": round(score, 4),
        "breakdown": {
            "category_averages": {k: round(v, 4) for k, v in averages.items()},
            "weighted_base": round(base, 4),
            "coverage_bonus": round(coverage_bonus, 4),
            "budget_bonus": budget_bonus,
            "budget_penalty": round(budget_penalty, 4),
            "failure_penalty": round(failure_penalty, 4),
            "failed_agents": failed,
        },
    }


__all__ = ["category_averages", "compute_plan_confidence", "weighted_base"]
