"""Plan confidence scoring tests."""

from __future__ import annotations

import pytest

from travlr.config.settings import ConfidenceSettings
from travlr.domain.enums import AgentRole, AgentStatus, BudgetWarningLevel
from travlr.domain.models import (
    AgentResult,
    BudgetLedger,
    BudgetWarning,
    CanonicalRecommendation,
    ConfidenceInfo,
)
from travlr.orchestration.confidence import category_averages, compute_plan_confidence, weighted_base


def _completed(role: AgentRole, *scores: float) -> AgentResult:
    records = tuple(
        CanonicalRecommendation(category=role, name=f"{role.value}-{i}", confidence=ConfidenceInfo(score=s))
        for i, s in enumerate(scores)
    )
    return AgentResult(agent_name=role, status=AgentStatus.COMPLETED, success=True, recommendations=records)


def _failed(role: AgentRole) -> AgentResult:
    return AgentResult(agent_name=role, status=AgentStatus.FAILED, error="boom")


def test_weighted_base_matches_category_weights():
    averages = {"flight": 0.8, "accommodation": 0.9, "activity": 0.7, "restaurant": 0.6}
    assert weighted_base(averages, ConfidenceSettings().weights) == pytest.approx(0.775)


def test_weighted_base_renormalizes_over_present_categories():
    weights = ConfidenceSettings().weights
    assert weighted_base({"activity": 0.6}, weights) == pytest.approx(0.6)
    assert weighted_base({}, weights) is None


def test_category_averages_skip_failed_and_empty():
    results = [
        _completed(AgentRole.FLIGHT, 0.8, 0.6),
        _completed(AgentRole.RESTAURANT),
        _failed(AgentRole.ACTIVITY),
    ]
    assert category_averages(results) == {"flight": pytest.approx(0.7)}


def test_no_results_scores_fifty():
    outcome = compute_plan_confidence([AgentResult.skipped(AgentRole.FLIGHT)], BudgetLedger(), 0)
    assert outcome["confidence"] == 50


def test_coverage_bonus_applies_above_threshold():
    results = [_completed(AgentRole.ACTIVITY, 0.7)]
    low = compute_plan_confidence(results, BudgetLedger(), 50)
    high = compute_plan_confidence(results, BudgetLedger(), 100)
    assert low["confidence"] == 70
    assert high["confidence"] == 75
    assert high["breakdown"]["coverage_bonus"] == pytest.approx(0.05)


def test_failed_agents_and_critical_overage_are_penalized():
    ledger = BudgetLedger(
        has_user_budget=True,
        per_category_hint={"activity": 100},
        per_category_estimate={"activity": 200},
        warnings=(
            BudgetWarning(
                category="activity",
                estimate=200,
                hint=100,
                overage_ratio=1.0,
                level=BudgetWarningLevel.CRITICAL,
            ),
        ),
    )
    results = [_completed(AgentRole.ACTIVITY, 0.9), _failed(AgentRole.RESTAURANT)]
    outcome = compute_plan_confidence(results, ledger, 0)
    assert outcome["confidence"] == 70
    assert outcome["breakdown"]["failed_agents"] == 1
    assert outcome["breakdown"]["budget_bonus"] == 0.0


def test_within_budget_bonus():
    ledger = BudgetLedger(
        has_user_budget=True,
        per_category_hint={"flight": 500},
        per_category_estimate={"flight": 400},
    )
    outcome = compute_plan_confidence([_completed(AgentRole.FLIGHT, 0.8)], ledger, 0)
    assert outcome["confidence"] == 85


def test_score_is_clamped():
    results = [_completed(AgentRole.FLIGHT, 0.05)] + [_failed(r) for r in (AgentRole.ACTIVITY, AgentRole.RESTAURANT)]
    assert compute_plan_confidence(results, BudgetLedger(), 0)["confidence"] == 0
