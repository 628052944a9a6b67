"""Budget ledger: per-category estimates, running total and overage warnings.

Hints are informational. Nothing here filters or rejects recommendations.
"""

from __future__ import annotations

from typing import Optional, Sequence

from travlr.config.settings import BudgetSettings
from travlr.domain.enums import AgentRole, BudgetWarningLevel
from travlr.domain.models import BudgetLedger, BudgetWarning, CanonicalRecommendation, TripCriteria


def new_ledger(criteria: TripCriteria) -> BudgetLedger:
    return BudgetLedger(
        has_user_budget=criteria.budget.has_any,
        currency=criteria.currency,
        total_hint=criteria.budget.total,
        per_category_hint=criteria.budget.per_category(),
    )


def estimate_category(
    role: AgentRole | str,
    records: Sequence[CanonicalRecommendation],
    criteria: TripCriteria,
    top_n: Optional[int] = None,
) -> float:
    """Estimated spend for one category.

    Flights scale by travelers, lodging by nights. Activities and dining take
    the first ``top_n`` options in agent order and scale by travelers.
    """
    role = AgentRole(role)
    prices = [r.price.amount for r in records]
    if top_n is not None:
        prices = prices[:top_n]
    subtotal = sum(prices)
    if role is AgentRole.ACCOMMODATION:
        return round(subtotal * criteria.nights, 2)
    return round(subtotal * criteria.travelers, 2)


def _warning_for(
    category: str, estimate: float, hint: float, settings: BudgetSettings
) -> Optional[BudgetWarning]:
    if hint <= 0:
        if estimate <= 0:
            return None
        ratio = float("inf")
    else:
        ratio = (estimate - hint) / hint
    if ratio > settings.critical_ratio:
        level = BudgetWarningLevel.CRITICAL
    elif ratio > settings.warning_ratio:
        level = BudgetWarningLevel.WARNING
    else:
        return None
    return BudgetWarning(
        category=category,
        estimate=estimate,
        hint=hint,
        overage_ratio=ratio if hint <= 0 else round(ratio, 4),
        level=level,
        message=f"{category} estimate {estimate:.2f} exceeds hint {hint:.2f}",
    )


def budget_warnings(ledger: BudgetLedger, settings: Optional[BudgetSettings] = None) -> list[BudgetWarning]:
    cfg = settings or BudgetSettings()
    warnings: list[BudgetWarning] = []
    for category, estimate in ledger.per_category_estimate.items():
        hint = ledger.per_category_hint.get(category)
        if hint is None:
            continue
        warning = _warning_for(category, estimate, hint, cfg)
        if warning is not None:
            warnings.append(warning)
    if ledger.total_hint is not None and ledger.per_category_estimate:
        warning = _warning_for("total", ledger.total_estimate, ledger.total_hint, cfg)
        if warning is not None:
            warnings.append(warning)
    return warnings


def fold_budget(
    ledger: BudgetLedger,
    role: AgentRole | str,
    records: Sequence[CanonicalRecommendation],
    criteria: TripCriteria,
    settings: Optional[BudgetSettings] = None,
) -> BudgetLedger:
    """Return a new ledger with ``role``'s estimate replaced and warnings recomputed."""
    cfg = settings or BudgetSettings()
    role = AgentRole(role)
    estimate = estimate_category(role, records, criteria, cfg.top_n.get(role.value))
    per_category = {**ledger.per_category_estimate, role.value: estimate}
    updated = ledger.model_copy(
        update={
            "per_category_estimate": per_category,
            "total_estimate": round(sum(per_category.values()), 2),
        }
    )
    return updated.model_copy(update={"warnings": tuple(budget_warnings(updated, cfg))})


def is_within_budget(ledger: BudgetLedger) -> bool:
    """True when a user budget exists and no category or the total exceeds its hint."""
    if not ledger.has_user_budget:
        return False
    for category, estimate in ledger.per_category_estimate.items():
        hint = ledger.per_category_hint.get(category)
        if hint is not None and estimate > hint:
            return False
    if ledger.total_hint is not None and ledger.total_estimate > ledger.total_hint:
        return False
    return True


__all__ = [
    "budget_warnings",
    "estimate_category",
    "fold_budget",
    "is_within_budget",
    "new_ledger",
]
