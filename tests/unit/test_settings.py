from __future__ import annotations

from pathlib import Path

from travlr.config.settings import load_settings, resolve_dependency_policy
from travlr.domain.enums import DependencyPolicy


def test_defaults():
    settings = load_settings()
    assert settings.clustering.radius_km == 2.0
    assert settings.feasibility.issue_penalty == 15
    assert settings.budget.warning_ratio == 0.10
    assert settings.budget.top_n["activity"] == 3
    assert settings.confidence.weights["flight"] == 0.30
    assert settings.scheduler.dependency_policy is DependencyPolicy.DEGRADE
    assert settings.scheduler.agent_timeout_seconds is None
    assert settings.persistence.enabled is False


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CLUSTER_RADIUS_KM", "3.5")
    monkeypatch.setenv("BUDGET_CRITICAL_RATIO", "0.5")
    monkeypatch.setenv("AGENT_TIMEOUT_SECONDS", "12")
    monkeypatch.setenv("DEPENDENCY_POLICY", "skip")
    monkeypatch.setenv("PLAN_PERSISTENCE_ENABLED", "true")
    monkeypatch.setenv("PLAN_PERSISTENCE_DB", str(tmp_path / "t.sqlite3"))

    settings = load_settings()

    assert settings.clustering.radius_km == 3.5
    assert settings.budget.critical_ratio == 0.5
    assert settings.scheduler.agent_timeout_seconds == 12
    assert settings.scheduler.dependency_policy is DependencyPolicy.SKIP
    assert settings.persistence.enabled is True
    assert settings.persistence.db_path == Path(tmp_path / "t.sqlite3")


def test_bad_values_fall_back(monkeypatch):
    monkeypatch.setenv("CLUSTER_RADIUS_KM", "wide")
    monkeypatch.setenv("DEPENDENCY_POLICY", "panic")
    assert load_settings().clustering.radius_km == 2.0
    assert resolve_dependency_policy() is DependencyPolicy.DEGRADE


def test_out_of_range_values_fall_back(monkeypatch):
    monkeypatch.setenv("CLUSTER_RADIUS_KM", "0")
    monkeypatch.setenv("MAX_DISTANCE_FROM_HOTEL_KM", "-1")
    monkeypatch.setenv("FEASIBILITY_ISSUE_PENALTY", "-5")
    monkeypatch.setenv("BUDGET_WARNING_RATIO", "nan")

    settings = load_settings()

    assert settings.clustering.radius_km == 2.0
    assert settings.scheduler.max_distance_from_hotel_km == 10.0
    assert settings.feasibility.issue_penalty == 15
    assert settings.budget.warning_ratio == 0.10
