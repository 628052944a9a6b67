"""Runtime configuration helpers."""

from travlr.config.settings import PlannerSettings, load_settings

__all__ = ["PlannerSettings", "load_settings"]
