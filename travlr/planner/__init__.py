"""Deterministic geographic and budget analysis."""
