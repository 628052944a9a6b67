"""Infrastructure helpers."""

from travlr.infrastructure.logging import StructuredLogger

__all__ = ["StructuredLogger"]
