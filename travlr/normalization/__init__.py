"""Agent output normalization."""

from travlr.normalization.normalizer import (
    NormalizationBatch,
    NormalizationDefaults,
    normalize,
    normalize_batch,
)

__all__ = ["NormalizationBatch", "NormalizationDefaults", "normalize", "normalize_batch"]
