"""Cache-then-network loading of tenant sites."""

from tenant_scope.hydration.pipeline import (
    HydrationPipeline,
    HydrationResult,
    HydrationSource,
)

__all__ = [
    "HydrationPipeline",
    "HydrationResult",
    "HydrationSource",
]
