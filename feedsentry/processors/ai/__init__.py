"""Remote classification: RPC client, response mapping and batched dispatch."""

from .base import ClassificationApiError, ClassificationClient
from .dispatcher import AIDispatchQueue, DispatchJob, apply_ai_result, select_ai_candidates
from .factory import create_classification_client
from .parsing import to_threat
from .scheduler import AsyncioScheduler, DispatchScheduler

__all__ = [
    "AIDispatchQueue",
    "AsyncioScheduler",
    "ClassificationApiError",
    "ClassificationClient",
    "DispatchJob",
    "DispatchScheduler",
    "apply_ai_result",
    "create_classification_client",
    "select_ai_candidates",
    "to_threat",
]
