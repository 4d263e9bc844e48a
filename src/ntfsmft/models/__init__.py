"""Pydantic models for ntfsmft."""

from ntfsmft.models.error import StructuredError
from ntfsmft.models.metrics import StepMetrics
from ntfsmft.models.record import FlatMftEntry

__all__ = [
    "FlatMftEntry",
    "StepMetrics",
    "StructuredError",
]
