"""Lehrauftrags-Verteilung und Rückschreiben der Qualifikationen."""

from .allocator import (
    NO_TEACHER_ASSIGNED,
    Allocation,
    AllocationRun,
    WorkloadAllocator,
    allocate,
    compute_workloads,
)
from .persistence import (
    DataRepository,
    JsonDataRepository,
    MergeResult,
    apply_allocation,
    merge_allocation,
)

__all__ = [
    "NO_TEACHER_ASSIGNED",
    "Allocation",
    "AllocationRun",
    "WorkloadAllocator",
    "allocate",
    "compute_workloads",
    "DataRepository",
    "JsonDataRepository",
    "MergeResult",
    "apply_allocation",
    "merge_allocation",
]
