"""Domain models for disk image extraction."""

from .models import (
    ExtractionRequest,
    FsKind,
    FsType,
    Partition,
    PartitionTable,
)

__all__ = [
    "ExtractionRequest",
    "FsKind",
    "FsType",
    "Partition",
    "PartitionTable",
]
