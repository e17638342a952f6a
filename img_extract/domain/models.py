"""Domain model for disk image extraction.

Type-safe objects for partition tables, detected filesystem types and
extraction requests. Nothing here touches the filesystem or spawns
processes; see ``img_extract.storage`` for that.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


# ==============================================================================
# Partition Table Domain
# ==============================================================================


@dataclass(frozen=True)
class Partition:
    """A logical region of a disk image.

    Offsets are expressed in logical blocks; multiply by the table's
    block size to get bytes.
    """

    number: int  # 1-based, unique within the table
    start: int  # First block
    size: int  # Length in blocks
    type: Optional[str] = None  # Partition type as reported by sfdisk

    def start_bytes(self, block_size: int) -> int:
        """Byte offset of the partition within the image."""
        return self.start * block_size

    def size_bytes(self, block_size: int) -> int:
        """Length of the partition in bytes."""
        return self.size * block_size


@dataclass(frozen=True)
class PartitionTable:
    """Partitions read from a disk image plus the logical block size."""

    partitions: tuple[Partition, ...]
    block_size: int = 512
    label: Optional[str] = None  # "dos" or "gpt"
    disk_id: Optional[str] = None

    def get(self, number: int) -> Optional[Partition]:
        """Return the partition with the given number, if any."""
        for partition in self.partitions:
            if partition.number == number:
                return partition
        return None

    @property
    def numbers(self) -> list[int]:
        return [partition.number for partition in self.partitions]


# ==============================================================================
# Filesystem Type Domain
# ==============================================================================


class FsKind(Enum):
    """Filesystem families we know how to extract."""

    FAT = "Fat"
    EXT = "Ext"
    UNKNOWN = "Unknown"


FAT_BLKID_TYPES = frozenset({"vfat", "fat", "fat12", "fat16", "fat32", "msdos"})
EXT_BLKID_TYPES = frozenset({"ext2", "ext3", "ext4"})
EMPTY_FS_DESCRIPTION = "empty or unformatted"


@dataclass(frozen=True)
class FsType:
    """Filesystem type detected by probing a partition image.

    ``detail`` is only set for unknown types and carries the raw blkid
    token (or a description when blkid reported nothing).
    """

    kind: FsKind
    detail: Optional[str] = None

    @classmethod
    def fat(cls) -> FsType:
        return cls(FsKind.FAT)

    @classmethod
    def ext(cls) -> FsType:
        return cls(FsKind.EXT)

    @classmethod
    def unknown(cls, description: str) -> FsType:
        return cls(FsKind.UNKNOWN, description)

    @classmethod
    def from_blkid_type(cls, token: str) -> FsType:
        """Map a ``blkid -s TYPE`` token to a filesystem type.

        Matching is exact and case-sensitive.
        """
        if token in FAT_BLKID_TYPES:
            return cls.fat()
        if token in EXT_BLKID_TYPES:
            return cls.ext()
        if token == "":
            return cls.unknown(EMPTY_FS_DESCRIPTION)
        return cls.unknown(token)

    def is_supported(self) -> bool:
        """Check if this is a known, extractable filesystem type."""
        return self.kind in (FsKind.FAT, FsKind.EXT)

    def __str__(self) -> str:
        if self.kind == FsKind.UNKNOWN:
            return f'{self.kind.value}("{self.detail}")'
        return self.kind.value


# ==============================================================================
# Extraction Request Domain
# ==============================================================================


@dataclass(frozen=True)
class ExtractionRequest:
    """Extract partition ``partition_number`` into ``destination``.

    Unpacks like a ``(number, path)`` tuple so requests and plain pairs
    can be mixed freely.
    """

    partition_number: int
    destination: Path

    def __iter__(self):
        yield self.partition_number
        yield self.destination

    @classmethod
    def parse(cls, value: str) -> ExtractionRequest:
        """Parse a ``N:/some/dir`` string.

        Raises:
            ValueError: If the number is missing or not an integer
        """
        number, sep, destination = value.partition(":")
        if not sep or not destination:
            raise ValueError(f"expected NUMBER:DIRECTORY, got {value!r}")
        try:
            partition_number = int(number)
        except ValueError:
            raise ValueError(f"invalid partition number {number!r}") from None
        if partition_number < 1:
            raise ValueError(f"partition numbers start at 1, got {partition_number}")
        return cls(partition_number, Path(destination))
