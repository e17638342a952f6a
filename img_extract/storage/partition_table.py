"""Partition table reading for disk images.

The table is read with ``sfdisk --json`` which understands both MBR
("dos") and GPT labels and works on regular image files as well as
block devices. Offsets are reported in logical blocks (sectors).
"""
from __future__ import annotations

import json
import re
from typing import Any

from img_extract.domain.models import Partition, PartitionTable
from img_extract.logging import LoggerFactory

from .commands import PathLike, read_command
from .disk import normalize_disk_id
from .exceptions import DiskError


log = LoggerFactory.for_disk()

DEFAULT_BLOCK_SIZE = 512

_PARTITION_NUMBER_RE = re.compile(r"(\d+)$")


def partition_number_from_node(node: str) -> int:
    """Return the partition number encoded at the end of an sfdisk node name.

    ``disk.img2`` -> 2, ``/dev/mmcblk0p1`` -> 1.
    """
    match = _PARTITION_NUMBER_RE.search(node)
    if not match:
        raise DiskError(f"unable to determine partition number from {node!r}")
    return int(match.group(1))


def parse_sfdisk_json(output: str) -> PartitionTable:
    """Parse the output of ``sfdisk --json`` into a partition table."""
    try:
        data = json.loads(output)
    except json.JSONDecodeError as error:
        raise DiskError("unable to parse sfdisk output", cause=error) from error

    table: Any = data.get("partitiontable") if isinstance(data, dict) else None
    if not isinstance(table, dict):
        raise DiskError("sfdisk output has no partition table")

    block_size = int(table.get("sectorsize") or DEFAULT_BLOCK_SIZE)
    partitions = []
    for entry in table.get("partitions") or []:
        try:
            partitions.append(
                Partition(
                    number=partition_number_from_node(str(entry["node"])),
                    start=int(entry["start"]),
                    size=int(entry["size"]),
                    type=entry.get("type"),
                )
            )
        except (KeyError, TypeError, ValueError) as error:
            raise DiskError(f"invalid partition entry {entry!r}", cause=error) from error

    disk_id = table.get("id")
    return PartitionTable(
        partitions=tuple(partitions),
        block_size=block_size,
        label=table.get("label"),
        disk_id=normalize_disk_id(disk_id) if disk_id else None,
    )


def read_partition_table(path: PathLike) -> PartitionTable:
    """Read the partition table of a disk image or device."""
    output = read_command(
        ["sfdisk", "--json", path],
        context=f"unable to read partition table (disk: {path})",
    )
    table = parse_sfdisk_json(output)
    log.debug(
        f"Read {table.label or 'unknown'} partition table from {path}: "
        f"partitions={table.numbers}, block_size={table.block_size}"
    )
    return table
