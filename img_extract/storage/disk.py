"""Disk identifier and filesystem formatting helpers.

Operations:
    - get_disk_id(): Read the MBR disk id or GPT disk GUID with sfdisk
    - mkfs_vfat(): Format a device or image file with FAT32
    - mkfs_ext4(): Format a device or image file with ext4

All helpers accept block devices as well as regular image files and
raise ``CommandError`` (a ``DiskError``) when the underlying tool fails.

Example:
    >>> from img_extract.storage.disk import mkfs_ext4
    >>> mkfs_ext4("rootfs.img", "root", ["-d", "staging/"])
"""

from __future__ import annotations

from typing import Sequence

from img_extract.logging import LoggerFactory

from .commands import PathLike, read_command, run_command


log = LoggerFactory.for_disk()

DOS_DISK_ID_PREFIX = "0x"


def normalize_disk_id(disk_id: str) -> str:
    """Strip the ``0x`` prefix sfdisk prints for MBR ("dos") disk ids.

    GPT GUIDs carry no prefix and pass through unchanged.
    """
    if disk_id.startswith(DOS_DISK_ID_PREFIX):
        return disk_id[len(DOS_DISK_ID_PREFIX):]
    return disk_id


def get_disk_id(path: PathLike) -> str:
    """Return the disk id of the provided image or device."""
    disk_id = read_command(
        ["sfdisk", "--disk-id", path],
        context=f"unable to retrieve disk id (disk: {path})",
    )
    return normalize_disk_id(disk_id)


def mkfs_vfat(dev: PathLike, label: str) -> None:
    """Format ``dev`` with FAT32 using volume label ``label``."""
    log.info(f"Creating FAT32 filesystem on {dev} (label={label})")
    run_command(
        ["mkfs.vfat", "-n", label, dev],
        context="unable to create FAT32 filesystem",
    )


def mkfs_ext4(dev: PathLike, label: str, additional_options: Sequence[str] = ()) -> None:
    """Format ``dev`` with ext4 using volume label ``label``.

    ``-F`` is always passed so regular image files are accepted without a
    confirmation prompt. ``additional_options`` are appended verbatim.
    """
    log.info(f"Creating ext4 filesystem on {dev} (label={label})")
    run_command(
        ["mkfs.ext4", "-F", "-L", label, dev],
        extra_args=list(additional_options),
        context="unable to create ext4 filesystem",
    )
