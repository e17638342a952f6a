"""Round-trip tests against the real disk tools.

A disk image with a FAT and an ext4 partition is assembled from
filesystems created with mkfs_vfat/mkfs_ext4, then extracted again and
compared file by file. Skipped when any of the tools is unavailable.
"""

import shutil
import subprocess

import pytest

from img_extract.storage.disk import get_disk_id, mkfs_ext4, mkfs_vfat
from img_extract.storage.exceptions import CommandError, DiskError, UnsupportedFilesystemError
from img_extract.storage.extract import extract_image_partitions


REQUIRED_TOOLS = ("sfdisk", "blkid", "mkfs.vfat", "mkfs.ext4", "mcopy", "debugfs")

pytestmark = pytest.mark.skipif(
    any(shutil.which(tool) is None for tool in REQUIRED_TOOLS),
    reason="requires sfdisk, blkid, mkfs.vfat, mkfs.ext4, mcopy and debugfs",
)

BLOCK = 512
FAT_START, FAT_SIZE = 2048, 64512  # 31.5 MiB, a whole number of 63-sector tracks
EXT_START, EXT_SIZE = 67584, 65536  # 32 MiB
DATA_START, DATA_SIZE = 133120, 8192  # 4 MiB, left unformatted
IMAGE_BLOCKS = 143360


def _write_tree(root, files):
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)


def _blank_file(path, size):
    with open(path, "wb") as f:
        f.truncate(size)


def _splice(image, part_image, start_block):
    with open(image, "r+b") as dst, open(part_image, "rb") as src:
        dst.seek(start_block * BLOCK)
        shutil.copyfileobj(src, dst)


FAT_FILES = {
    "config.txt": b"enable_uart=1\n",
    "overlays/README": b"overlay docs\n" * 50,
}
EXT_FILES = {
    "etc/hostname": b"imgbox\n",
    "usr/share/data.bin": bytes(range(256)) * 64,
}


@pytest.fixture(scope="module", autouse=True)
def mtools_env():
    with pytest.MonkeyPatch.context() as mp:
        mp.setenv("MTOOLS_SKIP_CHECK", "1")
        yield


@pytest.fixture(scope="module")
def disk_image(tmp_path_factory):
    work = tmp_path_factory.mktemp("build")

    fat_image = work / "fat.img"
    _blank_file(fat_image, FAT_SIZE * BLOCK)
    mkfs_vfat(fat_image, "BOOT")
    fat_tree = work / "fat-tree"
    _write_tree(fat_tree, FAT_FILES)
    subprocess.run(
        ["mcopy", "-i", str(fat_image), "-s", str(fat_tree / "config.txt"), str(fat_tree / "overlays"), "::"],
        check=True,
    )

    ext_tree = work / "ext-tree"
    _write_tree(ext_tree, EXT_FILES)
    ext_image = work / "ext.img"
    _blank_file(ext_image, EXT_SIZE * BLOCK)
    mkfs_ext4(ext_image, "root", ["-q", "-d", str(ext_tree)])

    image = work / "disk.img"
    _blank_file(image, IMAGE_BLOCKS * BLOCK)
    layout = (
        "label: dos\n"
        "label-id: 0xdeadbeef\n"
        f"start={FAT_START}, size={FAT_SIZE}, type=c\n"
        f"start={EXT_START}, size={EXT_SIZE}, type=83\n"
        f"start={DATA_START}, size={DATA_SIZE}, type=83\n"
    )
    subprocess.run(["sfdisk", "-q", str(image)], input=layout, text=True, check=True)
    _splice(image, fat_image, FAT_START)
    _splice(image, ext_image, EXT_START)
    return image


def _assert_tree(root, files):
    for relative, content in files.items():
        assert (root / relative).read_bytes() == content


def test_round_trip_fat_and_ext(disk_image, tmp_path):
    temp_dir = tmp_path / "work"
    temp_dir.mkdir()
    boot = tmp_path / "out" / "boot"
    root = tmp_path / "out" / "root"

    table = extract_image_partitions(disk_image, [(2, root), (1, boot)], temp_dir)

    assert table.numbers == [1, 2, 3]
    assert table.block_size == BLOCK
    assert table.get(1).start == FAT_START
    _assert_tree(boot, FAT_FILES)
    _assert_tree(root, EXT_FILES)
    assert list(temp_dir.iterdir()) == []


def test_disk_id(disk_image):
    assert get_disk_id(disk_image) == "deadbeef"


def test_unformatted_partition(disk_image, tmp_path):
    temp_dir = tmp_path / "work"
    temp_dir.mkdir()

    with pytest.raises(DiskError) as excinfo:
        extract_image_partitions(disk_image, [(3, tmp_path / "data")], temp_dir)

    # blkid usually exits non-zero on a zeroed partition instead of reporting
    # an empty type.
    if isinstance(excinfo.value, UnsupportedFilesystemError):
        assert list(temp_dir.iterdir()) == []
    else:
        assert isinstance(excinfo.value, CommandError)
        assert excinfo.value.program == "blkid"
