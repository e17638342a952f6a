"""
Pytest configuration and shared fixtures for img-extract tests.

This module provides common fixtures and utilities used across all test modules.
"""

import contextlib
import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Tuple
from unittest.mock import Mock

# Settings are loaded when img_extract is first imported; point them at an
# empty location so a developer's own settings.json never reaches the tests.
os.environ["IMG_EXTRACT_SETTINGS_PATH"] = str(
    Path(tempfile.mkdtemp(prefix="img-extract-tests-")) / "settings.json"
)

import pytest  # noqa: E402
from loguru import logger  # noqa: E402

from img_extract.config import settings  # noqa: E402
from img_extract.domain.models import Partition, PartitionTable  # noqa: E402


# ==============================================================================
# Subprocess Mock Fixtures
# ==============================================================================


def completed(returncode: int = 0, stdout: bytes = b"", stderr: bytes = b"") -> Mock:
    """Build a fake subprocess.CompletedProcess."""
    result = Mock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


@pytest.fixture
def mock_subprocess_run(mocker):
    """
    Fixture providing a mock for subprocess.run that succeeds with no output.

    Returns:
        Mock object for subprocess.run
    """
    return mocker.patch("subprocess.run", return_value=completed())


@pytest.fixture
def capture_subprocess_calls(mocker) -> List[List[str]]:
    """
    Fixture that captures all subprocess.run command lines for inspection.

    Returns:
        List that will contain all subprocess command arguments.
    """
    calls = []

    def track_call(cmd, **kwargs):
        calls.append(cmd)
        return completed()

    mocker.patch("subprocess.run", side_effect=track_call)
    return calls


# ==============================================================================
# Disk Image Fixtures
# ==============================================================================


def pattern_bytes(length: int) -> bytes:
    """Deterministic, non-repeating-per-block test data."""
    return bytes((i * 7 + i // 512) % 251 for i in range(length))


@pytest.fixture
def make_disk_image(tmp_path) -> Callable[[int], Tuple[Path, bytes]]:
    """
    Fixture returning a factory that writes a synthetic disk image.

    Returns:
        Callable taking the image length in bytes and returning (path, data).
    """

    def factory(length: int, name: str = "disk.img") -> Tuple[Path, bytes]:
        data = pattern_bytes(length)
        path = tmp_path / name
        path.write_bytes(data)
        return path, data

    return factory


@pytest.fixture
def two_partition_table() -> PartitionTable:
    """Partition 1 at blocks 4..12, partition 2 at blocks 12..28 (512-byte blocks)."""
    return PartitionTable(
        partitions=(
            Partition(number=1, start=4, size=8, type="c"),
            Partition(number=2, start=12, size=16, type="83"),
        ),
        block_size=512,
        label="dos",
        disk_id="deadbeef",
    )


@pytest.fixture
def sfdisk_dos_json() -> str:
    """Fixture providing `sfdisk --json` output for an MBR image."""
    return """{
   "partitiontable": {
      "label": "dos",
      "id": "0xdeadbeef",
      "device": "disk.img",
      "unit": "sectors",
      "sectorsize": 512,
      "partitions": [
         {
            "node": "disk.img1",
            "start": 2048,
            "size": 131072,
            "type": "c",
            "bootable": true
         },
         {
            "node": "disk.img2",
            "start": 133120,
            "size": 262144,
            "type": "83"
         }
      ]
   }
}
"""


@pytest.fixture
def sfdisk_gpt_json() -> str:
    """Fixture providing `sfdisk --json` output for a GPT image."""
    return """{
   "partitiontable": {
      "label": "gpt",
      "id": "8E1B1F5A-7C7D-4C2F-9D52-0C2E3B0F4A11",
      "device": "/dev/loop0",
      "unit": "sectors",
      "firstlba": 34,
      "lastlba": 2097118,
      "sectorsize": 4096,
      "partitions": [
         {
            "node": "/dev/loop0p1",
            "start": 256,
            "size": 65536,
            "type": "C12A7328-F81F-11D2-BA4B-00A0C93EC93B",
            "uuid": "0D4C3C8B-0E1D-4B1E-A7B5-1B7F5C1D2E3F",
            "name": "boot"
         },
         {
            "node": "/dev/loop0p3",
            "start": 65792,
            "size": 131072,
            "type": "0FC63DAF-8483-4772-8E79-3D69D8477DE4"
         }
      ]
   }
}
"""


# ==============================================================================
# Logging and Settings Fixtures
# ==============================================================================


@pytest.fixture
def log_records() -> List[Dict[str, str]]:
    """
    Fixture capturing loguru records emitted during the test.

    Returns:
        List of {"level": ..., "message": ...} dicts in emission order.
    """
    records: List[Dict[str, str]] = []

    def sink(message):
        record = message.record
        records.append({"level": record["level"].name, "message": record["message"]})

    handler_id = logger.add(sink, level="TRACE")
    yield records
    with contextlib.suppress(ValueError):
        logger.remove(handler_id)


@pytest.fixture
def temp_settings_file(tmp_path) -> Path:
    """Fixture providing a temporary settings file path."""
    settings_dir = tmp_path / ".config" / "img-extract"
    settings_dir.mkdir(parents=True, exist_ok=True)
    return settings_dir / "settings.json"


@pytest.fixture(autouse=True)
def reset_global_state():
    """
    Auto-use fixture that restores settings and loguru sinks after each test.

    This helps ensure test isolation when modules use global state.
    """
    saved_settings = dict(settings.settings_store.values)
    yield
    settings.settings_store.values = saved_settings
    logger.remove()
    logger.configure(extra={"job_id": "-", "tags": [], "source": "APP"})
    logger.add(sys.stderr, level="WARNING")
