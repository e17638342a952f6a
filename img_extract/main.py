import argparse
import sys
import tempfile
from pathlib import Path

from img_extract.__version__ import __version__
from img_extract.domain.models import ExtractionRequest
from img_extract.logging import LoggerFactory, setup_logging
from img_extract.storage import (
    DiskError,
    extract_image_partitions,
    get_disk_id,
    mkfs_ext4,
    mkfs_vfat,
)


def _request(value):
    try:
        return ExtractionRequest.parse(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from None


def build_parser():
    parser = argparse.ArgumentParser(
        prog="img-extract",
        description="Extract partitions and their filesystems from raw disk images",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable verbose debug output")
    parser.add_argument("--trace", action="store_true", help="Enable very verbose trace output")
    parser.add_argument("--log-dir", type=Path, help="Directory for log files")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract partition contents into directories")
    extract.add_argument("image", type=Path, help="Disk image file")
    extract.add_argument(
        "-p",
        "--partition",
        dest="requests",
        metavar="N:DIR",
        action="append",
        type=_request,
        required=True,
        help="Extract partition N into DIR (repeatable, processed in order)",
    )
    extract.add_argument(
        "--temp-dir",
        type=Path,
        help="Directory for temporary partition images (default: a fresh temp dir)",
    )

    disk_id = subparsers.add_parser("disk-id", help="Print the disk identifier")
    disk_id.add_argument("image", type=Path)

    vfat = subparsers.add_parser("mkfs-vfat", help="Format a device or image with FAT32")
    vfat.add_argument("path", type=Path)
    vfat.add_argument("-n", "--label", required=True)

    ext4 = subparsers.add_parser("mkfs-ext4", help="Format a device or image with ext4")
    ext4.add_argument("path", type=Path)
    ext4.add_argument("-L", "--label", required=True)
    return parser


def _run_extract(args):
    if args.temp_dir is not None:
        args.temp_dir.mkdir(parents=True, exist_ok=True)
        table = extract_image_partitions(args.image, args.requests, args.temp_dir)
    else:
        with tempfile.TemporaryDirectory(prefix="img-extract-") as temp_dir:
            table = extract_image_partitions(args.image, args.requests, Path(temp_dir))
    for partition in table.partitions:
        print(
            f"{partition.number}: start={partition.start} size={partition.size} "
            f"block_size={table.block_size}"
        )


def main(argv=None):
    parser = build_parser()
    # Unrecognised arguments after mkfs-ext4 are passed through to mkfs.ext4.
    args, extra = parser.parse_known_args(argv)
    if extra and args.command != "mkfs-ext4":
        parser.error(f"unrecognized arguments: {' '.join(extra)}")
    setup_logging(debug=args.debug, trace=args.trace, log_dir=args.log_dir)
    log = LoggerFactory.for_system()

    try:
        if args.command == "extract":
            _run_extract(args)
        elif args.command == "disk-id":
            print(get_disk_id(args.image))
        elif args.command == "mkfs-vfat":
            mkfs_vfat(args.path, args.label)
        elif args.command == "mkfs-ext4":
            options = [option for option in extra if option != "--"]
            mkfs_ext4(args.path, args.label, options)
    except DiskError as error:
        log.error(str(error))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
