#!/usr/bin/env python3
"""Command-line access to the configured object storage backend.

Usage:
  .venv/bin/python scripts/storage_cli.py ls my-bucket
  .venv/bin/python scripts/storage_cli.py upload my-bucket ./report.pdf --path reports/2024
  .venv/bin/python scripts/storage_cli.py download my-bucket report.pdf ./out.pdf --path reports/2024
  .venv/bin/python scripts/storage_cli.py read my-bucket report.pdf --offset 128 --length 64
  .venv/bin/python scripts/storage_cli.py rm my-bucket reports/2024 report.pdf
  .venv/bin/python scripts/storage_cli.py purge my-bucket --yes

The backend and credentials come from the environment (see STORAGE_BACKEND).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from cloudstore.common.config import get_settings
from cloudstore.common.logging import setup_logging
from cloudstore.infra.storage import FileRequest, StorageError, create_storage_client

logger = logging.getLogger("cloudstore.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Object storage operations")
    sub = parser.add_subparsers(dest="command", required=True)

    ls = sub.add_parser("ls", help="List objects in a bucket")
    ls.add_argument("bucket")

    upload = sub.add_parser("upload", help="Upload a local file")
    upload.add_argument("bucket")
    upload.add_argument("source", type=Path)
    upload.add_argument("--path", default="", help="Object directory prefix")
    upload.add_argument("--name", default=None, help="Object name (default: file name)")

    download = sub.add_parser("download", help="Download an object to a local file")
    download.add_argument("bucket")
    download.add_argument("file")
    download.add_argument("dest", type=Path)
    download.add_argument("--path", default="")

    read = sub.add_parser("read", help="Print a byte range of an object")
    read.add_argument("bucket")
    read.add_argument("file")
    read.add_argument("--path", default="")
    read.add_argument("--offset", type=int, default=0)
    read.add_argument("--length", type=int, default=1024)

    rm = sub.add_parser("rm", help="Delete one object")
    rm.add_argument("bucket")
    rm.add_argument("path")
    rm.add_argument("file")

    purge = sub.add_parser("purge", help="Delete every object in a bucket")
    purge.add_argument("bucket")
    purge.add_argument(
        "--yes",
        action="store_true",
        help="Confirm deleting all objects",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    if args.command == "purge" and not args.yes:
        print("Refusing to purge without --yes", file=sys.stderr)
        return 2

    with create_storage_client(get_settings()) as client:
        if args.command == "ls":
            for name in client.list_objects(FileRequest.create(args.bucket)):
                print(name)
        elif args.command == "upload":
            request = FileRequest.create(
                args.bucket,
                file=args.name or args.source.name,
                path=args.path,
                mod_time=int(args.source.stat().st_mtime),
            )
            with args.source.open("rb") as src:
                written = client.upload_file(src, request)
            print(f"Uploaded {written} bytes to {request.object_key()}")
        elif args.command == "download":
            request = FileRequest.create(args.bucket, file=args.file, path=args.path)
            with args.dest.open("wb") as dest:
                read_bytes = client.download_file(dest, request)
            print(f"Downloaded {read_bytes} bytes to {args.dest}")
        elif args.command == "read":
            request = FileRequest.create(args.bucket, file=args.file, path=args.path)
            buffer = bytearray(args.length)
            count = client.read_at(request, buffer, args.offset)
            sys.stdout.buffer.write(bytes(buffer[:count]))
            sys.stdout.buffer.flush()
        elif args.command == "rm":
            client.delete_object(
                FileRequest.create(args.bucket, file=args.file, path=args.path)
            )
            print(f"Deleted {args.path}/{args.file}")
        elif args.command == "purge":
            client.delete_objects(FileRequest.create(args.bucket))
            print(f"Purged {args.bucket}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(get_settings().LOG_LEVEL)
    try:
        return run(args)
    except StorageError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
