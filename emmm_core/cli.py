#!/usr/bin/env python3
"""
emmm-core command line

Packs documents with the files they reference into a single container,
restores them, and shrinks images to fit a byte budget.

Usage:
    emmm-core pack <document> <output.zip>
    emmm-core unpack <container.zip> <output_dir> [--document <path>]
    emmm-core compress <image> <output> --max-size <bytes> [--max-width <px>] [--framed]
    emmm-core verify <container.zip>

Examples:
    # Package a document and every file: reference it contains
    emmm-core pack notes.emmm notes.zip

    # Restore it somewhere else
    emmm-core unpack notes.zip ./restored

    # Fit a photo into 100 KB, at most 1920 pixels wide
    emmm-core compress photo.png photo.jpg --max-size 102400 --max-width 1920
"""

import argparse
import os
import sys
from pathlib import Path

import yaml

from emmm_core.config.settings import (
    CoreConfig,
    configure_logging,
    get_default_config,
    load_config,
)
from emmm_core.errors import EmmmCoreError, WorkerError
from emmm_core.validation.archive_validator import ArchiveValidator
from emmm_core.worker import Worker

CONFIG_ENV = "EMMM_CORE_CONFIG"
LOG_LEVEL_ENV = "EMMM_CORE_LOG_LEVEL"


def print_progress(fraction: float) -> None:
    print(f"  {fraction:6.1%}")


def resolve_config(args: argparse.Namespace) -> CoreConfig:
    """Load the config named by --config or $EMMM_CORE_CONFIG, else defaults."""
    config_path = args.config or os.environ.get(CONFIG_ENV)
    config = load_config(Path(config_path)) if config_path else get_default_config()

    if args.log_level:
        config.log_level = args.log_level
    elif os.environ.get(LOG_LEVEL_ENV):
        config.log_level = os.environ[LOG_LEVEL_ENV]
    return config


def cmd_pack(worker: Worker, args: argparse.Namespace) -> int:
    document_path = args.document.resolve()
    output_path = args.output.resolve()

    print(f"Document: {document_path}")
    print(f"Output:   {output_path}")

    try:
        document_text = document_path.read_text(encoding="utf-8")
    except OSError as e:
        print(f"\n✗ Error: cannot read {document_path}: {e}")
        return 1

    result = worker.pack(document_text, output_path, progress=print_progress)
    print(f"\n✓ Package created\n{result.summary()}")
    return 0


def cmd_unpack(worker: Worker, args: argparse.Namespace) -> int:
    container_path = args.container.resolve()
    output_dir = args.output_dir.resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"Container: {container_path}")
    print(f"Output:    {output_dir}")

    result = worker.unpack(container_path, output_dir, progress=print_progress)

    document_path = args.document or output_dir / f"{container_path.stem}.emmm"
    document_path.write_text(result.document, encoding="utf-8")

    print(f"\n✓ Document restored: {document_path}\n{result.summary()}")
    return 0


def cmd_compress(worker: Worker, args: argparse.Namespace) -> int:
    image_path = args.image.resolve()
    output_path = args.output.resolve()

    if args.framed:
        try:
            image_bytes = image_path.read_bytes()
        except OSError as e:
            print(f"\n✗ Error: cannot read {image_path}: {e}")
            return 1
        result = worker.encode(image_bytes, args.max_size, args.max_width)
        output_path.write_bytes(result.to_bytes())
    else:
        result = worker.encode_file(image_path, output_path, args.max_size, args.max_width)

    action = f"re-encoded at scale {result.scale:.3f}" if result.reencoded else "kept as is"
    print(f"✓ {output_path}: {len(result.data)} bytes, {result.mime_type}, {action}")
    return 0


def cmd_verify(worker: Worker, args: argparse.Namespace) -> int:
    result = ArchiveValidator(worker.config.archive).validate_package(args.container.resolve())
    print(result.summary())
    return 0 if result.is_valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="emmm-core",
        description="Pack documents with their referenced files, and compress images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s pack notes.emmm notes.zip
  %(prog)s unpack notes.zip ./restored
  %(prog)s compress photo.png photo.jpg --max-size 102400
        """
    )

    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help=f"YAML or JSON config file (default: ${CONFIG_ENV} if set)"
    )

    parser.add_argument(
        "--log-level",
        default=None,
        help=f"Logging level (default: ${LOG_LEVEL_ENV} or the config value)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    pack_parser = subparsers.add_parser("pack", help="Pack a document into a container")
    pack_parser.add_argument("document", type=Path, help="UTF-8 document with file: references")
    pack_parser.add_argument("output", type=Path, help="Container path to create")
    pack_parser.set_defaults(handler=cmd_pack)

    unpack_parser = subparsers.add_parser("unpack", help="Extract a container")
    unpack_parser.add_argument("container", type=Path, help="Container to extract")
    unpack_parser.add_argument("output_dir", type=Path, help="Directory for the extracted files")
    unpack_parser.add_argument(
        "-d", "--document",
        type=Path,
        default=None,
        help="Where to write the restored document (default: <output_dir>/<container>.emmm)"
    )
    unpack_parser.set_defaults(handler=cmd_unpack)

    compress_parser = subparsers.add_parser("compress", help="Fit an image into a byte budget")
    compress_parser.add_argument("image", type=Path, help="Source image")
    compress_parser.add_argument("output", type=Path, help="Output file")
    compress_parser.add_argument("--max-size", type=int, required=True,
                                 help="Exclusive size limit in bytes")
    compress_parser.add_argument("--max-width", type=int, default=None,
                                 help="Maximum output width in pixels")
    compress_parser.add_argument("--framed", action="store_true",
                                 help="Write the mime/extension framed blob instead of raw image bytes")
    compress_parser.set_defaults(handler=cmd_compress)

    verify_parser = subparsers.add_parser("verify", help="Check a container's layout")
    verify_parser.add_argument("container", type=Path, help="Container to check")
    verify_parser.set_defaults(handler=cmd_verify)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = resolve_config(args)
        configure_logging(config.log_level)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        print(f"✗ Configuration error: {e}")
        return 1

    with Worker(config) as worker:
        try:
            return args.handler(worker, args)
        except EmmmCoreError as e:
            print(f"\n✗ Error: {e}")
            return 1
        except ValueError as e:
            print(f"\n✗ Invalid argument: {e}")
            return 1
        except OSError as e:
            print(f"\n✗ Error: {e}")
            return 1
        except WorkerError as e:
            print(f"\n✗ Internal error: {e}")
            return 1


if __name__ == "__main__":
    sys.exit(main())
