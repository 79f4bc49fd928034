"""CLI interface for redis-masker.

Usage:
    # Mask records (stdin: JSON array of {"attributes": {...}, "body": "..."})
    echo '[{"attributes":{"username":"alice"},"body":"from 192.168.1.1"}]' | \
        redis-masker --fields username mask

    # Mask plain text (stdin: text, stdout: masked text)
    echo 'ssh to db01.example.com' | redis-masker mask-text

    # Reverse lookup of a masked value
    echo '10.87.4.211' | redis-masker unmask --category ipv4

    # Health check
    redis-masker ping

Mappings live in Redis, so every invocation agrees with every other.
"""

from __future__ import annotations
import argparse
import json
import os
import sys

from .config import create_processor, load_config, read_yaml
from .exceptions import MaskingError
from .logging_config import setup_logging
from .processor import MaskingProcessor
from .types import MaskingSettings


DEFAULT_CONFIG = os.environ.get("REDIS_MASKER_CONFIG", "")
DEFAULT_ADDR = os.environ.get("REDIS_MASKER_REDIS_ADDR", "")


def _build_settings(args: argparse.Namespace) -> MaskingSettings:
    data = read_yaml(args.config) if args.config else {}
    # Command-line options override the file
    if args.redis_addr:
        data["redis_addr"] = args.redis_addr
    if args.redis_password:
        data["redis_password"] = args.redis_password
    if args.redis_db is not None:
        data["redis_db"] = args.redis_db
    if args.ttl is not None:
        data["token_ttl"] = args.ttl
    if args.fields:
        data["fields_to_mask"] = [f for f in args.fields.split(",") if f]
    return load_config(data)


def cmd_mask(proc: MaskingProcessor, args: argparse.Namespace) -> None:
    """Mask JSON records on stdin."""
    records = json.loads(sys.stdin.read())
    if isinstance(records, dict):
        records = [records]
    masked = proc.process(records)
    json.dump(masked, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_mask_text(proc: MaskingProcessor, args: argparse.Namespace) -> None:
    """Mask plain text on stdin."""
    sys.stdout.write(proc.mask_text(sys.stdin.read()))


def cmd_unmask(proc: MaskingProcessor, args: argparse.Namespace) -> None:
    """Look up the original of a masked value on stdin."""
    original = proc.unmask(sys.stdin.read().strip(), args.category)
    if original is None:
        sys.stderr.write("not found\n")
        raise SystemExit(1)
    sys.stdout.write(original + "\n")


def cmd_ping(proc: MaskingProcessor, args: argparse.Namespace) -> None:
    """Connectivity already verified by start()."""
    sys.stdout.write("ok\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="redis-masker",
        description="Deterministic Redis-backed masking of sensitive values",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config file")
    parser.add_argument("--redis-addr", default=DEFAULT_ADDR, help="Redis host:port")
    parser.add_argument("--redis-password", default="", help="Redis password")
    parser.add_argument("--redis-db", type=int, default=None, help="Redis database index")
    parser.add_argument("--ttl", type=int, default=None, help="Token TTL in seconds (0 = never)")
    parser.add_argument("--fields", default="", help="Comma-separated attribute names to mask")
    parser.add_argument("--log-level", default="WARNING", help="Log level")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("mask", help="Mask JSON records (stdin)")
    sub.add_parser("mask-text", help="Mask plain text (stdin)")
    unmask = sub.add_parser("unmask", help="Reverse lookup of a masked value (stdin)")
    unmask.add_argument("--category", required=True, help="Pattern name or attribute_<field>")
    sub.add_parser("ping", help="Check Redis connectivity")

    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    cmds = {
        "mask": cmd_mask,
        "mask-text": cmd_mask_text,
        "unmask": cmd_unmask,
        "ping": cmd_ping,
    }
    try:
        with create_processor(_build_settings(args)) as proc:
            cmds[args.command](proc, args)
    except MaskingError as e:
        sys.stderr.write(f"error: {e}\n")
        raise SystemExit(2) from e


if __name__ == "__main__":
    main()
