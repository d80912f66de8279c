"""Debris command-line interface.

Usage:
    echo '{"a": [1, 2.5]}' | debris encode [--format hex|base64|raw]
    debris decode --input value.bin --format raw [--strict]
    echo '{"a": "b"}' | debris digest
    debris version
"""

from __future__ import annotations

import argparse
import base64
import binascii
import json
import logging
import sys
from typing import List, Optional

import structlog

from . import (
    DebrisError,
    __version__,
    deserialize,
    fingerprint,
    serialize,
)
from ._json_adapter import json_to_value, value_to_json

_FORMATS = ("hex", "base64", "raw")


def _configure_logging(verbose: bool) -> None:
    # Logs go to stderr so stdout only ever carries command output.
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="debris",
        description="debris: deterministic binary serializer",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log debug output to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── encode ──
    enc_p = sub.add_parser("encode", help="Serialize a JSON document")
    enc_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read JSON from FILE instead of stdin")
    enc_p.add_argument("--format", "-f", choices=_FORMATS, default="hex",
                       help="Output encoding (default: hex)")

    # ── decode ──
    dec_p = sub.add_parser("decode", help="Deserialize to JSON")
    dec_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read encoded bytes from FILE instead of stdin")
    dec_p.add_argument("--format", "-f", choices=_FORMATS, default="hex",
                       help="Input encoding (default: hex)")
    dec_p.add_argument("--strict", action="store_true",
                       help="Fail on bytes after the first value")

    # ── digest ──
    dig_p = sub.add_parser("digest", help="Print the fingerprint of a JSON document")
    dig_p.add_argument("--input", "-i", metavar="FILE",
                       help="Read JSON from FILE instead of stdin")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("debris: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_encode(args: argparse.Namespace) -> None:
    encoded = serialize(json_to_value(_read_input(args.input)))
    if args.format == "raw":
        sys.stdout.buffer.write(encoded)
        sys.stdout.buffer.flush()
    elif args.format == "base64":
        print(base64.b64encode(encoded).decode("ascii"))
    else:
        print(encoded.hex())


def _cmd_decode(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    try:
        if args.format == "hex":
            data = bytes.fromhex(raw.decode("ascii").strip())
        elif args.format == "base64":
            data = base64.b64decode(raw.strip(), validate=True)
        else:
            data = raw
    except (ValueError, binascii.Error) as e:
        print(f"debris: cannot read {args.format} input: {e}", file=sys.stderr)
        sys.exit(2)
    value = deserialize(data, strict=args.strict)
    print(json.dumps(value_to_json(value), ensure_ascii=False))


def _cmd_digest(args: argparse.Namespace) -> None:
    print(fingerprint(json_to_value(_read_input(args.input))))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"debris {__version__}")
        return

    try:
        if args.command == "encode":
            _cmd_encode(args)
        elif args.command == "decode":
            _cmd_decode(args)
        elif args.command == "digest":
            _cmd_digest(args)
    except DebrisError as e:
        print(f"debris: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except json.JSONDecodeError as e:
        print(f"debris: JSON parse error: {e}", file=sys.stderr)
        sys.exit(2)
    except (ValueError, RecursionError) as e:
        # int/str digit limits and nesting too deep for the json module
        print(f"debris: cannot process input: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
