#!/usr/bin/env python3
"""Transcode document fields between the JSON and binary encodings.

Reads a JSON object of fields (legacy array grammar or object grammar, mixed
freely) and writes the binary field container, or reads a binary container
and prints the canonical JSON.

Usage:
    # JSON -> binary
    python3 scripts/field_transcode.py encode hit_fields.json --out hit_fields.bin

    # JSON from the document body (fields are never metadata there)
    python3 scripts/field_transcode.py encode source.json --out source.bin --inside-source

    # binary -> canonical JSON (stdout, or a file with --out)
    python3 scripts/field_transcode.py decode hit_fields.bin
    python3 scripts/field_transcode.py decode hit_fields.bin --out hit_fields.json

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from docfield.binary_codec import BinaryFieldCodec
from docfield.errors import FieldCodecError
from docfield.io_utils import dumps_json, loads_json, save_json
from docfield.settings import DEFAULT_SETTINGS, build_classifier, load_settings
from docfield.text_codec import TextFieldCodec

log = logging.getLogger("field_transcode")


def dump_json(payload: bytes, out: Path | None = None) -> None:
    """Pretty-print canonical JSON to stdout, or save it to ``out``."""
    doc = loads_json(payload)
    if out is not None:
        save_json(doc, out)
        log.info("Wrote %s", out)
        return
    sys.stdout.buffer.write(dumps_json(doc, pretty=True))
    sys.stdout.buffer.write(b"\n")


def encode_file(src: Path, out: Path, text_codec: TextFieldCodec, binary_codec: BinaryFieldCodec,
                *, inside_source: bool) -> int:
    fields = text_codec.fields_from_json(src.read_bytes(), inside_source)
    data = binary_codec.fields_to_bytes(fields)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    log.info("Encoded %d fields (%d bytes) to %s", len(fields), len(data), out)
    return len(fields)


def decode_file(src: Path, text_codec: TextFieldCodec, binary_codec: BinaryFieldCodec) -> bytes:
    fields = binary_codec.fields_from_bytes(src.read_bytes())
    log.info("Decoded %d fields from %s", len(fields), src)
    return text_codec.fields_to_json(fields)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Transcode document fields between JSON and binary encodings."
    )
    parser.add_argument(
        "--settings", type=Path, default=None,
        help="Optional codec settings JSON file",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="JSON fields object -> binary container")
    enc.add_argument("input", type=Path, help="JSON file holding an object of fields")
    enc.add_argument("--out", type=Path, required=True, help="Binary output path")
    enc.add_argument(
        "--inside-source",
        action="store_true",
        help="Fields come from the document body (declared non-metadata)",
    )

    dec = sub.add_parser("decode", help="binary container -> canonical JSON")
    dec.add_argument("input", type=Path, help="Binary field container")
    dec.add_argument("--out", type=Path, default=None, help="JSON output path (default: stdout)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if not args.input.exists():
        log.error("Input not found: %s", args.input)
        return 1

    try:
        settings = load_settings(args.settings) if args.settings else DEFAULT_SETTINGS
    except (OSError, ValueError) as exc:
        log.error("Invalid settings file %s: %s", args.settings, exc)
        return 1

    text_codec = TextFieldCodec(settings=settings, classifier=build_classifier(settings))
    binary_codec = BinaryFieldCodec(settings=settings)

    try:
        if args.command == "encode":
            encode_file(
                args.input, args.out, text_codec, binary_codec,
                inside_source=args.inside_source,
            )
        else:
            dump_json(decode_file(args.input, text_codec, binary_codec), args.out)
    except FieldCodecError as exc:
        log.error("%s: %s", type(exc).__name__, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
