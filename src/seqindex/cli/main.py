# Command line for building and querying indexes, using argparse.
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from seqindex.components.formats import FORMATS
from seqindex.core.config import IndexConfig
from seqindex.core.errors import IndexerError
from seqindex.core.index import RecordIndex

logger = logging.getLogger("seqindex")

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="seqindex", description="Index and fetch records of large ASN.1 flat files"
    )
    p.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug)")
    p.add_argument("--config", type=Path, help="TOML file with index settings")
    p.add_argument(
        "--format",
        dest="record_format",
        choices=sorted(FORMATS),
        help="Record format (default: sequence)",
    )
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Index one or more files")
    b.add_argument("index", type=Path, help="Index file")
    b.add_argument("files", type=Path, nargs="+", help="Files to index")
    b.add_argument("--overwrite", action="store_true", help="Start from an empty index")

    f = sub.add_parser("fetch", help="Print the record for an identifier")
    f.add_argument("index", type=Path, help="Index file")
    f.add_argument("identifier", help="Identifier to fetch")

    loc = sub.add_parser("locate", help="Print file and offset for an identifier")
    loc.add_argument("index", type=Path, help="Index file")
    loc.add_argument("identifier", help="Identifier to locate")

    i = sub.add_parser("info", help="Summarize an index")
    i.add_argument("index", type=Path, help="Index file")

    c = sub.add_parser("compact", help="Drop overwritten entries from an index")
    c.add_argument("index", type=Path, help="Index file")
    return p


def load_config(args: argparse.Namespace, write_flag: bool) -> IndexConfig:
    overrides = {
        "index_path": str(args.index),
        "write_flag": write_flag,
        "record_format": args.record_format,
        "overwrite": getattr(args, "overwrite", None) or None,
    }
    if args.config:
        return IndexConfig.from_toml(args.config, **overrides)
    return IndexConfig(**{k: v for k, v in overrides.items() if v is not None})


def run(args: argparse.Namespace) -> int:
    write_flag = args.command in ("build", "compact")
    config = load_config(args, write_flag)

    with RecordIndex(config) as index:
        if args.command == "build":
            stats = index.make_index(*args.files)
            print(
                f"Indexed {stats.files} files: {stats.records} records, "
                f"{stats.identifiers} identifiers into {args.index}"
            )
            return EXIT_OK

        if args.command == "compact":
            index.compact()
            print(f"Compacted {args.index}")
            return EXIT_OK

        if args.command == "info":
            print(f"format: {index.record_format.name}")
            print(f"identifiers: {index.count_records()}")
            for entry in index.files():
                print(f"file {entry.file_number}: {entry.path} ({entry.size} bytes)")
            return EXIT_OK

        if args.command == "locate":
            location = index.locate(args.identifier)
            if location is None:
                print(f"{args.identifier}: not found", file=sys.stderr)
                return EXIT_NOT_FOUND
            print(f"{args.identifier}\t{location.file_number}\t{location.offset}")
            return EXIT_OK

        record = index.fetch_hash(args.identifier)
        if record is None:
            print(f"{args.identifier}: not found", file=sys.stderr)
            return EXIT_NOT_FOUND
        sys.stdout.write(record.decode(config.encoding, errors="replace"))
        return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        return run(args)
    except (IndexerError, ValueError, FileNotFoundError) as e:
        logger.error(f"{args.command} failed: {e}")
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
