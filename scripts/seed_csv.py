"""CLI entry point for seeding a table from a CSV file.

Usage:
    python -m scripts.seed_csv --db-url sqlite:///data.db --file users.csv --table users \
        [--chunk-size 50] [--alias email_address=email] [--hashable password] [--truncate]
"""

import argparse
import logging
import sys

from csvseeder import CsvSeeder, SeederError, config, create_service

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
logger = logging.getLogger(__name__)


def _parse_pairs(parser: argparse.ArgumentParser, flag: str, values: list[str]) -> dict[str, str]:
    pairs = {}
    for value in values:
        key, sep, target = value.partition("=")
        if not sep or not key or not target:
            parser.error(f"{flag} expects KEY=VALUE, got {value!r}")
        pairs[key] = target
    return pairs


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed a database table from a CSV file")
    parser.add_argument(
        "--db-url", default=config.DB_URL, help="Database URL (sqlite:/// or postgresql://)"
    )
    parser.add_argument("--file", required=True, help="Path to CSV file (may be gzipped)")
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--table", help="Destination table")
    target.add_argument("--model", help="Model class as package.module:Class")
    parser.add_argument("--delimiter", default=config.DELIMITER, help="CSV delimiter")
    parser.add_argument("--encoding", default=config.ENCODING, help="CSV text encoding")
    parser.add_argument(
        "--chunk-size", type=int, default=config.CHUNK_SIZE, help="Rows per insert chunk"
    )
    parser.add_argument("--offset-rows", type=int, default=0, help="Rows to skip at the start")
    parser.add_argument(
        "--no-header-detection", action="store_true", help="Never skip a header row automatically"
    )
    parser.add_argument(
        "--map", action="append", default=[], metavar="IDX=COL", help="Map CSV column IDX to COL"
    )
    parser.add_argument(
        "--alias", action="append", default=[], metavar="SRC=DST", help="Alias CSV column SRC to DST"
    )
    parser.add_argument(
        "--hashable", action="append", metavar="COL", help="Hash COL before insertion"
    )
    parser.add_argument("--no-hash", action="store_true", help="Hash no columns")
    parser.add_argument("--truncate", action="store_true", help="Empty the table first")
    parser.add_argument(
        "--ignore-foreign-keys", action="store_true", help="Skip foreign key checks when truncating"
    )
    parser.add_argument("--no-guard", action="store_true", help="Ignore model fillable/guarded")
    parser.add_argument("--pool-size", type=int, default=config.POOL_SIZE)
    return parser


def build_seeder(service, args: argparse.Namespace, parser: argparse.ArgumentParser) -> CsvSeeder:
    mapping = _parse_pairs(parser, "--map", args.map)
    if any(not index.isdigit() for index in mapping):
        parser.error("--map indexes must be non-negative integers")

    options = {
        "filename": args.file,
        "table": args.table,
        "model": args.model,
        "csv_delimiter": args.delimiter,
        "csv_encoding": args.encoding,
        "insert_chunk_size": args.chunk_size,
        "offset_rows": args.offset_rows,
        "skip_header_row": not args.no_header_detection,
        "mapping": {int(index): column for index, column in mapping.items()},
        "aliases": _parse_pairs(parser, "--alias", args.alias),
        "truncate_before_insert": args.truncate,
        "ignore_foreign_keys": args.ignore_foreign_keys,
        "guard_model": not args.no_guard,
    }
    if args.no_hash:
        options["hashable"] = []
    elif args.hashable:
        options["hashable"] = args.hashable
    return CsvSeeder(service, **options)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.chunk_size < 1:
        parser.error("--chunk-size must be at least 1")

    service = create_service(args.db_url, args.pool_size)
    service.connect()
    try:
        seeder = build_seeder(service, args, parser)
        result = seeder.run()
    except SeederError as e:
        logger.error("Seeding failed: %s", e)
        return 1
    finally:
        service.close()

    logger.info("Done. %s", result.summary())
    return 2 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
