"""Chunked CSV seeding of a single database table.

Configure a seed by subclassing CsvSeeder and overriding its class
attributes, or by passing the same names as keyword arguments:

    class UserSeeder(CsvSeeder):
        table = "users"
        filename = "seeds/users.csv.gz"
        aliases = {"email_address": "email"}

    result = UserSeeder(service).run()
"""

import codecs
import itertools
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from csvseeder.errors import (
    ConfigurationError,
    FileAccessError,
    InsertionError,
    MappingError,
    SeederError,
)
from csvseeder.hashing import bcrypt_hash
from csvseeder.mapping import clean_mapping, is_empty_row, is_header_row, parse_row
from csvseeder.models import allowed_columns, resolve_model, table_for_model
from csvseeder.reader import open_csv, read_rows
from csvseeder.service import DatabaseService
from csvseeder.types import Chunk, ConsoleSink, InsertCallback, Mapping

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# Options a single run may change; reset() restores them.
RUN_OPTIONS = (
    "table",
    "model",
    "filename",
    "csv_delimiter",
    "offset_rows",
    "mapping",
    "aliases",
    "hashable",
    "insert_chunk_size",
    "insert_callback",
    "log_prefix",
    "csv_encoding",
)

# Every name accepted as a constructor keyword
OPTIONS = RUN_OPTIONS + (
    "skip_header_row",
    "truncate_before_insert",
    "ignore_foreign_keys",
    "guard_model",
    "console_logs",
    "write_logs",
    "hasher",
    "console",
)


@dataclass
class SeedResult:
    table: str | None = None
    total_rows: int = 0
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    failed_chunks: int = 0

    def summary(self) -> str:
        message = f"Imported {self.imported} of {self.total_rows} rows."
        if self.skipped:
            message += f" {self.skipped} empty rows."
        if self.failed:
            message += f" {self.failed} failed rows."
        return message

    def to_dict(self) -> dict:
        return {
            "table": self.table,
            "total_rows": self.total_rows,
            "imported": self.imported,
            "skipped": self.skipped,
            "failed": self.failed,
            "failed_chunks": self.failed_chunks,
        }


class CsvSeeder:
    """Seeds a DB table from a CSV file, one chunk of rows at a time."""

    # DB table name
    table: str | None = None
    # Model class (or dotted path) declaring __tablename__ and optionally fillable/guarded
    model: type | str | None = None
    # CSV filename, plain or gzip-compressed
    filename: str | Path | None = None
    csv_delimiter: str = ","
    # Any codec name Python knows; undecodable bytes are replaced
    csv_encoding: str = "utf-8"
    # Rows to skip at the start of the CSV. Anything above 0 disables header detection.
    offset_rows: int = 0
    # Skip the first row when its values equal the mapped column names
    skip_header_row: bool = True
    # {csv_index: column_name} or a list of column names. Resolved from the first row if empty.
    mapping: dict[int, str] | Sequence[str] | None = None
    # {csv_column: db_column}
    aliases: dict[str, str] | None = None
    # DB columns (after aliasing) whose values are hashed before insertion
    hashable: str | Sequence[str] | None = "password"
    insert_chunk_size: int = 50
    # Takes a chunk (list of row dicts) and stores it; replaces the default bulk insert
    insert_callback: InsertCallback | None = None
    truncate_before_insert: bool = False
    ignore_foreign_keys: bool = False
    # Limit mapped columns to what the model's fillable/guarded attributes allow
    guard_model: bool = True
    console_logs: bool = True
    write_logs: bool = True
    log_prefix: str = ""
    hasher = staticmethod(bcrypt_hash)
    # Callable taking (message, level)
    console: ConsoleSink | None = None

    def __init__(self, service: DatabaseService | None = None, **options: Any):
        self.service = service
        for name, value in options.items():
            if name not in OPTIONS:
                raise TypeError(f"Unknown seeder option: {name}")
            setattr(self, name, value)

        self._initial = {name: getattr(self, name) for name in RUN_OPTIONS}
        self._prefix = self.log_prefix
        self._table_columns: list[str] = []

    # ── Running ─────────────────────────────────────────────────────────

    def run(self) -> SeedResult:
        return self.run_seeder()

    def run_seeder(self) -> SeedResult:
        # A table resolved from the model only holds for this run
        table, model = self.table, self.model
        try:
            return self._run()
        finally:
            self.table, self.model = table, model

    def _run(self) -> SeedResult:
        self._prefix = self.log_prefix

        if self.model:
            self._parse_model()

        if not self.filename:
            raise self._report(ConfigurationError("CSV filename was not specified."))

        if not self.table:
            raise self._report(
                ConfigurationError("DB table could not be resolved. Try setting it manually.")
            )

        if self.service is None:
            raise self._report(ConfigurationError("No database service was provided."))

        try:
            codecs.lookup(self.csv_encoding)
        except LookupError:
            error = ConfigurationError(f"Unknown CSV encoding: {self.csv_encoding}")
            raise self._report(error) from None

        self._prefix = f"{self.log_prefix}{self.table}: "

        if self.truncate_before_insert:
            self.truncate_table()

        self._table_columns = self.resolve_table_columns()

        return self.parse_csv()

    def run_once(
        self,
        filename: str | Path,
        delimiter: str = ",",
        mapping: dict[int, str] | Sequence[str] | None = None,
        aliases: dict[str, str] | None = None,
        insert_callback: InsertCallback | None = None,
    ) -> SeedResult:
        """Seed from one file, then reset the seeder for another use."""
        self.filename = filename
        self.csv_delimiter = delimiter
        self.mapping = mapping
        self.aliases = aliases
        self.insert_callback = insert_callback
        try:
            return self.run_seeder()
        finally:
            self.reset()

    def seed_table_with_csv(self, table: str, filename: str | Path, **kwargs: Any) -> SeedResult:
        self.table = table
        return self.run_once(filename, **kwargs)

    def seed_model_with_csv(self, model: type | str, filename: str | Path, **kwargs: Any) -> SeedResult:
        self.model = model
        return self.run_once(filename, **kwargs)

    def reset(self) -> None:
        for name, value in self._initial.items():
            setattr(self, name, value)
        self._prefix = self.log_prefix
        self._table_columns = []

    # ── CSV parsing ─────────────────────────────────────────────────────

    def parse_csv(self) -> SeedResult:
        """Read the CSV and pass chunks of parsed rows to the insert function."""
        try:
            handle = open_csv(self.filename, self.csv_encoding)
        except FileAccessError as e:
            raise self._report(FileAccessError(f"CSV file could not be opened.\n {e}")) from e

        result = SeedResult(table=self.table)
        hashable = self._hashable_columns()
        chunk: Chunk = []

        try:
            rows = itertools.islice(read_rows(handle, self.csv_delimiter), self.offset_rows, None)
            mapping = self._resolve_mapping(rows)
            if mapping is None:
                rows = iter(())
            elif self.mapping and self.offset_rows == 0 and self.skip_header_row:
                rows = self._skip_header(rows, mapping)

            for row in rows:
                result.total_rows += 1
                columns = parse_row(row, mapping, self.aliases, hashable, self.hasher)

                # Insert only non-empty rows
                if is_empty_row(columns):
                    result.skipped += 1
                    continue

                chunk.append(columns)
                if len(chunk) >= self.insert_chunk_size:
                    self._flush(chunk, result)
                    chunk = []

            if chunk:
                self._flush(chunk, result)
        except FileAccessError as e:
            raise self._report(e)
        finally:
            handle.close()

        self.write_log(result.summary())
        self.write_console(result.summary(), "error" if result.failed else "info")
        return result

    def _resolve_mapping(self, rows) -> Mapping | None:
        """Clean the configured mapping, or build one from the next row.

        A row used to build the mapping is consumed. Returns None when the
        mapping must come from the CSV and the CSV has no rows left.
        """
        if self.mapping:
            mapping = clean_mapping(self.mapping, self._table_columns, self.aliases)
        else:
            header = next(rows, None)
            if header is None:
                return None
            mapping = clean_mapping(header, self._table_columns, self.aliases)

        if not mapping:
            raise self._report(MappingError("The mapping columns do not exist on the DB table."))
        return mapping

    def _skip_header(self, rows, mapping: Mapping):
        first = next(rows, None)
        if first is None:
            return rows
        if is_header_row(first, mapping):
            self.write_log("Skipping header row.", "debug")
            return rows
        return itertools.chain([first], rows)

    def _hashable_columns(self) -> list[str]:
        if isinstance(self.hashable, str):
            return [self.hashable]
        return list(self.hashable or ())

    # ── Insertion ───────────────────────────────────────────────────────

    def _flush(self, chunk: Chunk, result: SeedResult) -> None:
        if self.insert(chunk):
            result.imported += len(chunk)
        else:
            result.failed += len(chunk)
            result.failed_chunks += 1

    def insert(self, chunk: Chunk) -> bool:
        """Insert a chunk of rows. Returns True on success, False on failure."""
        callback = self.get_insert_callback()
        try:
            callback(chunk)
        except Exception as e:
            self.write_log(f"Chunk insert failed:\n{e}", "critical")
            return False
        return True

    def get_insert_callback(self) -> InsertCallback:
        if callable(self.insert_callback):
            return self.insert_callback
        return self._default_insert

    def _default_insert(self, chunk: Chunk) -> None:
        try:
            with self.service.transaction():
                self.service.insert_many(self.table, chunk)
        except Exception as e:
            raise InsertionError(f"Insert into {self.table} failed: {e}") from e

    # ── Table / model resolution ────────────────────────────────────────

    def resolve_table_columns(self) -> list[str]:
        """Columns the seed may write, after applying the model guard."""
        columns = self.service.list_columns(self.table)
        if not columns:
            raise self._report(MappingError("Unable to resolve table columns"), level="critical")

        if self.model and self.guard_model:
            columns = allowed_columns(self.model, columns)

        self.write_log("Table columns resolved.", "debug")
        return columns

    def _parse_model(self) -> None:
        try:
            self.model = resolve_model(self.model)
            if not self.table:
                self.table = table_for_model(self.model)
        except ConfigurationError as e:
            raise self._report(e, level="warning")

    def truncate_table(self) -> None:
        self.service.truncate(self.table, ignore_foreign_keys=self.ignore_foreign_keys)
        self.write_log("Table truncated.")

    # ── Output ──────────────────────────────────────────────────────────

    def _report(self, error: SeederError, level: str = "error") -> SeederError:
        """Log a fatal error and hand it back for raising."""
        self.write_log(str(error), level)
        self.write_console(str(error), "error")
        return error

    def write_log(self, message: str, level: str = "info") -> None:
        if not self.write_logs:
            return
        logger.log(LOG_LEVELS[level], "CSVSeeder: %s%s", self._prefix, message)

    def write_console(self, message: str, level: str = "info") -> None:
        if not self.console_logs or self.console is None:
            return
        self.console(f"CSVSeeder: {self._prefix}{message}", level)
