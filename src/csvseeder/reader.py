"""Opening and reading (optionally gzipped) CSV files."""

import csv
import gzip
import os
from pathlib import Path
from typing import IO, Iterator

from csvseeder.errors import FileAccessError

GZIP_MAGIC = b"\x1f\x8b"
UTF8_BOM = "\ufeff"
# UTF-8 BOM of a file opened with a latin-1 (or cp1252) encoding
LATIN1_BOM = "\xef\xbb\xbf"


def is_gzipped(path: str | Path) -> bool:
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


def open_csv(path: str | Path, encoding: str = "utf-8") -> IO[str]:
    """Open a CSV file for reading, transparently decompressing gzip input.

    Undecodable bytes are replaced rather than raised. Raises FileAccessError
    if the file is missing or unreadable.
    """
    path = Path(path)
    if not path.is_file() or not os.access(path, os.R_OK):
        raise FileAccessError(f"{path} does not exist or is not readable.")

    try:
        if is_gzipped(path):
            return gzip.open(path, "rt", newline="", encoding=encoding, errors="replace")
        return open(path, newline="", encoding=encoding, errors="replace")
    except OSError as e:
        raise FileAccessError(f"{path} could not be opened: {e}") from e


def strip_utf8_bom(value: str) -> str:
    if value.startswith(UTF8_BOM):
        return value[len(UTF8_BOM):]
    if value.startswith(LATIN1_BOM):
        return value[len(LATIN1_BOM):]
    return value


def read_rows(handle: IO[str], delimiter: str = ",") -> Iterator[list[str]]:
    """Yield each CSV line as a list of raw field strings.

    A truncated or corrupt gzip stream raises FileAccessError.
    """
    try:
        yield from csv.reader(handle, delimiter=delimiter)
    except (OSError, EOFError) as e:
        raise FileAccessError(f"CSV file could not be read: {e}") from e
