"""Dump file read/write.

File format:
  [record 0]
  [record 1]
  ...
  [record N]

Each record is exactly ``schema.record_size`` bytes in the packed layout of
the schema.  There is no file header, footer, record count or checksum, so
the schema in use must match the producer's out-of-band.  A file whose size
is not a multiple of the record size ends in a fragment that is never
decoded.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, BinaryIO, Iterator

import numpy as np

from .schema import RecordSchema, STATE_VECTOR_SCHEMA
from .decoder import RecordDecoder, TelemetryRecord

logger = logging.getLogger(__name__)


def build_record(schema: RecordSchema = STATE_VECTOR_SCHEMA,
                 **values: Any) -> bytes:
    """Pack one record.  Fields not given are written as zero."""
    return schema.encode(values)


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------

class DumpWriter:
    """Writes records back to back, the way the flight computer logs them."""

    def __init__(self, path: str | Path,
                 schema: RecordSchema = STATE_VECTOR_SCHEMA):
        self._f: BinaryIO = open(path, "wb")
        self._schema = schema
        self.count: int = 0

    def write_record(self, **values: Any) -> None:
        self._f.write(build_record(self._schema, **values))
        self.count += 1

    def write_raw(self, data: bytes) -> None:
        """Write pre-packed bytes as-is (whole records or a fragment)."""
        self._f.write(data)

    def flush(self) -> None:
        self._f.flush()

    def close(self) -> None:
        self._f.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# ---------------------------------------------------------------------------
# Reader
# ---------------------------------------------------------------------------

class DumpReader:
    """Reads a dump file record by record."""

    def __init__(self, path: str | Path,
                 schema: RecordSchema = STATE_VECTOR_SCHEMA):
        self._path = Path(path)
        self._schema = schema
        self._f: BinaryIO | None = None

    def open(self) -> None:
        self._f = open(self._path, "rb")

    @property
    def schema(self) -> RecordSchema:
        return self._schema

    def _file_size(self) -> int:
        if self._f is not None:
            return os.fstat(self._f.fileno()).st_size
        return self._path.stat().st_size

    @property
    def record_count(self) -> int:
        """Number of complete records in the file."""
        return self._file_size() // self._schema.record_size

    @property
    def trailing_bytes(self) -> int:
        return self._file_size() % self._schema.record_size

    def records(self) -> Iterator[TelemetryRecord]:
        """Iterate over all complete records from the start of the file."""
        if self._f is None:
            self.open()

        assert self._f is not None
        self._f.seek(0)
        yield from RecordDecoder(self._f, self._schema)

    def close(self) -> None:
        if self._f:
            self._f.close()
            self._f = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()


def load_array(path: str | Path,
               schema: RecordSchema = STATE_VECTOR_SCHEMA) -> np.ndarray:
    """Load every complete record as a numpy structured array."""
    data = Path(path).read_bytes()
    size = schema.record_size
    whole = len(data) - len(data) % size
    if whole != len(data):
        logger.warning("%s: ignoring %d trailing bytes (record size %d)",
                       path, len(data) - whole, size)
    if whole == 0:
        return np.empty(0, dtype=schema.dtype)
    return np.frombuffer(data[:whole], dtype=schema.dtype)
