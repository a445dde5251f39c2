"""Stateful record decoder and CSV row formatting for state vector dumps."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields as dc_fields
from enum import Enum
from pathlib import Path
from typing import Any, BinaryIO, Iterator, TextIO

from .schema import RecordSchema, STATE_VECTOR_SCHEMA
from .states import state_label

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".csv"

HEADER = ",".join(STATE_VECTOR_SCHEMA.columns)


class TruncatedRecordError(ValueError):
    """Input ended with bytes that do not make up a whole record."""

    def __init__(self, trailing_bytes: int, record_size: int):
        super().__init__(
            f"Truncated trailing record: {trailing_bytes} of "
            f"{record_size} bytes")
        self.trailing_bytes = trailing_bytes
        self.record_size = record_size


@dataclass(frozen=True)
class TelemetryRecord:
    time: float
    state: int
    altitude: float
    velocity: float
    acceleration: float
    pressure: float
    temperature: float
    baro_altitude: float
    imu_temp: int
    accel_x: float
    accel_y: float
    accel_z: float
    accel_vertical: float
    gyro_x: float
    gyro_y: float
    gyro_z: float
    quat_w: float
    quat_x: float
    quat_y: float
    quat_z: float
    launchpad_altitude: float

    @classmethod
    def from_fields(cls, values: dict[str, Any]) -> TelemetryRecord:
        return cls(**{f.name: values[f.name] for f in dc_fields(cls)})

    def as_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in dc_fields(self)}


def format_row(record: TelemetryRecord) -> str:
    """Render one record as a CSV line (with trailing newline).

    Floats are fixed-point with four fractional digits, the state code is
    replaced by its label and ``imu_temp`` is a plain integer.
    """
    r = record
    values = [
        f"{r.time:.4f}",
        state_label(r.state),
        f"{r.altitude:.4f}",
        f"{r.velocity:.4f}",
        f"{r.acceleration:.4f}",
        f"{r.pressure:.4f}",
        f"{r.temperature:.4f}",
        f"{r.baro_altitude:.4f}",
        f"{int(r.imu_temp):d}",
        f"{r.accel_x:.4f}",
        f"{r.accel_y:.4f}",
        f"{r.accel_z:.4f}",
        f"{r.accel_vertical:.4f}",
        f"{r.gyro_x:.4f}",
        f"{r.gyro_y:.4f}",
        f"{r.gyro_z:.4f}",
        f"{r.quat_w:.4f}",
        f"{r.quat_x:.4f}",
        f"{r.quat_y:.4f}",
        f"{r.quat_z:.4f}",
        f"{r.launchpad_altitude:.4f}",
    ]
    return ",".join(values) + "\n"


class DecoderState(Enum):
    READING = "reading"
    DONE = "done"


class RecordDecoder:
    """Reads fixed-size records from a binary stream, front to back.

    ``next_record()`` returns ``None`` once the stream is exhausted.  A
    trailing fragment shorter than one record also ends decoding; its length
    is kept in ``trailing_bytes``.
    """

    def __init__(self, stream: BinaryIO,
                 schema: RecordSchema = STATE_VECTOR_SCHEMA):
        self.stream = stream
        self.schema = schema
        self.state = DecoderState.READING
        self.count: int = 0
        self.trailing_bytes: int = 0

    @property
    def truncated(self) -> bool:
        return self.trailing_bytes > 0

    def _read_exact(self, n: int) -> bytes:
        """Read up to n bytes, retrying short reads until EOF."""
        buf = bytearray()
        while len(buf) < n:
            chunk = self.stream.read(n - len(buf))
            if not chunk:
                break
            buf.extend(chunk)
        return bytes(buf)

    def next_record(self) -> TelemetryRecord | None:
        if self.state is DecoderState.DONE:
            return None

        size = self.schema.record_size
        data = self._read_exact(size)
        if len(data) < size:
            self.state = DecoderState.DONE
            if data:
                self.trailing_bytes = len(data)
                logger.warning(
                    "dropping %d trailing bytes after record %d "
                    "(record size %d)", len(data), self.count, size)
            return None

        self.count += 1
        return TelemetryRecord.from_fields(self.schema.decode(data))

    def __iter__(self) -> Iterator[TelemetryRecord]:
        while True:
            record = self.next_record()
            if record is None:
                return
            yield record


@dataclass
class DecodeResult:
    count: int
    trailing_bytes: int = 0
    output_path: Path | None = None

    @property
    def truncated(self) -> bool:
        return self.trailing_bytes > 0


def decode_stream(src: BinaryIO, dst: TextIO,
                  schema: RecordSchema = STATE_VECTOR_SCHEMA,
                  strict: bool = False) -> DecodeResult:
    """Write the header and one row per complete record from src to dst.

    With ``strict=True`` a trailing fragment raises TruncatedRecordError
    after all complete rows have been written.
    """
    decoder = RecordDecoder(src, schema)
    dst.write(",".join(schema.columns) + "\n")
    for record in decoder:
        dst.write(format_row(record))

    if strict and decoder.truncated:
        raise TruncatedRecordError(decoder.trailing_bytes, schema.record_size)
    return DecodeResult(decoder.count, decoder.trailing_bytes)


def output_path_for(input_path: str | Path) -> Path:
    """Default output location: the input path with ``.csv`` appended."""
    p = Path(input_path)
    return p.with_name(p.name + OUTPUT_SUFFIX)


def decode_dump(input_path: str | Path, output_path: str | Path | None = None,
                schema: RecordSchema = STATE_VECTOR_SCHEMA,
                strict: bool = False) -> DecodeResult:
    """Decode a dump file into a CSV table.

    The input is opened before the output, so an unreadable input raises
    OSError without creating the output file.
    """
    out = Path(output_path) if output_path is not None else output_path_for(input_path)
    with open(input_path, "rb") as src:
        with open(out, "w", encoding="ascii", newline="\n") as dst:
            result = decode_stream(src, dst, schema, strict)
    result.output_path = out
    logger.info("decoded %d records from %s -> %s",
                result.count, input_path, out)
    return result
