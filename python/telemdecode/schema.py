"""Record schema: the packed binary layout of one state vector snapshot."""

from __future__ import annotations

import struct
import zlib
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Mapping

import numpy as np


class FieldType(IntEnum):
    U8 = 0
    U16 = 1
    U32 = 2
    I8 = 4
    I16 = 5
    I32 = 6
    F32 = 8
    F64 = 9


# struct format chars indexed by FieldType (byte order prefix added per schema)
_TYPE_FMT = {
    FieldType.U8: "B",
    FieldType.U16: "H",
    FieldType.U32: "I",
    FieldType.I8: "b",
    FieldType.I16: "h",
    FieldType.I32: "i",
    FieldType.F32: "f",
    FieldType.F64: "d",
}

# numpy dtype codes, without byte order
_TYPE_DTYPE = {
    FieldType.U8: "u1",
    FieldType.U16: "u2",
    FieldType.U32: "u4",
    FieldType.I8: "i1",
    FieldType.I16: "i2",
    FieldType.I32: "i4",
    FieldType.F32: "f4",
    FieldType.F64: "f8",
}


@dataclass(frozen=True)
class FieldDef:
    name: str
    offset: int
    size: int
    type: FieldType
    column: str


def packed_fields(layout: list[tuple[str, FieldType, str]]) -> list[FieldDef]:
    """Lay out (name, type, column) triples back to back with no padding."""
    fields: list[FieldDef] = []
    offset = 0
    for name, ftype, column in layout:
        size = struct.calcsize("<" + _TYPE_FMT[ftype])
        fields.append(FieldDef(name, offset, size, ftype, column))
        offset += size
    return fields


class RecordSchema:
    """Fixed layout of one record: knows how to pack and unpack it.

    The layout is tightly packed: every field starts where the previous one
    ended.  The dump itself carries no version tag, so ``version`` and
    ``fingerprint()`` are the only handles for checking that producer and
    decoder agree.
    """

    def __init__(self, name: str, version: int, fields: list[FieldDef],
                 endianness: str = "little"):
        if endianness not in ("little", "big"):
            raise ValueError(f"Bad endianness: {endianness!r}")
        if not fields:
            raise ValueError("Schema has no fields")

        expected = 0
        for f in fields:
            if f.offset != expected:
                raise ValueError(
                    f"Field {f.name!r} at offset {f.offset}, expected "
                    f"{expected} (layout must be packed)")
            if f.size != struct.calcsize("<" + _TYPE_FMT[f.type]):
                raise ValueError(
                    f"Field {f.name!r} size {f.size} does not match "
                    f"type {f.type.name}")
            expected += f.size

        names = [f.name for f in fields]
        if len(set(names)) != len(names):
            raise ValueError("Duplicate field names")

        self.name = name
        self.version = version
        self.fields = list(fields)
        self.endianness = endianness
        self._prefix = "<" if endianness == "little" else ">"
        self.struct_format = self._prefix + "".join(
            _TYPE_FMT[f.type] for f in fields)
        self._struct = struct.Struct(self.struct_format)
        self.record_size = self._struct.size

    @property
    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def columns(self) -> list[str]:
        return [f.column for f in self.fields]

    @property
    def dtype(self) -> np.dtype:
        """numpy structured dtype matching the packed wire layout."""
        return np.dtype({
            "names": self.names,
            "formats": [self._prefix + _TYPE_DTYPE[f.type] for f in self.fields],
            "offsets": [f.offset for f in self.fields],
            "itemsize": self.record_size,
        })

    def field(self, name: str) -> FieldDef:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def decode(self, payload: bytes) -> dict[str, Any]:
        """Decode exactly one record's bytes into a dict of field -> value."""
        if len(payload) != self.record_size:
            raise ValueError(
                f"Payload is {len(payload)} bytes, record size is "
                f"{self.record_size}")
        return dict(zip(self.names, self._struct.unpack(payload)))

    def encode(self, values: Mapping[str, Any]) -> bytes:
        """Pack a mapping of field -> value; missing fields are zero."""
        unknown = set(values) - set(self.names)
        if unknown:
            raise ValueError(f"Unknown fields: {sorted(unknown)}")
        return self._struct.pack(*(values.get(f.name, 0) for f in self.fields))

    def fingerprint(self) -> int:
        """CRC-32 over the canonical layout description."""
        desc = ";".join(
            f"{f.name}:{f.type.name}:{f.offset}:{f.size}" for f in self.fields)
        blob = f"{self.name}/{self.version}/{self.endianness}|{desc}"
        return zlib.crc32(blob.encode("utf-8")) & 0xFFFFFFFF

    def __repr__(self) -> str:
        return (f"RecordSchema({self.name!r}, version={self.version}, "
                f"fields={len(self.fields)}, size={self.record_size})")


# Main state vector as logged by the flight computer (little-endian, packed).
STATE_VECTOR_SCHEMA = RecordSchema("main_state_vector", 1, packed_fields([
    ("time", FieldType.F32, "Time"),
    ("state", FieldType.U8, "State"),
    ("altitude", FieldType.F32, "Filtered Altitude"),
    ("velocity", FieldType.F32, "Filtered Velocity"),
    ("acceleration", FieldType.F32, "Filtered Acceleration"),
    ("pressure", FieldType.F32, "Pressure"),
    ("temperature", FieldType.F32, "Temperature"),
    ("baro_altitude", FieldType.F32, "Barometer Altitude"),
    ("imu_temp", FieldType.I32, "IMU Temperature"),
    ("accel_x", FieldType.F32, "Accel X"),
    ("accel_y", FieldType.F32, "Accel Y"),
    ("accel_z", FieldType.F32, "Accel Z"),
    ("accel_vertical", FieldType.F32, "Accel Vertical"),
    ("gyro_x", FieldType.F32, "Gyro X"),
    ("gyro_y", FieldType.F32, "Gyro Y"),
    ("gyro_z", FieldType.F32, "Gyro Z"),
    ("quat_w", FieldType.F32, "Quat W"),
    ("quat_x", FieldType.F32, "Quat X"),
    ("quat_y", FieldType.F32, "Quat Y"),
    ("quat_z", FieldType.F32, "Quat Z"),
    ("launchpad_altitude", FieldType.F32, "LP Altitude"),
]))
