"""telemdecode - Flight computer state vector dump decoder."""

from .schema import RecordSchema, FieldDef, FieldType, STATE_VECTOR_SCHEMA
from .states import FlightState, UNKNOWN_STATE, state_label
from .decoder import (
    TelemetryRecord, RecordDecoder, DecoderState, DecodeResult,
    TruncatedRecordError, HEADER, format_row, decode_stream, decode_dump,
)
from .storage import DumpWriter, DumpReader, build_record, load_array

__all__ = [
    "RecordSchema", "FieldDef", "FieldType", "STATE_VECTOR_SCHEMA",
    "FlightState", "UNKNOWN_STATE", "state_label",
    "TelemetryRecord", "RecordDecoder", "DecoderState", "DecodeResult",
    "TruncatedRecordError", "HEADER", "format_row", "decode_stream",
    "decode_dump",
    "DumpWriter", "DumpReader", "build_record", "load_array",
]
