"""Low-level readers/writers shared by the record and instruction codecs."""

import struct
from typing import Tuple

from .contract import LENGTH_PREFIX
from .errors import InvalidEncoding, MalformedRecord


def readStruct(fmt: struct.Struct, data: bytes, offset: int, field: str) -> Tuple[int, int]:
    """Unpack one fixed-size field; returns (value, nextOffset)."""
    end = offset + fmt.size
    if len(data) < end:
        raise MalformedRecord(f"buffer ends inside '{field}': need {end} bytes, have {len(data)}")
    return fmt.unpack_from(data, offset)[0], end


def readBytes(data: bytes, offset: int, size: int, field: str) -> Tuple[bytes, int]:
    end = offset + size
    if len(data) < end:
        raise MalformedRecord(f"buffer ends inside '{field}': need {end} bytes, have {len(data)}")
    return bytes(data[offset:end]), end


def readString(data: bytes, offset: int, field: str) -> Tuple[str, int]:
    """Read a u32-LE length prefix and that many UTF-8 bytes."""
    length, offset = readStruct(LENGTH_PREFIX, data, offset, f"{field}_len")
    raw, offset = readBytes(data, offset, length, field)
    try:
        return raw.decode('utf-8'), offset
    except UnicodeDecodeError as exc:
        raise InvalidEncoding(f"'{field}' is not valid UTF-8: {exc.reason}") from exc


def packString(value: str) -> bytes:
    raw = value.encode('utf-8')
    return LENGTH_PREFIX.pack(len(raw)) + raw
