"""
RecordCodec - exact byte layout of a user-data record.

Layout (see vault.core.contract):

| Field        | Size     | Notes            |
|--------------|----------|------------------|
| flag         | 1        | 0 or 1 only      |
| owner        | 32       | raw identity     |
| name_len     | 4        | u32 LE           |
| name         | name_len | UTF-8            |
| message_len  | 4        | u32 LE           |
| message      | msg_len  | UTF-8            |
| update_count | 8        | u64 LE           |

Slots may be larger than the logical record. Anything past the computed length
is padding: decodeRecord ignores it and writeRecordInto leaves it untouched.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .contract import (
    FLAG, IDENTITY_SIZE, MAX_UPDATE_COUNT, SLOT_CAPACITY, UPDATE_COUNT,
    recordSize
)
from .errors import InvalidFlag
from .wire import packString, readBytes, readString, readStruct


@dataclass
class Record:
    """Persisted user-data record. owner and name never change after creation."""
    initialized: bool
    owner: bytes
    name: str
    message: str
    updateCount: int = 0

    @property
    def size(self) -> int:
        """Logical encoded length in bytes"""
        return recordSize(self.name, self.message)

    def toDict(self) -> Dict[str, Any]:
        """Convert to dictionary for display/transport"""
        return {
            "initialized": self.initialized,
            "owner": self.owner.hex(),
            "name": self.name,
            "message": self.message,
            "updateCount": self.updateCount
        }


def encodeRecord(record: Record) -> bytes:
    """Encode to exactly record.size bytes, no padding."""
    if len(record.owner) != IDENTITY_SIZE:
        raise ValueError(f"owner must be {IDENTITY_SIZE} bytes, got {len(record.owner)}")
    if not 0 <= record.updateCount <= MAX_UPDATE_COUNT:
        raise ValueError(f"updateCount out of u64 range: {record.updateCount}")

    return b"".join([
        FLAG.pack(1 if record.initialized else 0),
        bytes(record.owner),
        packString(record.name),
        packString(record.message),
        UPDATE_COUNT.pack(record.updateCount),
    ])


def decodeRecord(data: bytes) -> Record:
    """
    Decode a record from the front of a slot.

    Fields are read strictly in layout order. Trailing bytes are padding.

    Raises:
        MalformedRecord: buffer shorter than the length its own fields declare
        InvalidFlag: flag byte other than 0 or 1
        InvalidEncoding: name or message is not UTF-8
    """
    data = bytes(data)

    flag, offset = readStruct(FLAG, data, 0, "flag")
    if flag not in (0, 1):
        raise InvalidFlag(f"flag byte must be 0 or 1, got {flag}")

    owner, offset = readBytes(data, offset, IDENTITY_SIZE, "owner")
    name, offset = readString(data, offset, "name")
    message, offset = readString(data, offset, "message")
    updateCount, offset = readStruct(UPDATE_COUNT, data, offset, "update_count")

    return Record(
        initialized=bool(flag),
        owner=owner,
        name=name,
        message=message,
        updateCount=updateCount
    )


def writeRecordInto(slot: bytes, record: Record) -> bytes:
    """
    Overwrite the first record.size bytes of slot, keeping the rest.

    A slot shorter than the encoding grows to fit; capacity never shrinks.
    """
    encoded = encodeRecord(record)
    return encoded + bytes(slot[len(encoded):])


def allocateSlot(record: Record, capacity: int = SLOT_CAPACITY) -> bytes:
    """Fresh zero-padded slot of the given capacity holding record."""
    return writeRecordInto(bytes(capacity), record)
