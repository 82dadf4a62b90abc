"""
RecordStateMachine - applies one instruction to one slot.

States are derived, not stored: a slot with no bytes is Absent, a slot whose
bytes decode to an initialized record is Initialized, anything else is a
DataTypeMismatch.

| State       | Instruction   | Outcome                                         |
|-------------|---------------|-------------------------------------------------|
| Absent      | Initialize    | new slot, updateCount 0 (or ValueTooLong /      |
|             |               | Unauthorized when the address is not caller's)  |
| Absent      | UpdateMessage | UninitializedAccount                            |
| Initialized | Initialize    | AlreadyInitialized                              |
| Initialized | UpdateMessage | message replaced, updateCount + 1 (or           |
|             |               | Unauthorized / ValueTooLong)                    |
| Undecodable | any           | DataTypeMismatch                                |

apply() either returns the complete new slot bytes or raises; it never
returns a partially updated slot.
"""

from typing import Optional

from .address import deriveAddress
from .contract import (
    IDENTITY_SIZE, MAX_MESSAGE_LENGTH, MAX_NAME_LENGTH, MAX_UPDATE_COUNT,
    SLOT_CAPACITY, USER_DATA_SEED
)
from .errors import (
    AlreadyInitialized, CodecError, DataTypeMismatch, UninitializedAccount,
    Unauthorized, ValueTooLong
)
from .instruction import Initialize, Instruction, UpdateMessage
from .record import Record, allocateSlot, decodeRecord, writeRecordInto


def _checkLength(field: str, value: str, limit: int):
    size = len(value.encode('utf-8'))
    if size > limit:
        raise ValueTooLong(f"{field} is {size} bytes, limit is {limit}")


class RecordStateMachine:
    """
    Pure transition function for user-data slots of one program.

    Args:
        namespaceIdentity: 32-byte program identity the slots are derived under
        domainSeed: Record family seed used for derivation
        slotCapacity: Allocation size for newly created slots
    """

    def __init__(self, namespaceIdentity: bytes, domainSeed: bytes = USER_DATA_SEED,
                 slotCapacity: int = SLOT_CAPACITY):
        if len(namespaceIdentity) != IDENTITY_SIZE:
            raise ValueError(f"namespaceIdentity must be {IDENTITY_SIZE} bytes")
        self.namespaceIdentity = bytes(namespaceIdentity)
        self.domainSeed = bytes(domainSeed)
        self.slotCapacity = slotCapacity

    def currentRecord(self, current: Optional[bytes]) -> Optional[Record]:
        """Decode a slot; None when Absent, DataTypeMismatch when unreadable."""
        if not current:
            return None
        try:
            record = decodeRecord(current)
        except CodecError as exc:
            raise DataTypeMismatch(f"slot does not hold a valid record: {exc}") from exc
        if not record.initialized:
            raise DataTypeMismatch("slot holds bytes but its flag is not set")
        return record

    def apply(self, current: Optional[bytes], instruction: Instruction, caller: bytes, *,
              address: Optional[bytes] = None) -> bytes:
        """
        Apply instruction to the slot contents current on behalf of caller.

        Args:
            current: Slot bytes, or None/b"" when Absent
            instruction: Decoded Initialize or UpdateMessage
            caller: Authorized 32-byte identity submitting the instruction
            address: Target slot address; when given, Initialize verifies it was derived from caller

        Returns:
            Complete new slot bytes

        Raises:
            RecordError subclass describing the single outcome
        """
        if len(caller) != IDENTITY_SIZE:
            raise ValueError(f"caller must be {IDENTITY_SIZE} bytes")
        caller = bytes(caller)

        record = self.currentRecord(current)

        if isinstance(instruction, Initialize):
            if record is not None:
                raise AlreadyInitialized(f"slot already belongs to {record.owner.hex()}")
            return self._initialize(instruction, caller, address)

        if isinstance(instruction, UpdateMessage):
            if record is None:
                raise UninitializedAccount("no record at this address")
            return self._updateMessage(current, record, instruction, caller)

        raise TypeError(f"Not an instruction: {type(instruction).__name__}")

    def _initialize(self, instruction: Initialize, caller: bytes, address: Optional[bytes]) -> bytes:
        if address is not None:
            expected, _ = deriveAddress(caller, self.domainSeed, self.namespaceIdentity)
            if expected != bytes(address):
                raise Unauthorized("address was not derived from the caller's identity")

        _checkLength("name", instruction.name, MAX_NAME_LENGTH)
        _checkLength("message", instruction.message, MAX_MESSAGE_LENGTH)

        record = Record(
            initialized=True,
            owner=caller,
            name=instruction.name,
            message=instruction.message,
            updateCount=0
        )
        return allocateSlot(record, self.slotCapacity)

    def _updateMessage(self, current: bytes, record: Record, instruction: UpdateMessage,
                       caller: bytes) -> bytes:
        if caller != record.owner:
            raise Unauthorized("caller is not the record owner")
        _checkLength("message", instruction.message, MAX_MESSAGE_LENGTH)
        if record.updateCount == MAX_UPDATE_COUNT:
            raise DataTypeMismatch("updateCount would overflow u64")

        updated = Record(
            initialized=True,
            owner=record.owner,
            name=record.name,
            message=instruction.message,
            updateCount=record.updateCount + 1
        )
        return writeRecordInto(current, updated)
