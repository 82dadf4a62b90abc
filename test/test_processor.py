"""
Record State Machine Tests

Transition table, invariants and the A-C scenarios.

Run: python -m pytest test/test_processor.py -v
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from vault.core.address import deriveAddress
from vault.core.contract import SLOT_CAPACITY, USER_DATA_SEED
from vault.core.errors import (
    AlreadyInitialized, DataTypeMismatch, ErrorKind, RecordError, UninitializedAccount,
    Unauthorized, ValueTooLong
)
from vault.core.instruction import Initialize, UpdateMessage
from vault.core.processor import RecordStateMachine
from vault.core.record import Record, decodeRecord, encodeRecord

PROGRAM_ID = bytes(range(32))
OWNER = b"\x11" * 32
STRANGER = b"\x22" * 32


@pytest.fixture
def machine():
    return RecordStateMachine(PROGRAM_ID)


@pytest.fixture
def slotA(machine):
    """Scenario A slot"""
    return machine.apply(None, Initialize(name="John Doe", message="Hello Solana!"), OWNER)


class TestInitialize:

    def test_scenario_a(self, slotA):
        record = decodeRecord(slotA)
        assert record == Record(initialized=True, owner=OWNER, name="John Doe",
                                message="Hello Solana!", updateCount=0)
        assert len(encodeRecord(record)) == 70

    def test_slot_allocated_at_capacity(self, slotA):
        assert len(slotA) == SLOT_CAPACITY
        assert slotA[70:] == bytes(SLOT_CAPACITY - 70)

    def test_empty_bytes_are_absent(self, machine):
        slot = machine.apply(b"", Initialize(name="a", message="b"), OWNER)
        assert decodeRecord(slot).owner == OWNER

    def test_scenario_c_already_initialized(self, machine, slotA):
        before = bytes(slotA)
        with pytest.raises(AlreadyInitialized):
            machine.apply(slotA, Initialize(name="John Doe", message="Hello Solana!"), OWNER)
        assert slotA == before

    def test_already_initialized_for_stranger(self, machine, slotA):
        with pytest.raises(AlreadyInitialized):
            machine.apply(slotA, Initialize(name="x", message="y"), STRANGER)

    @pytest.mark.parametrize("name,message", [
        ("n" * 65, "ok"),
        ("ok", "m" * 257),
        ("é" * 33, "ok"),  # 66 UTF-8 bytes
    ])
    def test_value_too_long(self, machine, name, message):
        with pytest.raises(ValueTooLong):
            machine.apply(None, Initialize(name=name, message=message), OWNER)

    def test_limits_inclusive(self, machine):
        slot = machine.apply(None, Initialize(name="n" * 64, message="m" * 256), OWNER)
        assert decodeRecord(slot).size == SLOT_CAPACITY

    def test_seeded_address_accepted(self, machine):
        address, _ = deriveAddress(OWNER, USER_DATA_SEED, PROGRAM_ID)
        slot = machine.apply(None, Initialize(name="a", message="b"), OWNER, address=address)
        assert decodeRecord(slot).owner == OWNER

    def test_foreign_address_unauthorized(self, machine):
        address, _ = deriveAddress(STRANGER, USER_DATA_SEED, PROGRAM_ID)
        with pytest.raises(Unauthorized):
            machine.apply(None, Initialize(name="a", message="b"), OWNER, address=address)


class TestUpdateMessage:

    def test_scenario_b(self, machine, slotA):
        slot = machine.apply(slotA, UpdateMessage(message="Hello Solana, again!"), OWNER)
        record = decodeRecord(slot)
        assert record.updateCount == 1
        assert record.message == "Hello Solana, again!"
        assert record.name == "John Doe" and record.owner == OWNER
        assert len(encodeRecord(record)) == 1 + 32 + 4 + 8 + 4 + 20 + 8

    def test_capacity_never_shrinks(self, machine, slotA):
        slot = machine.apply(slotA, UpdateMessage(message=""), OWNER)
        assert len(slot) == len(slotA)

    def test_monotonic_count(self, machine, slotA):
        slot = slotA
        for n in range(1, 8):
            slot = machine.apply(slot, UpdateMessage(message=f"message {n}"), OWNER)
            record = decodeRecord(slot)
            assert record.updateCount == n
            assert record.name == "John Doe"
        assert decodeRecord(slot).message == "message 7"

    def test_uninitialized(self, machine):
        with pytest.raises(UninitializedAccount):
            machine.apply(None, UpdateMessage(message="hi"), OWNER)

    def test_stranger_unauthorized(self, machine, slotA):
        with pytest.raises(Unauthorized) as excInfo:
            machine.apply(slotA, UpdateMessage(message="hijack"), STRANGER)
        assert excInfo.value.kind == ErrorKind.UNAUTHORIZED
        assert decodeRecord(slotA).message == "Hello Solana!"

    def test_authorization_checked_before_length(self, machine, slotA):
        with pytest.raises(Unauthorized):
            machine.apply(slotA, UpdateMessage(message="m" * 300), STRANGER)

    def test_message_too_long(self, machine, slotA):
        with pytest.raises(ValueTooLong):
            machine.apply(slotA, UpdateMessage(message="m" * 257), OWNER)

    def test_count_overflow(self, machine):
        record = Record(initialized=True, owner=OWNER, name="a", message="b", updateCount=2 ** 64 - 1)
        with pytest.raises(DataTypeMismatch):
            machine.apply(encodeRecord(record), UpdateMessage(message="c"), OWNER)


class TestDataTypeMismatch:

    @pytest.mark.parametrize("slot", [
        b"\x07" + b"\x00" * 68,                 # bad flag
        b"\x01" + b"\x00" * 20,                 # truncated
        bytes(SLOT_CAPACITY),                   # allocated but never initialized
        b"\x01" + b"\x11" * 32 + b"\x02\x00\x00\x00\xff\xff" + b"\x00" * 12,  # bad UTF-8
    ])
    @pytest.mark.parametrize("instruction", [
        Initialize(name="a", message="b"),
        UpdateMessage(message="c"),
    ])
    def test_undecodable_slot(self, machine, slot, instruction):
        with pytest.raises(DataTypeMismatch):
            machine.apply(slot, instruction, OWNER)


class TestTotality:
    """Every (state, instruction, caller) yields bytes or one named error"""

    def test_all_combinations(self, machine, slotA):
        states = [None, b"", slotA, b"\x09garbage"]
        instructions = [
            Initialize(name="John Doe", message="Hello Solana!"),
            Initialize(name="n" * 65, message="m"),
            UpdateMessage(message="fresh"),
            UpdateMessage(message="m" * 257),
        ]
        for state in states:
            for instruction in instructions:
                for caller in (OWNER, STRANGER):
                    try:
                        result = machine.apply(state, instruction, caller)
                        assert isinstance(result, bytes)
                        assert decodeRecord(result).initialized
                    except RecordError as exc:
                        assert isinstance(exc.kind, ErrorKind)


class TestConstruction:

    def test_rejects_bad_namespace(self):
        with pytest.raises(ValueError):
            RecordStateMachine(b"\x00" * 16)

    def test_rejects_bad_caller(self, machine):
        with pytest.raises(ValueError):
            machine.apply(None, Initialize(name="a", message="b"), b"\x01")

    def test_rejects_non_instruction(self, machine):
        with pytest.raises(TypeError):
            machine.apply(None, "Initialize", OWNER)
