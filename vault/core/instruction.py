"""
InstructionCodec - mutation requests for user-data records.

Wire format: opcode u8 (0 = Initialize, 1 = UpdateMessage) followed by the
variant's string fields in declaration order, each a u32-LE length prefix and
UTF-8 bytes. Only structure is checked here; size limits belong to the state
machine.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Union

from .contract import INSTRUCTION_FIELDS, OPCODE, OPCODE_INITIALIZE, OPCODE_UPDATE_MESSAGE
from .errors import MalformedRecord, UnknownInstruction
from .wire import packString, readString, readStruct


@dataclass(frozen=True)
class Initialize:
    """Create the caller's record"""
    name: str
    message: str

    opcode = OPCODE_INITIALIZE


@dataclass(frozen=True)
class UpdateMessage:
    """Replace the message of an existing record"""
    message: str

    opcode = OPCODE_UPDATE_MESSAGE


Instruction = Union[Initialize, UpdateMessage]


def encodeInstruction(instruction: Instruction) -> bytes:
    if isinstance(instruction, Initialize):
        fields = [instruction.name, instruction.message]
    elif isinstance(instruction, UpdateMessage):
        fields = [instruction.message]
    else:
        raise TypeError(f"Not an instruction: {type(instruction).__name__}")

    return OPCODE.pack(instruction.opcode) + b"".join(packString(value) for value in fields)


def decodeInstruction(data: bytes) -> Instruction:
    """
    Decode one instruction.

    Raises:
        UnknownInstruction: empty input or opcode outside the union
        MalformedRecord: buffer ends inside a field, or bytes remain after the last field
        InvalidEncoding: a string field is not UTF-8
    """
    data = bytes(data)
    if not data:
        raise UnknownInstruction("empty instruction data")

    opcode, offset = readStruct(OPCODE, data, 0, "opcode")
    if opcode not in INSTRUCTION_FIELDS:
        raise UnknownInstruction(f"unknown opcode {opcode}")

    values = {}
    for field in INSTRUCTION_FIELDS[opcode]:
        values[field], offset = readString(data, offset, field)

    if offset != len(data):
        raise MalformedRecord(f"{len(data) - offset} trailing bytes after instruction fields")

    if opcode == OPCODE_INITIALIZE:
        return Initialize(**values)
    if opcode == OPCODE_UPDATE_MESSAGE:
        return UpdateMessage(**values)
    raise UnknownInstruction(f"no instruction type for opcode {opcode}")


def instructionToDict(instruction: Instruction) -> Dict[str, Any]:
    """Loggable form of an instruction"""
    return {"instruction": type(instruction).__name__, **asdict(instruction)}
