"""
Vault Layout Contract Definitions

SINGLE SOURCE OF TRUTH for the user-data wire layout and limits.
Both RecordCodec and InstructionCodec read their formats from here; any client
that writes these bytes must follow the same table.

DO NOT duplicate these definitions elsewhere in the codebase.

Record layout (little-endian, fixed order):
  flag u8 | owner 32B | name_len u32 | name | message_len u32 | message | update_count u64

Instruction layout:
  opcode u8 | fields, each as u32 length prefix + UTF-8 bytes
"""

import struct
from typing import Dict, List, Tuple


# ============================================================================
# Identity
# ============================================================================

IDENTITY_SIZE = 32

# Domain seed for the user-data record family
USER_DATA_SEED = b"user-data"

# Per-seed length limit of the signing environment
MAX_SEED_LENGTH = 32

# Suffix appended to every derivation hash input
PDA_MARKER = b"ProgramDerivedAddress"


# ============================================================================
# Field limits
# ============================================================================

MAX_NAME_LENGTH = 64
MAX_MESSAGE_LENGTH = 256


# ============================================================================
# Struct formats
# ============================================================================

FLAG = struct.Struct('<B')
LENGTH_PREFIX = struct.Struct('<I')
UPDATE_COUNT = struct.Struct('<Q')
OPCODE = struct.Struct('<B')

MAX_UPDATE_COUNT = 2 ** 64 - 1

# (field, kind) in wire order; kind is a struct, 'raw32' or 'str'
RECORD_FIELDS: List[Tuple[str, object]] = [
    ("initialized", FLAG),
    ("owner", "raw32"),
    ("name", "str"),
    ("message", "str"),
    ("updateCount", UPDATE_COUNT),
]

# Bytes of a record excluding the two string bodies
RECORD_FIXED_SIZE = FLAG.size + IDENTITY_SIZE + LENGTH_PREFIX.size * 2 + UPDATE_COUNT.size

# Capacity policy: every new slot is allocated for the largest legal record
SLOT_CAPACITY = RECORD_FIXED_SIZE + MAX_NAME_LENGTH + MAX_MESSAGE_LENGTH


# ============================================================================
# Opcodes
# ============================================================================

OPCODE_INITIALIZE = 0
OPCODE_UPDATE_MESSAGE = 1

# Opcode -> ordered string fields
INSTRUCTION_FIELDS: Dict[int, List[str]] = {
    OPCODE_INITIALIZE: ["name", "message"],
    OPCODE_UPDATE_MESSAGE: ["message"],
}


def recordSize(name: str, message: str) -> int:
    """Logical encoded size of a record holding these strings."""
    return RECORD_FIXED_SIZE + len(name.encode('utf-8')) + len(message.encode('utf-8'))


# ============================================================================
# Validation Helpers
# ============================================================================

def validateLayout():
    """
    Validate the layout constants agree with each other.
    Called at module import to catch contract drift early.
    """
    assert [name for name, _ in RECORD_FIELDS] == \
        ["initialized", "owner", "name", "message", "updateCount"], \
        "RECORD_FIELDS order is part of the wire contract"

    assert RECORD_FIXED_SIZE == 1 + 32 + 4 + 4 + 8, \
        "RECORD_FIXED_SIZE must match the record table"

    assert SLOT_CAPACITY == 369, \
        "SLOT_CAPACITY must hold the largest legal record"

    assert sorted(INSTRUCTION_FIELDS) == list(range(len(INSTRUCTION_FIELDS))), \
        "opcodes must be dense starting from 0"


validateLayout()
