"""
Vault core - the pure user-data record engine.

Address derivation, record/instruction codecs and the transition function.
Nothing in this package logs, retries or touches storage.
"""

from .address import createAddress, deriveAddress, isOnCurve
from .contract import SLOT_CAPACITY, USER_DATA_SEED, recordSize
from .errors import ErrorKind, RecordError
from .instruction import Initialize, UpdateMessage, decodeInstruction, encodeInstruction
from .processor import RecordStateMachine
from .record import Record, decodeRecord, encodeRecord, writeRecordInto

__all__ = [
    'createAddress', 'deriveAddress', 'isOnCurve',
    'SLOT_CAPACITY', 'USER_DATA_SEED', 'recordSize',
    'ErrorKind', 'RecordError',
    'Initialize', 'UpdateMessage', 'decodeInstruction', 'encodeInstruction',
    'RecordStateMachine',
    'Record', 'decodeRecord', 'encodeRecord', 'writeRecordInto'
]
