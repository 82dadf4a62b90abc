"""
Error taxonomy for the user-data core.

Every failure a transition can report has one ErrorKind and one exception class.
CodecError kinds are structural (bad bytes); DomainError kinds are expected
business outcomes. StorageConflict is raised by the host, never by the core, and
is the only kind worth retrying.
"""

from enum import Enum
from typing import Dict


class ErrorKind(str, Enum):
    """Named outcome of a failed operation"""
    BUMP_EXHAUSTED = "BumpExhausted"
    MALFORMED_RECORD = "MalformedRecord"
    INVALID_FLAG = "InvalidFlag"
    INVALID_ENCODING = "InvalidEncoding"
    UNKNOWN_INSTRUCTION = "UnknownInstruction"
    VALUE_TOO_LONG = "ValueTooLong"
    DATA_TYPE_MISMATCH = "DataTypeMismatch"
    ALREADY_INITIALIZED = "AlreadyInitialized"
    UNINITIALIZED_ACCOUNT = "UninitializedAccount"
    UNAUTHORIZED = "Unauthorized"
    STORAGE_CONFLICT = "StorageConflict"


# Custom program error numbers reported to clients
ERROR_CODES: Dict[ErrorKind, int] = {kind: index for index, kind in enumerate(ErrorKind)}


class RecordError(Exception):
    """Base class for every reportable failure"""
    kind: ErrorKind = None

    @property
    def code(self) -> int:
        return ERROR_CODES[self.kind]

    def toDict(self) -> dict:
        return {"errorKind": self.kind.value, "code": self.code, "errorMsg": str(self)}


class CodecError(RecordError):
    """Bytes could not be interpreted under the wire layout"""
    pass


class DomainError(RecordError):
    """A well-formed request that the record's rules reject"""
    pass


class BumpExhausted(RecordError):
    kind = ErrorKind.BUMP_EXHAUSTED


class MalformedRecord(CodecError):
    kind = ErrorKind.MALFORMED_RECORD


class InvalidFlag(CodecError):
    kind = ErrorKind.INVALID_FLAG


class InvalidEncoding(CodecError):
    kind = ErrorKind.INVALID_ENCODING


class UnknownInstruction(CodecError):
    kind = ErrorKind.UNKNOWN_INSTRUCTION


class DataTypeMismatch(RecordError):
    kind = ErrorKind.DATA_TYPE_MISMATCH


class ValueTooLong(DomainError):
    kind = ErrorKind.VALUE_TOO_LONG


class AlreadyInitialized(DomainError):
    kind = ErrorKind.ALREADY_INITIALIZED


class UninitializedAccount(DomainError):
    kind = ErrorKind.UNINITIALIZED_ACCOUNT


class Unauthorized(DomainError):
    kind = ErrorKind.UNAUTHORIZED


class StorageConflict(RecordError):
    kind = ErrorKind.STORAGE_CONFLICT


class InvalidSeeds(ValueError):
    """A (seeds, selector) pair that lands on the curve"""
    pass
