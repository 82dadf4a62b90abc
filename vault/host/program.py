"""
Program runner - drives the record core against real storage.

Flow per submission:
1. Derive the caller's slot address
2. Decode the instruction bytes
3. Authorize the caller
4. Read slot -> RecordStateMachine.apply -> commit(address, prior, new)
5. On a commit conflict, re-read and re-apply up to conflictRetries times

Every submission yields exactly one TransitionResult. Core errors are logged
here, never inside vault.core. A StorageError (backend failure, not a
conflict) yields a failed result with no errorKind.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from vault.core.address import deriveAddress
from vault.core.errors import (
    CodecError, DataTypeMismatch, ErrorKind, RecordError, StorageConflict, Unauthorized
)
from vault.core.instruction import (
    Initialize, UpdateMessage, decodeInstruction, encodeInstruction, instructionToDict
)
from vault.core.processor import RecordStateMachine
from vault.core.record import Record, decodeRecord
from vault.host.credentials import Authorizer
from vault.host.storage import Storage, StorageError
from vaultkit.config_defaults import DEFAULT_CONFIG
from vaultkit.logging import getLogger


@dataclass
class TransitionResult:
    """Outcome of one submitted instruction"""
    ok: bool
    address: Optional[bytes] = None
    selector: Optional[int] = None
    record: Optional[Record] = None
    errorKind: Optional[ErrorKind] = None
    errorMsg: Optional[str] = None
    attempts: int = 0

    def toDict(self) -> Dict[str, Any]:
        result = {"ok": self.ok, "attempts": self.attempts}
        if self.address is not None:
            result["address"] = self.address.hex()
            result["selector"] = self.selector
        if self.record is not None:
            result["record"] = self.record.toDict()
        if self.errorKind is not None:
            result["errorKind"] = self.errorKind.value
        if self.errorMsg is not None:
            result["errorMsg"] = self.errorMsg
        return result


class Program:
    """
    Host-side entry point for user-data transitions.

    Args:
        storage: Slot store with atomic commit
        authorizer: Confirms callers control their identities
        config: Merged vault config (programId, seed, conflictRetries)
    """

    def __init__(self, storage: Storage, authorizer: Authorizer, config: dict = None):
        self.config = config or DEFAULT_CONFIG
        self.log = getLogger()
        self.storage = storage
        self.authorizer = authorizer

        self.programId = bytes.fromhex(self.config['programId'])
        self.seed = self.config.get('seed', DEFAULT_CONFIG['seed']).encode('utf-8')
        self.conflictRetries = self.config.get('conflictRetries', DEFAULT_CONFIG['conflictRetries'])
        self.machine = RecordStateMachine(self.programId, self.seed)

    def deriveAddress(self, owner: bytes) -> Tuple[bytes, int]:
        return deriveAddress(owner, self.seed, self.programId)

    def fetchRecord(self, owner: bytes) -> Optional[Record]:
        """
        Current record for owner, or None when the slot is Absent.

        Raises:
            DataTypeMismatch: slot bytes are not a valid record
            StorageError: the backend could not be read
        """
        address, _ = self.deriveAddress(owner)
        return self.machine.currentRecord(self.storage.read(address))

    def initialize(self, owner: bytes, name: str, message: str) -> TransitionResult:
        return self.submit(owner, encodeInstruction(Initialize(name=name, message=message)))

    def updateMessage(self, owner: bytes, message: str) -> TransitionResult:
        return self.submit(owner, encodeInstruction(UpdateMessage(message=message)))

    def submit(self, owner: bytes, instructionData: bytes) -> TransitionResult:
        """Run one encoded instruction for owner and report the outcome"""
        owner = bytes(owner)
        result = TransitionResult(ok=False)

        try:
            result.address, result.selector = self.deriveAddress(owner)
            instruction = decodeInstruction(instructionData)
            self.log.debug("Processing instruction", owner=owner.hex(),
                           instruction=instructionToDict(instruction))

            if not self.authorizer.authorize(owner):
                raise Unauthorized("caller does not control the claimed identity")

            newBytes = self._applyAndCommit(result, instruction, owner)
            result.record = decodeRecord(newBytes)
            result.ok = True

            self.log.info("Transition committed", address=result.address.hex(),
                          instruction=type(instruction).__name__,
                          updateCount=result.record.updateCount, attempts=result.attempts)
        except RecordError as exc:
            result.errorKind = exc.kind
            result.errorMsg = str(exc)
            self._logFailure(result, exc)
        except StorageError as exc:
            result.errorMsg = str(exc)
            self.log.error("Transition aborted, storage unavailable", address=result.address.hex(),
                           errorMsg=str(exc), attempts=result.attempts)

        return result

    def _applyAndCommit(self, result: TransitionResult, instruction, owner: bytes) -> bytes:
        while True:
            result.attempts += 1
            current = self.storage.read(result.address)
            newBytes = self.machine.apply(current, instruction, owner, address=result.address)

            if self.storage.commit(result.address, current, newBytes):
                return newBytes

            if result.attempts > self.conflictRetries:
                raise StorageConflict(f"slot changed during commit after {result.attempts} attempts")
            self.log.warning("Commit conflict, retrying", address=result.address.hex(),
                             attempt=result.attempts)

    def _logFailure(self, result: TransitionResult, exc: RecordError):
        fields = {"errorKind": exc.kind.value, "errorMsg": str(exc), "attempts": result.attempts}
        if result.address is not None:
            fields["address"] = result.address.hex()

        if isinstance(exc, (CodecError, DataTypeMismatch, StorageConflict)):
            self.log.error("Transition failed", **fields)
        else:
            self.log.warning("Transition rejected", **fields)
