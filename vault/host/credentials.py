"""
Credential provider and authorizer.

Keypairs are stored the way the signing environment's tooling writes them: a JSON
array of 64 integers, the 32-byte secret followed by the 32-byte public identity.
Loading happens at the host boundary and the result is injected into the
Program runner; the record core never reads credentials.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

import orjson

from vault.core.contract import IDENTITY_SIZE
from vaultkit.logging import getLogger


class CredentialError(Exception):
    """Keypair file missing or malformed"""
    pass


@dataclass(frozen=True)
class Keypair:
    secret: bytes = field(repr=False)
    identity: bytes

    @property
    def identityHex(self) -> str:
        return self.identity.hex()

    @staticmethod
    def fromBytes(raw: bytes) -> 'Keypair':
        if len(raw) != IDENTITY_SIZE * 2:
            raise CredentialError(f"keypair must be {IDENTITY_SIZE * 2} bytes, got {len(raw)}")
        return Keypair(secret=bytes(raw[:IDENTITY_SIZE]), identity=bytes(raw[IDENTITY_SIZE:]))


def loadKeypair(path) -> Keypair:
    """Read a 64-integer JSON keypair file."""
    keyPath = Path(path).expanduser()
    try:
        values = orjson.loads(keyPath.read_bytes())
    except OSError as exc:
        raise CredentialError(f"cannot read keypair {keyPath}: {exc}") from exc
    except orjson.JSONDecodeError as exc:
        raise CredentialError(f"keypair {keyPath} is not JSON: {exc}") from exc

    if not isinstance(values, list) or not all(isinstance(v, int) and 0 <= v <= 255 for v in values):
        raise CredentialError(f"keypair {keyPath} must be a JSON array of byte values")
    return Keypair.fromBytes(bytes(values))


class KeypairFileProvider:
    """Loads a keypair lazily from a fixed path and caches it"""

    def __init__(self, path):
        self.path = Path(path).expanduser()
        self._keypair: Optional[Keypair] = None

    def get(self) -> Keypair:
        if self._keypair is None:
            self._keypair = loadKeypair(self.path)
        return self._keypair


class Authorizer(ABC):
    """Confirms the caller controls the identity it claims"""

    @abstractmethod
    def authorize(self, claimedIdentity: bytes) -> bool:
        pass


class KeypairAuthorizer(Authorizer):
    """Authorizes exactly the identities whose keypairs it holds"""

    def __init__(self, keypairs: Iterable[Keypair] = ()):
        self.log = getLogger()
        self._keypairs: Dict[bytes, Keypair] = {}
        for keypair in keypairs:
            self.add(keypair)

    def add(self, keypair: Keypair):
        self._keypairs[keypair.identity] = keypair

    def authorize(self, claimedIdentity: bytes) -> bool:
        allowed = bytes(claimedIdentity) in self._keypairs
        if not allowed:
            self.log.warning("Authorization refused", identity=bytes(claimedIdentity).hex())
        return allowed
