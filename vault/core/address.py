"""
Derived-address computation for user-data slots.

A slot address is a SHA-256 digest of (domain seed, owner identity, selector,
namespace identity, marker) that is forced off the Ed25519 curve, so no private
key can ever sign for it. Selectors are tried from 255 downwards and the first
off-curve candidate wins.

Construction:
  SHA256(domainSeed + ownerIdentity + bytes([selector]) + namespaceIdentity + b"ProgramDerivedAddress")

Pure and deterministic: no state, no I/O. Callers must pass the same domain
seed every time they address the same record family.
"""

import hashlib
from typing import Tuple

from .contract import IDENTITY_SIZE, MAX_SEED_LENGTH, PDA_MARKER
from .errors import BumpExhausted, InvalidSeeds

# Ed25519 field prime and twisted Edwards curve constant d = -121665/121666
_P = 2 ** 255 - 19
_D = (-121665 * pow(121666, _P - 2, _P)) % _P

_Y_MASK = (1 << 255) - 1


def isOnCurve(candidate: bytes) -> bool:
    """
    True if the 32 bytes decompress to a point on the Ed25519 curve.

    The top bit is the sign of x and is ignored; y is taken modulo p. The point
    exists iff x^2 = (y^2 - 1) / (d*y^2 + 1) is zero or a quadratic residue.
    d is a non-residue, so the denominator never vanishes.
    """
    if len(candidate) != IDENTITY_SIZE:
        raise ValueError(f"Expected {IDENTITY_SIZE} bytes, got {len(candidate)}")

    y = (int.from_bytes(candidate, 'little') & _Y_MASK) % _P
    ySquared = y * y % _P
    u = (ySquared - 1) % _P
    v = (_D * ySquared + 1) % _P
    xSquared = u * pow(v, _P - 2, _P) % _P

    if xSquared == 0:
        return True
    # Euler's criterion
    return pow(xSquared, (_P - 1) // 2, _P) == 1


def _validateInputs(ownerIdentity: bytes, domainSeed: bytes, namespaceIdentity: bytes):
    if len(ownerIdentity) != IDENTITY_SIZE:
        raise ValueError(f"ownerIdentity must be {IDENTITY_SIZE} bytes, got {len(ownerIdentity)}")
    if len(namespaceIdentity) != IDENTITY_SIZE:
        raise ValueError(f"namespaceIdentity must be {IDENTITY_SIZE} bytes, got {len(namespaceIdentity)}")
    if len(domainSeed) > MAX_SEED_LENGTH:
        raise ValueError(f"domainSeed exceeds {MAX_SEED_LENGTH} bytes")


def _candidate(ownerIdentity: bytes, domainSeed: bytes, selector: int, namespaceIdentity: bytes) -> bytes:
    hasher = hashlib.sha256()
    hasher.update(domainSeed)
    hasher.update(ownerIdentity)
    hasher.update(bytes([selector]))
    hasher.update(namespaceIdentity)
    hasher.update(PDA_MARKER)
    return hasher.digest()


def createAddress(ownerIdentity: bytes, domainSeed: bytes, selector: int, namespaceIdentity: bytes) -> bytes:
    """
    Address for one specific selector.

    Raises:
        InvalidSeeds: the candidate is a valid curve point
    """
    _validateInputs(ownerIdentity, domainSeed, namespaceIdentity)
    if not 0 <= selector <= 255:
        raise ValueError(f"selector must be in [0, 255], got {selector}")

    address = _candidate(ownerIdentity, domainSeed, selector, namespaceIdentity)
    if isOnCurve(address):
        raise InvalidSeeds(f"selector {selector} yields an on-curve address")
    return address


def deriveAddress(ownerIdentity: bytes, domainSeed: bytes, namespaceIdentity: bytes) -> Tuple[bytes, int]:
    """
    Find the canonical (address, selector) for an owner's slot.

    Args:
        ownerIdentity: 32-byte owner identity
        domainSeed: Record family seed (at most 32 bytes), e.g. b"user-data"
        namespaceIdentity: 32-byte program identity

    Returns:
        (address, selector) for the highest selector giving an off-curve address

    Raises:
        BumpExhausted: every selector in [0, 255] lands on the curve
    """
    _validateInputs(ownerIdentity, domainSeed, namespaceIdentity)

    for selector in range(255, -1, -1):
        address = _candidate(ownerIdentity, domainSeed, selector, namespaceIdentity)
        if not isOnCurve(address):
            return address, selector

    raise BumpExhausted("no selector in [0, 255] yields an off-curve address")
