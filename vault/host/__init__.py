"""
Vault host - collaborators around the record core.

Storage with atomic compare-and-commit, credential loading/authorization, and
the Program runner that wires them to the state machine.
"""

from .credentials import Authorizer, Keypair, KeypairAuthorizer, KeypairFileProvider, loadKeypair
from .program import Program, TransitionResult
from .storage import MemoryStorage, SqliteStorage, Storage, createStorage

__all__ = [
    'Authorizer', 'Keypair', 'KeypairAuthorizer', 'KeypairFileProvider', 'loadKeypair',
    'Program', 'TransitionResult',
    'MemoryStorage', 'SqliteStorage', 'Storage', 'createStorage'
]
