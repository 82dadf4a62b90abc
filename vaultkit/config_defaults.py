"""Shared vault configuration backup used when config.json is missing or invalid."""

DEFAULT_CONFIG = {
    "_comment_purpose": "Single source of truth for vault host configuration (CLI and Program runner).",
    "_comment_programId": "Hex-encoded 32-byte namespace identity of the program owning the user-data slots.",
    "_comment_seed": "Domain seed mixed into every derived address. Must never change for an existing record family.",
    "_comment_conflictRetries": "How many times a transition is re-read and re-applied after a StorageConflict.",
    "configVersion": "1.0",
    "programId": "0000000000000000000000000000000000000000000000000000000000000001",
    "seed": "user-data",
    "cluster": "local",
    "keypairPath": "~/.config/solana/id.json",
    "storage": {
        "backend": "sqlite",
        "dbPath": "./data/vault.db"
    },
    "conflictRetries": 3,
    "logging": {
        "logDir": "./logs",
        "level": "INFO",
        "console": True,
        "utc": False
    }
}
