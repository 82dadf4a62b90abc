"""vaultkit - shared building blocks for vault host applications

Contains reusable modules for:
    - logging: Hierarchical structured logging
    - config_loader: config.json loading with immutable defaults
    - canonical_json: RFC 8785 rendering of records and results
"""

__version__ = "1.0-beta"
__versionInfo__ = (1, 0, 0, "beta")
