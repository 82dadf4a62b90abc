"""vault - per-owner user-data records stored at derived addresses

Packages:
    - core: address derivation, record/instruction codecs, transition function
    - host: storage backends, credentials, Program runner
"""

__version__ = "1.0-beta"
