"""
vaultkit logging - hierarchical structured logger.

API:
    from vaultkit.logging import getLogger

    log = getLogger()                     # Auto: 'vault.main'
    log.info("Message", key=value)

    # Global configuration (optional, once at startup)
    from vaultkit.logging import configureLogging
    configureLogging(logDir='./logs', level='DEBUG')
"""

from .logger import getLogger, configureLogging
from .context import (
    setProgramContext,
    getProgramContext,
    clearProgramContext
)

__all__ = [
    'getLogger',
    'configureLogging',
    'setProgramContext',
    'getProgramContext',
    'clearProgramContext'
]
