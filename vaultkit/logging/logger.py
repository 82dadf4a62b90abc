"""
Hierarchical structured logger for vault host processes.

Features:
- Logger name derived from the calling module/class (computed once, cached)
- One rotating log file per top-level app ('vault.log', ...)
- Structured keyword fields appended as [key=value, ...]

Usage:
    from vaultkit.logging import getLogger

    class Program:
        def __init__(self):
            self.log = getLogger()  # 'vault.host.program.Program'

        def commit(self):
            self.log.info("Committed", address=addressHex, attempts=1)

The pure record core (vault.core) never logs; only host code does.
"""

# Imports
import inspect, logging, logging.handlers, os, socket
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone as tz

from .context import ProgramContextFilter


# Global state
_hostname = socket.gethostname()
_configured = False
_fileHandlers = {}  # logPath -> handler, shared across loggers of one app
_config = {
    'logDir': None,
    'maxBytes': 10_000_000,
    'backupCount': 5,
    'console': True,
    'level': logging.INFO,
    'utc': False
}

# LogRecord attributes that are not structured fields
_RESERVED = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName',
    'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'hostname', 'asctime', 'taskName'
}


def configureLogging(logDir: Optional[str] = None, level: str = 'INFO', console: bool = True,
                     maxBytes: int = 10_000_000, backupCount: int = 5, utc: bool = False):
    """
    Configure global logging settings (call once at startup, before getLogger()).

    Args:
        logDir: Directory for log files (default: ./logs)
        level: Minimum log level name (default: 'INFO')
        console: Also log to stderr (default: True)
        maxBytes: Size per log file before rotation
        backupCount: Rotated files kept per app
        utc: Use UTC timestamps instead of local time
    """
    global _configured

    if logDir is None:
        logDir = os.path.abspath(os.path.join(os.getcwd(), "logs"))

    levelValue = getattr(logging, str(level).upper(), None)
    if not isinstance(levelValue, int):
        raise ValueError(f"Unknown log level: {level}")

    _config.update({'logDir': logDir, 'level': levelValue, 'console': console,
                    'maxBytes': maxBytes, 'backupCount': backupCount, 'utc': utc})

    Path(logDir).mkdir(parents=True, exist_ok=True)
    _configured = True


def _autoDetectName() -> str:
    """Walk the stack to the first frame outside vaultkit.logging; returns e.g. 'vault.host.storage.SqliteStorage'"""
    frame = inspect.currentframe()
    try:
        current = frame
        while current is not None:
            current = current.f_back
            if current is None:
                break

            module = inspect.getmodule(current)
            if module is None:
                continue

            moduleName = module.__name__
            if moduleName.startswith('vaultkit.logging') or moduleName.startswith('importlib'):
                continue

            hierarchy = 'main' if moduleName == '__main__' else moduleName

            className = None
            if 'self' in current.f_locals:
                className = current.f_locals['self'].__class__.__name__
            elif 'cls' in current.f_locals and isinstance(current.f_locals['cls'], type):
                className = current.f_locals['cls'].__name__

            if className:
                hierarchy = f"{hierarchy}.{className}"
            return hierarchy

        return 'unknown'
    finally:
        del frame


class StructuredFormatter(logging.Formatter):
    """Format: timestamp - hostname - logger.name - level - message [field1=value1, field2=value2]"""

    def __init__(self, fmt=None, datefmt=None, utc=False):
        super().__init__(fmt, datefmt)
        self.utc = utc

    def formatTime(self, record, datefmt=None):
        if self.utc:
            ct = datetime.fromtimestamp(record.created, tz=tz.utc)
        else:
            ct = datetime.fromtimestamp(record.created)

        if datefmt:
            return ct.strftime(datefmt)
        return f"{ct.strftime('%Y-%m-%d %H:%M:%S')},{int(record.msecs):03d}"

    def format(self, record):
        record.hostname = _hostname

        fields = [f"{key}={value}" for key, value in record.__dict__.items()
                  if key not in _RESERVED and not key.startswith('_')]

        # Restore msg afterwards so other handlers see the original
        originalMsg = record.msg
        if fields:
            record.msg = f"{originalMsg} [{', '.join(fields)}]"
        try:
            return super().format(record)
        finally:
            record.msg = originalMsg


def getLogger(name: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger, naming it from the call site when no name is given.

    The returned logger accepts structured fields as keyword arguments:
        log.warning("Transition rejected", errorKind="Unauthorized")
    """
    if not _configured:
        configureLogging()

    if name is None:
        name = _autoDetectName()

    logger = logging.getLogger(name)
    logger.propagate = False

    if not logger.handlers and not hasattr(logger, '_configuredByVault'):
        logger.setLevel(_config['level'])

        appName = name.split('.')[0]
        logPath = str(Path(_config['logDir']) / f"{appName}.log")

        if logPath not in _fileHandlers:
            fileHandler = logging.handlers.RotatingFileHandler(
                logPath,
                maxBytes=_config['maxBytes'],
                backupCount=_config['backupCount'],
                encoding='utf-8'
            )
            fileHandler.setLevel(_config['level'])
            fileHandler.setFormatter(StructuredFormatter(
                '%(asctime)s - %(hostname)s - %(name)s - %(levelname)s - %(message)s',
                utc=_config['utc']
            ))
            _fileHandlers[logPath] = fileHandler
        logger.addHandler(_fileHandlers[logPath])

        if _config['console']:
            consoleHandler = logging.StreamHandler()
            consoleHandler.setLevel(_config['level'])
            consoleHandler.setFormatter(StructuredFormatter('%(name)s - %(levelname)s - %(message)s',
                                                            utc=_config['utc']))
            logger.addHandler(consoleHandler)

        logger.addFilter(ProgramContextFilter())
        logger._configuredByVault = True

    return _wrapLogger(logger)


def _wrapLogger(logger: logging.Logger) -> logging.Logger:
    """Let log methods take structured fields as **kwargs instead of extra={...}."""
    if hasattr(logger, '_isWrapped'):
        return logger

    def wrap(original):
        def method(msg, *args, **kwargs):
            excInfo = kwargs.pop('exc_info', False)
            if kwargs:
                original(msg, *args, extra=kwargs, exc_info=excInfo)
            else:
                original(msg, *args, exc_info=excInfo)
        return method

    logger.debug = wrap(logger.debug)
    logger.info = wrap(logger.info)
    logger.warning = wrap(logger.warning)
    logger.error = wrap(logger.error)
    logger.critical = wrap(logger.critical)
    logger._isWrapped = True

    return logger
