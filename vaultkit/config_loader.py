"""Utility helpers for loading vault config.json with shared fallbacks."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Optional, Tuple

import orjson

from .config_defaults import DEFAULT_CONFIG

ConfigResult = Tuple[dict, bool]

STORAGE_BACKENDS = ('memory', 'sqlite')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def validateConfig(config: dict) -> None:
    """Raise ValueError describing the first problem found in a merged config."""
    if not isinstance(config, dict):
        raise ValueError('config is not a JSON object')

    programId = config.get('programId')
    if not isinstance(programId, str) or len(programId) != 64:
        raise ValueError("'programId' must be 64 hex characters")
    try:
        bytes.fromhex(programId)
    except ValueError:
        raise ValueError("'programId' is not valid hex") from None

    seed = config.get('seed')
    if not isinstance(seed, str) or not seed or len(seed.encode('utf-8')) > 32:
        raise ValueError("'seed' must be a non-empty string of at most 32 UTF-8 bytes")

    retries = config.get('conflictRetries')
    if not isinstance(retries, int) or isinstance(retries, bool) or retries < 0:
        raise ValueError("'conflictRetries' must be a non-negative integer")

    storage = config.get('storage')
    if not isinstance(storage, dict):
        raise ValueError("Missing 'storage' section")
    if storage.get('backend') not in STORAGE_BACKENDS:
        raise ValueError(f"'storage.backend' must be one of {', '.join(STORAGE_BACKENDS)}")
    if storage['backend'] == 'sqlite' and not storage.get('dbPath'):
        raise ValueError("'storage.dbPath' is required for the sqlite backend")

    logConfig = config.get('logging')
    if not isinstance(logConfig, dict):
        raise ValueError("Missing 'logging' section")
    level = logConfig.get('level', 'INFO')
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ValueError(f"'logging.level' must be one of {', '.join(LOG_LEVELS)}")


def loadConfig(path: Optional[str | Path], log: Optional[object] = None) -> ConfigResult:
    """
    Load config.json merged over DEFAULT_CONFIG.

    Returns (config, fromDefaults). fromDefaults is True when the file could not be
    read or validated and the immutable defaults were used instead.
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG), True

    cfgPath = Path(path)
    try:
        raw = orjson.loads(cfgPath.read_bytes())
        if not isinstance(raw, dict):
            raise ValueError('config is not a JSON object')
        config = _merge(DEFAULT_CONFIG, raw)
        validateConfig(config)
        if log:
            log.info('Loaded config.json', event='configLoad', configPath=str(cfgPath),
                     configVersion=config.get('configVersion'))
        return config, False
    except (OSError, ValueError) as exc:
        # orjson.JSONDecodeError is a ValueError subclass
        if log:
            log.error('Failed to load config.json', event='configLoadError', configPath=str(cfgPath),
                      errorClass=type(exc).__name__, errorMsg=str(exc))

    fallback = copy.deepcopy(DEFAULT_CONFIG)
    if log:
        log.warning('Loaded config backup defaults', event='configBackupLoad',
                    configVersion=fallback.get('configVersion'))
    return fallback, True
