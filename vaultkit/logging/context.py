"""
Logging context for the program a host process is serving.

Stamps programId and cluster onto every log record once set.
"""

import logging
from typing import Optional
from contextvars import ContextVar

_program_id: ContextVar[Optional[str]] = ContextVar('program_id', default=None)
_cluster: ContextVar[Optional[str]] = ContextVar('cluster', default=None)


class ProgramContextFilter(logging.Filter):
    """Adds programId/cluster fields to records when a context is set"""

    def filter(self, record):
        programId = _program_id.get()
        cluster = _cluster.get()

        if programId:
            record.programId = programId
        if cluster:
            record.cluster = cluster

        return True


def setProgramContext(programId: str, cluster: str = None):
    """
    Set program-level context for logging

    Args:
        programId: Hex namespace identity of the program
        cluster: Storage/cluster label (optional)
    """
    _program_id.set(programId)
    if cluster:
        _cluster.set(cluster)


def getProgramContext() -> dict:
    return {
        'programId': _program_id.get(),
        'cluster': _cluster.get()
    }


def clearProgramContext():
    _program_id.set(None)
    _cluster.set(None)
