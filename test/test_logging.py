"""
Logging Tests

Structured field formatting, name detection and program context.

Run: python -m pytest test/test_logging.py -v
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from vaultkit.logging import clearProgramContext, getLogger, getProgramContext, setProgramContext
from vaultkit.logging.context import ProgramContextFilter
from vaultkit.logging.logger import StructuredFormatter


def makeRecord(msg="Committed", **fields):
    record = logging.LogRecord('vault.test', logging.INFO, __file__, 1, msg, None, None)
    for key, value in fields.items():
        setattr(record, key, value)
    return record


class Probe:
    def __init__(self):
        self.log = getLogger()


class TestStructuredFormatter:

    def test_fields_appended(self):
        formatter = StructuredFormatter('%(levelname)s - %(message)s')
        line = formatter.format(makeRecord(address="ab", attempts=2))
        assert line == "INFO - Committed [address=ab, attempts=2]"

    def test_message_restored(self):
        record = makeRecord(address="ab")
        StructuredFormatter('%(message)s').format(record)
        assert record.msg == "Committed"

    def test_no_fields(self):
        assert StructuredFormatter('%(message)s').format(makeRecord()) == "Committed"


class TestGetLogger:

    def test_name_from_class(self):
        assert Probe().log.name.endswith('test_logging.Probe')

    def test_explicit_name(self):
        assert getLogger('vault.custom').name == 'vault.custom'

    def test_kwargs_accepted(self):
        log = getLogger('vault.kwargs')
        log.info("Structured", key="value")
        log.warning("With exc_info", exc_info=False, key="value")


class TestProgramContext:

    def test_filter_stamps_context(self):
        setProgramContext("aa" * 32, cluster="local")
        try:
            record = makeRecord()
            assert ProgramContextFilter().filter(record)
            assert record.programId == "aa" * 32
            assert record.cluster == "local"
        finally:
            clearProgramContext()

    def test_cleared_context(self):
        clearProgramContext()
        record = makeRecord()
        ProgramContextFilter().filter(record)
        assert not hasattr(record, 'programId')
        assert getProgramContext() == {'programId': None, 'cluster': None}
