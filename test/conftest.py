"""Shared pytest setup: keep test logs out of the working tree."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from vaultkit.logging import configureLogging


@pytest.fixture(scope='session', autouse=True)
def testLogging(tmp_path_factory):
    """Route all vault logs to a temp dir, no console noise"""
    configureLogging(logDir=str(tmp_path_factory.mktemp('logs')), level='DEBUG', console=False)
