"""
CLI Tests

Drives vault.main against an on-disk SQLite store and keypair file.

Run: python -m pytest test/test_cli.py -v
"""

import sqlite3
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import orjson
import pytest

from vault.main import main

OWNER_HEX = "11" * 32


@pytest.fixture
def workspace(tmp_path):
    """Config + keypair pointing at a temp SQLite store"""
    keypairPath = tmp_path / 'id.json'
    keypairPath.write_bytes(orjson.dumps([1] * 32 + [0x11] * 32))

    configPath = tmp_path / 'config.json'
    configPath.write_bytes(orjson.dumps({
        'keypairPath': str(keypairPath),
        'storage': {'backend': 'sqlite', 'dbPath': str(tmp_path / 'vault.db')},
        'logging': {'logDir': str(tmp_path / 'logs'), 'console': False}
    }))
    return configPath


def run(capsys, *argv):
    code = main(list(argv))
    out = capsys.readouterr().out.strip()
    return code, (orjson.loads(out) if out else None)


class TestCommands:

    def test_derive(self, workspace, capsys):
        code, out = run(capsys, '--config', str(workspace), 'derive')
        assert code == 0
        assert out['owner'] == OWNER_HEX
        assert len(out['address']) == 64
        assert 0 <= out['selector'] <= 255

    def test_show_absent(self, workspace, capsys):
        code, out = run(capsys, '--config', str(workspace), 'show')
        assert code == 0
        assert out['record'] is None

    def test_full_flow(self, workspace, capsys):
        code, out = run(capsys, '--config', str(workspace), 'initialize',
                        '--name', 'John Doe', '--message', 'Hello Solana!')
        assert code == 0
        assert out['ok'] is True
        assert out['record']['updateCount'] == 0

        code, out = run(capsys, '--config', str(workspace), 'initialize',
                        '--name', 'John Doe', '--message', 'again')
        assert code == 1
        assert out['errorKind'] == 'AlreadyInitialized'

        code, out = run(capsys, '--config', str(workspace), 'update', '--message', 'Hello Solana, again!')
        assert code == 0
        assert out['record']['updateCount'] == 1

        code, out = run(capsys, '--config', str(workspace), 'show')
        assert code == 0
        assert out['record'] == {
            'initialized': True,
            'owner': OWNER_HEX,
            'name': 'John Doe',
            'message': 'Hello Solana, again!',
            'updateCount': 1
        }

    def test_update_without_record(self, workspace, capsys):
        code, out = run(capsys, '--config', str(workspace), 'update', '--message', 'hi')
        assert code == 1
        assert out['errorKind'] == 'UninitializedAccount'

    def test_show_unreadable_store(self, workspace, tmp_path, capsys):
        run(capsys, '--config', str(workspace), 'derive')
        other = sqlite3.connect(str(tmp_path / 'vault.db'))
        other.execute("DROP TABLE slots")
        other.commit()
        other.close()

        code, out = run(capsys, '--config', str(workspace), 'show')
        assert code == 1
        assert 'no such table' in out['errorMsg']


class TestBootstrapFailures:

    def test_missing_keypair(self, workspace, tmp_path, capsys):
        code, out = run(capsys, '--config', str(workspace), '--keypair', str(tmp_path / 'none.json'), 'derive')
        assert code == 2
        assert out is None

    def test_bad_keypair(self, workspace, tmp_path, capsys):
        badPath = tmp_path / 'bad.json'
        badPath.write_bytes(orjson.dumps([1, 2, 3]))
        code, _ = run(capsys, '--config', str(workspace), '--keypair', str(badPath), 'derive')
        assert code == 2

    def test_bad_config(self, tmp_path, capsys):
        configPath = tmp_path / 'broken.json'
        configPath.write_bytes(b'{"programId": "nope", "logging": {"console": false}}')
        code, _ = run(capsys, '--config', str(configPath), 'derive')
        assert code == 2

    def test_unknown_log_level(self, tmp_path, capsys):
        configPath = tmp_path / 'verbose.json'
        configPath.write_bytes(b'{"logging": {"level": "verbose", "console": false}}')
        code, out = run(capsys, '--config', str(configPath), 'derive')
        assert code == 2
        assert out is None
