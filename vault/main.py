"""
Vault command line.

Commands:
    derive       Print the caller's slot address and selector
    show         Print the caller's record (or that the slot is absent)
    initialize   Create the caller's record (--name, --message)
    update       Replace the caller's message (--message)

Usage:
    python -m vault.main [--config config.json] [--keypair id.json] show
    python -m vault.main initialize --name "John Doe" --message "Hello Solana!"

Output is canonical JSON on stdout. Exit code is 0 on success, 1 on a failed
transition or unreadable slot, 2 on bad configuration/credentials.
"""

import argparse
import sys
from typing import List, Optional

from vault.core.errors import RecordError
from vault.host.credentials import CredentialError, KeypairAuthorizer, KeypairFileProvider
from vault.host.program import Program
from vault.host.storage import StorageError, createStorage
from vaultkit.canonical_json import canonicalJson
from vaultkit.config_loader import loadConfig
from vaultkit.logging import configureLogging, getLogger, setProgramContext


def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='vault', description='User-data records at derived addresses')
    parser.add_argument('--config', default=None, help='Path to config.json (defaults when omitted)')
    parser.add_argument('--keypair', default=None, help='Keypair file (overrides config keypairPath)')

    commands = parser.add_subparsers(dest='command', required=True)
    commands.add_parser('derive', help="Print the caller's slot address")
    commands.add_parser('show', help="Print the caller's record")

    initParser = commands.add_parser('initialize', help="Create the caller's record")
    initParser.add_argument('--name', required=True)
    initParser.add_argument('--message', required=True)

    updateParser = commands.add_parser('update', help="Replace the caller's message")
    updateParser.add_argument('--message', required=True)

    return parser


def _emit(payload: dict):
    sys.stdout.write(canonicalJson(payload) + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    args = buildParser().parse_args(argv)

    config, fromDefaults = loadConfig(args.config)
    logConfig = config.get('logging', {})
    configureLogging(logDir=logConfig.get('logDir'), level=logConfig.get('level', 'INFO'),
                     console=logConfig.get('console', True), utc=logConfig.get('utc', False))
    log = getLogger()

    if args.config and fromDefaults:
        # Load again with the logger attached so the reason is recorded
        loadConfig(args.config, log=log)
        return 2

    setProgramContext(config['programId'], config.get('cluster'))

    try:
        keypair = KeypairFileProvider(args.keypair or config['keypairPath']).get()
    except CredentialError as exc:
        log.error("Cannot load keypair", errorMsg=str(exc))
        return 2

    storage = createStorage(config['storage'])
    try:
        program = Program(storage, KeypairAuthorizer([keypair]), config)
        owner = keypair.identity

        if args.command == 'derive':
            address, selector = program.deriveAddress(owner)
            _emit({"owner": owner.hex(), "address": address.hex(), "selector": selector})
            return 0

        if args.command == 'show':
            address, _ = program.deriveAddress(owner)
            try:
                record = program.fetchRecord(owner)
            except RecordError as exc:
                _emit({"address": address.hex(), **exc.toDict()})
                return 1
            except StorageError as exc:
                log.error("Cannot read slot", address=address.hex(), errorMsg=str(exc))
                _emit({"address": address.hex(), "errorMsg": str(exc)})
                return 1
            _emit({"address": address.hex(), "record": record.toDict() if record else None})
            return 0

        if args.command == 'initialize':
            result = program.initialize(owner, args.name, args.message)
        else:
            result = program.updateMessage(owner, args.message)

        _emit(result.toDict())
        return 0 if result.ok else 1
    finally:
        storage.close()


if __name__ == '__main__':
    sys.exit(main())
