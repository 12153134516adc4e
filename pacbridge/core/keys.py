# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Signing key import.

Every key a recipe lists in validpgpkeys is attempted before the build,
first against gpg's default keyserver, then against each fallback
keyserver in order until one succeeds. Import is advisory: a key that
cannot be fetched is reported and the build still runs. If the build then
fails on signature verification the orchestrator's single retry calls
import_keys(refresh=True), which fetches every key again even when the
keyring already holds it.
"""

import logging
from typing import List, Optional, Sequence

import click

from pacbridge.core.adapters.gpg import KeyManager
from pacbridge.core.exceptions import KeyImportError
from pacbridge.core.models import KeyImportResult

logger = logging.getLogger("pacbridge.keys")


class KeyResolver:
    def __init__(self, keys: KeyManager, fallback_keyservers: Sequence[str] = ()):
        self.keys = keys
        self.fallback_keyservers = list(fallback_keyservers)

    def import_key(self, key_id: str, refresh: bool = False) -> KeyImportResult:
        """
        Make key_id available in the local keyring.

        A key that is already present is not fetched again unless refresh is
        set, so importing the same id twice ends in the same state without an
        error. Refreshing re-receives it, which picks up new subkeys and
        expiry dates; ``gpg --recv-keys`` leaves an unchanged key alone.
        """
        present = self.keys.has_key(key_id)
        if present and not refresh:
            click.echo(f"[+] Key {key_id} already in keyring")
            return KeyImportResult(key_id, imported=True, already_present=True)

        # None is gpg's default keyserver
        servers: List[Optional[str]] = [None, *self.fallback_keyservers]
        attempts: List[str] = []
        for server in servers:
            label = server or "default keyserver"
            attempts.append(label)
            click.echo(f"[*] Importing key {key_id} from {label}")
            result = self.keys.recv_key(key_id, server)
            if result.success:
                click.echo(f"[+] Imported key {key_id} from {label}")
                return KeyImportResult(
                    key_id,
                    imported=True,
                    keyserver=server,
                    already_present=present,
                    attempts=attempts,
                )
            logger.info(f"Key {key_id} not received from {label}: {result.output.strip()}")

        if present:
            message = f"Could not refresh key {key_id}, keeping the local copy"
            logger.warning(message)
            click.secho(f"[!] {message}", fg="yellow")
            return KeyImportResult(
                key_id, imported=True, already_present=True, attempts=attempts
            )

        error = KeyImportError(
            f"Could not import key {key_id} from any keyserver",
            key_id=key_id,
            keyservers=attempts,
        )
        logger.warning(str(error))
        click.secho(f"[!] {error.message}; the build may fail signature checks", fg="yellow")
        return KeyImportResult(key_id, imported=False, attempts=attempts)

    def import_keys(
        self, key_ids: Sequence[str], refresh: bool = False
    ) -> List[KeyImportResult]:
        """Attempt every key in order; never raises for a failed key"""
        if not key_ids:
            logger.debug("Recipe lists no signing keys")
            return []
        return [self.import_key(key_id, refresh=refresh) for key_id in key_ids]
