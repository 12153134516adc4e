# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""gpg adapter: check the local keyring and receive keys from keyservers."""

import logging
from typing import Optional

from pacbridge.core.adapters.process import CommandResult, CommandRunner

logger = logging.getLogger("pacbridge.adapters.gpg")


class KeyManager:
    def __init__(self, runner: CommandRunner, executable: str = "gpg"):
        self.runner = runner
        self.executable = executable

    def has_key(self, key_id: str) -> bool:
        result = self.runner.run([self.executable, "--list-keys", key_id])
        return result.success

    def recv_key(self, key_id: str, keyserver: Optional[str] = None) -> CommandResult:
        """Receive key_id; keyserver None means gpg's configured default"""
        args = [self.executable]
        if keyserver:
            args += ["--keyserver", keyserver]
        args += ["--recv-keys", key_id]
        return self.runner.run(args)
