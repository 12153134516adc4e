# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Disposable build workspaces.

A workspace is a private temporary directory that exists for exactly one
operation. It is entered as a context manager and removed on every exit,
including exceptions and early returns. Nothing here changes the process
working directory: callers pass ``workspace.path`` (or a child of it) as an
explicit ``cwd`` to every command they run.
"""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional

logger = logging.getLogger("pacbridge.workspace")


class Workspace:
    """A scoped temporary directory"""

    def __init__(self, prefix: str = "pacbridge-", parent: Optional[Path] = None):
        self.prefix = prefix
        self.parent = parent
        self._path: Optional[Path] = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("Workspace has not been created")
        return self._path

    def create(self) -> Path:
        """Create the directory (idempotent)"""
        if self._path is None:
            if self.parent is not None:
                self.parent.mkdir(parents=True, exist_ok=True)
            self._path = Path(
                tempfile.mkdtemp(
                    prefix=self.prefix,
                    dir=str(self.parent) if self.parent is not None else None,
                )
            )
            logger.debug(f"Created workspace {self._path}")
        return self._path

    def remove(self) -> None:
        """Delete the directory and everything in it (idempotent)"""
        if self._path is not None and self._path.exists():
            shutil.rmtree(self._path, ignore_errors=True)
            logger.debug(f"Removed workspace {self._path}")

    def __enter__(self) -> "Workspace":
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.remove()


def remove_tree(path: Path) -> None:
    """Remove a workspace directory given only its path"""
    if path.exists():
        shutil.rmtree(path, ignore_errors=True)
        logger.debug(f"Removed workspace {path}")
