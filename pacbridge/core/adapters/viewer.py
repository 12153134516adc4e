# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Web page viewers.

Opening a repository page is a diagnostic convenience: it never blocks and
never fails the operation that asked for it.
"""

import logging
from typing import List

import click

logger = logging.getLogger("pacbridge.adapters.viewer")


class Viewer:
    """Interface: open(url) returns whether a viewer was launched"""

    def open(self, url: str) -> bool:
        raise NotImplementedError


class BrowserViewer(Viewer):
    """Opens URLs with the desktop's default handler"""

    def open(self, url: str) -> bool:
        try:
            click.launch(url, wait=False)
        except OSError as e:
            logger.debug(f"Could not open {url}: {e}")
            return False
        logger.debug(f"Opened {url}")
        return True


class NullViewer(Viewer):
    """Remembers URLs instead of opening them"""

    def __init__(self):
        self.opened: List[str] = []

    def open(self, url: str) -> bool:
        self.opened.append(url)
        logger.debug(f"Viewer disabled, not opening {url}")
        return False
