# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""pacbridge - pacman, an AUR helper and a source-build fallback behind one CLI"""

__version__ = "1.0.0"
