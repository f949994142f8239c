# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
File arrival handling: retry guard and directory watcher.
"""

from .guard import FileProcessor, IngressGuard, IngressResult
from .watcher import ReportFileHandler, ReportWatcher, collect

__all__ = [
    "FileProcessor",
    "IngressGuard",
    "IngressResult",
    "ReportFileHandler",
    "ReportWatcher",
    "collect",
]
