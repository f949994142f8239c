# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for generation report processing.

Exception Hierarchy:
    GenReportError (base)
    ├── TransientAccessError   input file locked or still being written (retried)
    ├── MalformedInputError    unparsable document or missing required values
    ├── ComputationError       invalid numeric result for one record
    ├── FatalIOError           output cannot be written
    └── ConfigurationError     unusable settings or reference data path
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class GenReportError(Exception):
    """Base exception for all generation report errors.

    Attributes:
        message: Human-readable error message
        context: Dictionary with error-specific details (paths, record names)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = dict(context or {})

    def __str__(self) -> str:
        return self.message


class TransientAccessError(GenReportError):
    """The input file could not be read yet; another attempt may succeed."""


class MalformedInputError(GenReportError):
    """The input document or reference data cannot be interpreted."""


class ComputationError(GenReportError):
    """A derived value for a single record cannot be computed.

    Attributes:
        section: Output section the record belongs to
        record_name: Name of the generator record that failed
    """

    def __init__(
        self,
        message: str,
        section: Optional[str] = None,
        record_name: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        merged = {"section": section, "record_name": record_name, **(context or {})}
        super().__init__(message, context=merged)
        self.section = section
        self.record_name = record_name


class FatalIOError(GenReportError):
    """The output document could not be written."""


class ConfigurationError(GenReportError):
    """Settings or their referenced files are unusable."""
