# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
GenReport Analysis Engine

Aggregation of generation reports into value totals, peak-emission days and
actual heat rates, plus the single-attempt file processing API.
"""

from .aggregation import (
    SectionResult,
    aggregate,
    compute_heat_rates,
    compute_max_emissions,
    compute_totals,
    group_records,
)
from .api import process_and_write, process_file

__all__ = [
    # Main API functions
    "aggregate",
    "process_file",
    "process_and_write",

    # Sections
    "SectionResult",
    "compute_totals",
    "compute_max_emissions",
    "compute_heat_rates",
    "group_records",
]
