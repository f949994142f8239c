# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Generation report documents: models, XML parsing and XML writing.
"""

from .models import (
    ActualHeatRate,
    DayRecord,
    GenerationOutput,
    GenerationReport,
    GeneratorRecord,
    GeneratorTotal,
    MaxEmissionDay,
    SectionIssue,
)
from .parser import parse_generation_report, read_generation_report
from .writer import (
    format_number,
    output_path_for,
    serialize_generation_output,
    write_generation_output,
)

__all__ = [
    # Input
    "DayRecord",
    "GenerationReport",
    "GeneratorRecord",
    "parse_generation_report",
    "read_generation_report",
    # Output
    "ActualHeatRate",
    "GenerationOutput",
    "GeneratorTotal",
    "MaxEmissionDay",
    "SectionIssue",
    "format_number",
    "output_path_for",
    "serialize_generation_output",
    "write_generation_output",
]
