# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
File-level processing API.

Public entry points combining parsing, aggregation and writing for a single
generation report. Retrying on read contention is the ingress guard's job
(`genreport.ingress`); these functions make exactly one attempt.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from ..core.primitives import CalculationSettings
from ..reference import ReferenceFactors
from ..report import GenerationOutput, read_generation_report, write_generation_output
from ..report.writer import DEFAULT_OUTPUT_SUFFIX
from .aggregation import aggregate

logger = logging.getLogger(__name__)


def process_file(
    path: Union[str, Path],
    reference: ReferenceFactors,
    settings: Optional[CalculationSettings] = None,
) -> GenerationOutput:
    """
    Read one generation report and compute its summary.

    Args:
        path: Input report path; the whole file is read on every call.
        reference: Reference factor table loaded at start.
        settings: Calculation settings.

    Returns:
        The GenerationOutput for the report.

    Raises:
        TransientAccessError: The file could not be read (yet).
        MalformedInputError: The file is not a valid generation report.
        ComputationError: A record failed and ``fail_on_error`` is set.
    """
    report = read_generation_report(path)
    output = aggregate(report, reference, settings)
    for issue in output.issues:
        logger.warning(
            f"{Path(path).name}: {issue.section.value} entry "
            f"{issue.record_name!r} omitted ({issue.error_type}: {issue.message})"
        )
    return output


def process_and_write(
    path: Union[str, Path],
    reference: ReferenceFactors,
    output_folder: Union[str, Path],
    settings: Optional[CalculationSettings] = None,
    suffix: str = DEFAULT_OUTPUT_SUFFIX,
) -> Path:
    """
    Process one report and write its summary to output_folder.

    Returns:
        Path of the written output document.

    Raises:
        FatalIOError: The output could not be written; plus everything
            ``process_file`` raises.
    """
    output = process_file(path, reference, settings)
    return write_generation_output(output, path, output_folder, suffix)
