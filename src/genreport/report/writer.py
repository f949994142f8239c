# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Generation output XML serialization.

Serialization is deterministic: identical GenerationOutput values always
produce byte-identical documents.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Optional, Union

from lxml import etree

from ..exceptions import FatalIOError
from .models import GenerationOutput

logger = logging.getLogger(__name__)

OUTPUT_EXTENSION = ".xml"
DEFAULT_OUTPUT_SUFFIX = "-Result"


def format_number(value: float) -> str:
    """Shortest round-trip text for a float; integral values drop the fraction."""
    if not math.isfinite(value):
        raise ValueError(f"Cannot write non-finite value {value} to a generation output")
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _child(parent, tag: str, text: Optional[str] = None):
    element = etree.SubElement(parent, tag)
    if text is not None:
        element.text = text
    return element


def build_output_tree(output: GenerationOutput) -> etree._Element:
    root = etree.Element("GenerationOutput")

    totals = _child(root, "Totals")
    for entry in output.totals:
        generator = _child(totals, "Generator")
        _child(generator, "Name", entry.name)
        _child(generator, "Total", format_number(entry.total))

    max_emissions = _child(root, "MaxEmissionGenerators")
    for entry in output.max_emission_generators:
        day = _child(max_emissions, "Day")
        _child(day, "Name", entry.name)
        _child(day, "Date", entry.date)
        _child(day, "Emission", format_number(entry.emission))

    heat_rates = _child(root, "ActualHeatRates")
    for entry in output.actual_heat_rates:
        heat_rate = _child(heat_rates, "ActualHeatRate")
        _child(heat_rate, "Name", entry.name)
        _child(heat_rate, "HeatRate", format_number(entry.heat_rate))

    return root


def serialize_generation_output(output: GenerationOutput) -> bytes:
    return etree.tostring(
        build_output_tree(output),
        xml_declaration=True,
        encoding="utf-8",
        pretty_print=True,
    )


def output_path_for(
    input_path: Union[str, Path],
    output_folder: Union[str, Path],
    suffix: str = DEFAULT_OUTPUT_SUFFIX,
) -> Path:
    """Output file for an input file: ``<output_folder>/<stem><suffix>.xml``."""
    return Path(output_folder) / f"{Path(input_path).stem}{suffix}{OUTPUT_EXTENSION}"


def write_generation_output(
    output: GenerationOutput,
    input_path: Union[str, Path],
    output_folder: Union[str, Path],
    suffix: str = DEFAULT_OUTPUT_SUFFIX,
) -> Path:
    """
    Serialize and write a summary report next to its siblings in output_folder.

    The output folder is created when missing.

    Raises:
        FatalIOError: If the folder or file cannot be written
    """
    target = output_path_for(input_path, output_folder, suffix)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(serialize_generation_output(output))
    except OSError as e:
        raise FatalIOError(
            f"Cannot write output {target}: {e}", context={"path": str(target)}
        ) from e
    logger.info(f"Processing complete. Result saved to: {target}")
    return target
