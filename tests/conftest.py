# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Test utilities and fixtures for GenReport testing.

This module provides builders for generation report XML and reference data
so tests can describe their inputs compactly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple

import pytest

from genreport.core.primitives import FactorTierEnum, GeneratorKindEnum
from genreport.reference import ReferenceFactors
from genreport.report import DayRecord, GenerationReport, GeneratorRecord

DayTuple = Tuple[Optional[str], Optional[float], Optional[float]]


# Model Utilities
def make_days(*days: DayTuple) -> list:
    """Create DayRecords from (date, energy, price) tuples."""
    return [DayRecord(date=date, energy=energy, price=price) for date, energy, price in days]


def make_record(
    kind: GeneratorKindEnum,
    name: Optional[str],
    days: Sequence[DayTuple] = (),
    **fields,
) -> GeneratorRecord:
    """
    Create a GeneratorRecord for testing.

    Example:
        >>> record = make_record(GeneratorKindEnum.GAS, "Gas", [("d1", 10.0, 2.0)], emissions_rating=0.5)
        >>> record.type_label
        'gas'
    """
    return GeneratorRecord(kind=kind, name=name, days=make_days(*days), **fields)


def make_report(*records: GeneratorRecord) -> GenerationReport:
    """Create a GenerationReport, sorting records into their kind lists."""
    by_kind: Dict[GeneratorKindEnum, list] = {kind: [] for kind in GeneratorKindEnum}
    for record in records:
        by_kind[record.kind].append(record)
    return GenerationReport(
        wind=by_kind[GeneratorKindEnum.WIND],
        gas=by_kind[GeneratorKindEnum.GAS],
        coal=by_kind[GeneratorKindEnum.COAL],
    )


# XML Utilities
def day_xml(date: Optional[str], energy: Optional[float], price: Optional[float] = None) -> str:
    parts = []
    if date is not None:
        parts.append(f"<Date>{date}</Date>")
    if energy is not None:
        parts.append(f"<Energy>{energy}</Energy>")
    if price is not None:
        parts.append(f"<Price>{price}</Price>")
    return f"<Day>{''.join(parts)}</Day>"


def generator_xml(
    tag: str,
    name: Optional[str],
    days: Iterable[DayTuple] = (),
    **fields: float,
) -> str:
    """Render one <WindGenerator>/<GasGenerator>/<CoalGenerator> element."""
    body = f"<Name>{name}</Name>" if name is not None else ""
    body += "<Generation>" + "".join(day_xml(*day) for day in days) + "</Generation>"
    body += "".join(f"<{key}>{value}</{key}>" for key, value in fields.items())
    return f"<{tag}>{body}</{tag}>"


def report_xml(*generators: str) -> bytes:
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f"<GenerationReport>{''.join(generators)}</GenerationReport>"
    ).encode("utf-8")


def reference_xml(
    value: Dict[str, float], emissions: Dict[str, float]
) -> bytes:
    def block(tag: str, tiers: Dict[str, float]) -> str:
        return f"<{tag}>" + "".join(f"<{k}>{v}</{k}>" for k, v in tiers.items()) + f"</{tag}>"

    return (
        "<ReferenceData><Factors>"
        + block("ValueFactor", value)
        + block("EmissionsFactor", emissions)
        + "</Factors></ReferenceData>"
    ).encode("utf-8")


# Fixtures
@pytest.fixture
def reference() -> ReferenceFactors:
    return ReferenceFactors(
        value_factors={
            FactorTierEnum.LOW: 0.5,
            FactorTierEnum.MEDIUM: 0.7,
            FactorTierEnum.HIGH: 0.9,
        },
        emission_factors={
            FactorTierEnum.LOW: 0.3,
            FactorTierEnum.MEDIUM: 0.6,
            FactorTierEnum.HIGH: 0.8,
        },
    )


@pytest.fixture
def reference_file(tmp_path: Path) -> Path:
    path = tmp_path / "ReferenceData.xml"
    path.write_bytes(
        reference_xml(
            value={"High": 0.9, "Medium": 0.7, "Low": 0.5},
            emissions={"High": 0.8, "Medium": 0.6, "Low": 0.3},
        )
    )
    return path
