# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Aggregation engine for generation reports.

Turns a parsed GenerationReport into a GenerationOutput with three
independent sections:

- Totals: energy × price × value factor, summed per generator name
- MaxEmissionGenerators: the highest-emission day of each rated gas/coal record
- ActualHeatRates: total heat input / actual net generation per coal record

Each section is computed from the same read-only inputs and none depends on
another's result. Record-level failures are isolated: unless
``CalculationSettings.fail_on_error`` is set, a failing record (or section) is
logged, listed in ``GenerationOutput.issues`` and left out while everything
else is still produced.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from ..core.primitives import (
    CalculationSettings,
    ReportSection,
    TotalsGrouping,
    UnmappedFactorPolicy,
)
from ..exceptions import ComputationError, GenReportError, MalformedInputError
from ..reference import ReferenceFactors, resolve_factor, resolve_tier
from ..reference.factors import FactorTable
from ..report.models import (
    ActualHeatRate,
    GenerationOutput,
    GenerationReport,
    GeneratorRecord,
    GeneratorTotal,
    MaxEmissionDay,
    SectionIssue,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
E = TypeVar("E")


@dataclass
class SectionResult:
    """Entries computed for one output section plus the failures skipped."""

    entries: List = field(default_factory=list)
    issues: List[SectionIssue] = field(default_factory=list)


def _lookup_factor(
    label: Optional[str],
    table: FactorTable,
    settings: CalculationSettings,
    section: ReportSection,
    record_name: Optional[str],
) -> float:
    """Resolve a factor, applying the unmapped-generator-type policy."""
    if resolve_tier(label) is None:
        if settings.unmapped_factor_policy == UnmappedFactorPolicy.ERROR:
            raise MalformedInputError(
                f"Unmapped generator type {label!r} for {record_name!r}",
                context={"section": section.value, "record_name": record_name},
            )
        logger.warning(
            f"{section.value}: generator type {label!r} of {record_name!r} has no "
            f"factor tier; using 0.0"
        )
    return resolve_factor(label, table)


def _finite(
    value: float, quantity: str, section: ReportSection, record_name: Optional[str]
) -> float:
    """Reject results that overflowed to infinity or came out NaN."""
    value = float(value)
    if not math.isfinite(value):
        raise ComputationError(
            f"{quantity} of {record_name!r} is not finite ({value})",
            section=section.value,
            record_name=record_name,
        )
    return value


def _collect(
    section: ReportSection,
    items: Sequence[T],
    compute_one: Callable[[T], E],
    name_of: Callable[[T], Optional[str]],
    settings: CalculationSettings,
) -> SectionResult:
    """Apply compute_one to each item, isolating per-record failures."""
    result = SectionResult()
    for item in items:
        try:
            result.entries.append(compute_one(item))
        except (ComputationError, MalformedInputError) as e:
            if settings.fail_on_error:
                raise
            record_name = name_of(item)
            logger.warning(f"{section.value}: skipping {record_name!r}: {e}")
            result.issues.append(
                SectionIssue(
                    section=section,
                    record_name=record_name,
                    error_type=type(e).__name__,
                    message=str(e),
                )
            )
    return result


# --------------------------------------------------------------------------
# Totals
# --------------------------------------------------------------------------


def group_records(
    records: Sequence[GeneratorRecord],
    grouping: TotalsGrouping = TotalsGrouping.NAME,
) -> Dict[Hashable, List[GeneratorRecord]]:
    """
    Group records for value totals in first-seen order.

    Records without a name are dropped. Under legacy NAME grouping a warning
    is logged when one name spans several generator kinds, since the factor
    of the whole group then comes from whichever kind was seen first.
    """
    groups: Dict[Hashable, List[GeneratorRecord]] = {}
    for record in records:
        if not record.name:
            continue
        key = record.name if grouping == TotalsGrouping.NAME else (record.name, record.kind)
        groups.setdefault(key, []).append(record)

    if grouping == TotalsGrouping.NAME:
        for name, members in groups.items():
            kinds = {member.kind for member in members}
            if len(kinds) > 1:
                logger.warning(
                    f"Totals: generator name {name!r} is shared by kinds "
                    f"{sorted(kind.value for kind in kinds)}; applying the "
                    f"{members[0].kind.value} factor to the whole group"
                )
    return groups


def compute_totals(
    report: GenerationReport,
    reference: ReferenceFactors,
    settings: Optional[CalculationSettings] = None,
) -> SectionResult:
    """
    Sum energy × price × value factor per generator group.

    Days missing energy or price are excluded. Groups keep first-seen order
    across wind, then gas, then coal records; a group without valid days
    totals 0.0.
    """
    settings = settings or CalculationSettings()
    groups = list(group_records(report.all_records, settings.totals_grouping).values())

    def group_factor(members: List[GeneratorRecord]) -> Tuple[List[GeneratorRecord], float]:
        first = members[0]
        factor = _lookup_factor(
            first.type_label,
            reference.value_factors,
            settings,
            ReportSection.TOTALS,
            first.name,
        )
        return members, factor

    resolved = _collect(
        ReportSection.TOTALS, groups, group_factor, lambda members: members[0].name, settings
    )
    if not resolved.entries:
        return SectionResult(entries=[], issues=resolved.issues)

    day_rows = pd.DataFrame(
        [
            (index, day.energy, day.price, factor)
            for index, (members, factor) in enumerate(resolved.entries)
            for record in members
            for day in record.days
            if day.has_value_inputs
        ],
        columns=["group", "energy", "price", "factor"],
    )
    values = day_rows["energy"] * day_rows["price"] * day_rows["factor"]
    sums = values.groupby(day_rows["group"], sort=False).sum()

    def group_total(indexed: Tuple[int, Tuple[List[GeneratorRecord], float]]) -> GeneratorTotal:
        index, (members, _) = indexed
        name = members[0].name
        total = _finite(sums.get(index, 0.0), "Total", ReportSection.TOTALS, name)
        return GeneratorTotal(name=name, total=total)

    totals = _collect(
        ReportSection.TOTALS,
        list(enumerate(resolved.entries)),
        group_total,
        lambda indexed: indexed[1][0][0].name,
        settings,
    )
    return SectionResult(entries=totals.entries, issues=resolved.issues + totals.issues)


# --------------------------------------------------------------------------
# MaxEmissionGenerators
# --------------------------------------------------------------------------


def compute_max_emissions(
    report: GenerationReport,
    reference: ReferenceFactors,
    settings: Optional[CalculationSettings] = None,
) -> SectionResult:
    """
    Select the highest-emission day of every gas/coal record with a rating.

    dailyEmission = energy × emissionsRating × emissionFactor, with the factor
    resolved from the record's own kind. Ties go to the earliest day. A record
    with no day carrying energy raises ComputationError.
    """
    settings = settings or CalculationSettings()
    section = ReportSection.MAX_EMISSION_GENERATORS
    rated = [record for record in report.emitting_records if record.emissions_rating is not None]

    def max_day(record: GeneratorRecord) -> MaxEmissionDay:
        factor = _lookup_factor(
            record.kind.value, reference.emission_factors, settings, section, record.name
        )
        days = [day for day in record.days if day.energy is not None]
        if len(days) < len(record.days):
            logger.debug(
                f"{section.value}: {len(record.days) - len(days)} day(s) of "
                f"{record.name!r} have no energy and are ignored"
            )
        if not days:
            raise ComputationError(
                f"Generator {record.name!r} has no days to select a maximum emission from",
                section=section.value,
                record_name=record.name,
            )

        emissions = np.array([day.energy for day in days]) * record.emissions_rating * factor
        # argmax returns the first occurrence of the maximum
        best = int(np.argmax(emissions))
        emission = _finite(emissions[best], "Daily emission", section, record.name)
        return MaxEmissionDay(name=record.name, date=days[best].date, emission=emission)

    return _collect(section, rated, max_day, lambda record: record.name, settings)


# --------------------------------------------------------------------------
# ActualHeatRates
# --------------------------------------------------------------------------


def compute_heat_rates(
    report: GenerationReport,
    settings: Optional[CalculationSettings] = None,
) -> SectionResult:
    """
    Heat rate (total heat input / actual net generation) per coal record.

    Only coal records carrying both values qualify. Zero net generation, or
    a ratio that overflows, raises ComputationError instead of producing an
    infinite rate.
    """
    settings = settings or CalculationSettings()
    section = ReportSection.ACTUAL_HEAT_RATES
    qualifying = [
        record
        for record in report.coal
        if record.total_heat_input is not None and record.actual_net_generation is not None
    ]

    def heat_rate(record: GeneratorRecord) -> ActualHeatRate:
        if record.actual_net_generation == 0:
            raise ComputationError(
                f"Generator {record.name!r} has zero actual net generation; "
                f"heat rate is undefined",
                section=section.value,
                record_name=record.name,
            )
        rate = _finite(
            record.total_heat_input / record.actual_net_generation,
            "Heat rate",
            section,
            record.name,
        )
        return ActualHeatRate(name=record.name, heat_rate=rate)

    return _collect(section, qualifying, heat_rate, lambda record: record.name, settings)


# --------------------------------------------------------------------------
# Engine entry point
# --------------------------------------------------------------------------


def aggregate(
    report: GenerationReport,
    reference: ReferenceFactors,
    settings: Optional[CalculationSettings] = None,
) -> GenerationOutput:
    """
    Compute all three output sections for a generation report.

    Pure and deterministic: no I/O, and the same report and reference factors
    always yield an equal GenerationOutput.

    Args:
        report: Parsed generation report.
        reference: Reference factor table, shared read-only.
        settings: Calculation settings; defaults reproduce the legacy tool.

    Returns:
        GenerationOutput with every section that could be computed and the
        issues that were skipped.

    Raises:
        ComputationError, MalformedInputError: Only when
            ``settings.fail_on_error`` is True.
    """
    settings = settings or CalculationSettings()
    runners: List[Tuple[ReportSection, Callable[[], SectionResult]]] = [
        (ReportSection.TOTALS, lambda: compute_totals(report, reference, settings)),
        (
            ReportSection.MAX_EMISSION_GENERATORS,
            lambda: compute_max_emissions(report, reference, settings),
        ),
        (ReportSection.ACTUAL_HEAT_RATES, lambda: compute_heat_rates(report, settings)),
    ]

    results: Dict[ReportSection, SectionResult] = {}
    for section, run in runners:
        try:
            results[section] = run()
        except GenReportError as e:
            if settings.fail_on_error:
                raise
            logger.error(f"{section.value}: section failed and is left empty: {e}")
            results[section] = SectionResult(
                issues=[
                    SectionIssue(
                        section=section, error_type=type(e).__name__, message=str(e)
                    )
                ]
            )

    output = GenerationOutput(
        totals=results[ReportSection.TOTALS].entries,
        max_emission_generators=results[ReportSection.MAX_EMISSION_GENERATORS].entries,
        actual_heat_rates=results[ReportSection.ACTUAL_HEAT_RATES].entries,
        issues=[issue for result in results.values() for issue in result.issues],
    )
    logger.debug(
        f"Aggregated {len(output.totals)} totals, "
        f"{len(output.max_emission_generators)} max emission days, "
        f"{len(output.actual_heat_rates)} heat rates ({len(output.issues)} issues)"
    )
    return output
