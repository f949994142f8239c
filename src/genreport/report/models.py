# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Generation report input and output models.

Input models mirror the generator records of a raw report; output models hold
the three independent derived sections of a summary report.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from ..core.primitives import GeneratorKindEnum, Model, ReportSection


class DayRecord(Model):
    """One day of a generator's output series."""

    date: Optional[str] = None
    energy: Optional[float] = None
    price: Optional[float] = None

    @property
    def has_value_inputs(self) -> bool:
        """Whether the day contributes to value totals (needs energy and price)."""
        return self.energy is not None and self.price is not None


class GeneratorRecord(Model):
    """
    A single generator entry of a generation report.

    Attributes:
        kind: Record kind taken from the element tag (wind/gas/coal)
        name: Display label; for wind records also the type label
            ("Offshore"/"Onshore") used for factor lookup
        emissions_rating: Present on gas and coal records only
        total_heat_input: Present on coal records only
        actual_net_generation: Present on coal records only
        days: Daily output series in document order
    """

    kind: GeneratorKindEnum
    name: Optional[str] = None
    emissions_rating: Optional[float] = None
    total_heat_input: Optional[float] = None
    actual_net_generation: Optional[float] = None
    days: List[DayRecord] = Field(default_factory=list)

    @property
    def type_label(self) -> Optional[str]:
        """
        Label fed to the factor resolver.

        Gas and coal records resolve by kind. Wind records resolve by their
        name, which carries the Offshore/Onshore category.
        """
        if self.kind == GeneratorKindEnum.WIND:
            return self.name
        return self.kind.value


class GenerationReport(Model):
    """Parsed generation report; records are grouped wind, gas, then coal."""

    wind: List[GeneratorRecord] = Field(default_factory=list)
    gas: List[GeneratorRecord] = Field(default_factory=list)
    coal: List[GeneratorRecord] = Field(default_factory=list)

    @property
    def all_records(self) -> List[GeneratorRecord]:
        return [*self.wind, *self.gas, *self.coal]

    @property
    def emitting_records(self) -> List[GeneratorRecord]:
        return [*self.gas, *self.coal]


class GeneratorTotal(Model):
    """Totals entry: summed monetary value for one generator name."""

    name: str
    total: float


class MaxEmissionDay(Model):
    """MaxEmissionGenerators entry: the highest-emission day of one record."""

    name: Optional[str] = None
    date: Optional[str] = None
    emission: float


class ActualHeatRate(Model):
    """ActualHeatRates entry: heat input over net generation for a coal record."""

    name: Optional[str] = None
    heat_rate: float


class SectionIssue(Model):
    """A record- or section-level failure that was left out of the output."""

    section: ReportSection
    record_name: Optional[str] = None
    error_type: str
    message: str


class GenerationOutput(Model):
    """
    Derived summary of one generation report.

    The three sections are independent; ``issues`` lists the failures that
    were skipped so the remaining output could still be written. Issues are
    diagnostics only and are not serialized.
    """

    totals: List[GeneratorTotal] = Field(default_factory=list)
    max_emission_generators: List[MaxEmissionDay] = Field(default_factory=list)
    actual_heat_rates: List[ActualHeatRate] = Field(default_factory=list)
    issues: List[SectionIssue] = Field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.issues)
