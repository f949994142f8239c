# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Unit Tests for the Aggregation Engine

Covers value totals, max-emission day selection, actual heat rates, and the
isolation of record- and section-level failures.
"""

from __future__ import annotations

import pytest

from genreport.analysis import (
    aggregate,
    compute_heat_rates,
    compute_max_emissions,
    compute_totals,
    group_records,
)
from genreport.core.primitives import (
    CalculationSettings,
    FactorTierEnum,
    GeneratorKindEnum,
    ReportSection,
    TotalsGrouping,
    UnmappedFactorPolicy,
)
from genreport.exceptions import ComputationError, MalformedInputError
from genreport.reference import ReferenceFactors
from genreport.report import serialize_generation_output
from tests.conftest import make_record, make_report

WIND = GeneratorKindEnum.WIND
GAS = GeneratorKindEnum.GAS
COAL = GeneratorKindEnum.COAL


class TestTotals:
    """Test suite for the Totals section."""

    def test_single_offshore_generator(self, reference: ReferenceFactors):
        """Low factor 0.5 × (10×2 + 5×3) = 17.5."""
        report = make_report(make_record(WIND, "Offshore", [("d1", 10.0, 2.0), ("d2", 5.0, 3.0)]))

        result = compute_totals(report, reference)

        assert len(result.entries) == 1
        assert result.entries[0].name == "Offshore"
        assert result.entries[0].total == pytest.approx(17.5)
        assert result.issues == []

    def test_days_missing_energy_or_price_are_excluded(self, reference: ReferenceFactors):
        report = make_report(
            make_record(
                GAS,
                "Gas",
                [("d1", 10.0, 2.0), ("d2", None, 3.0), ("d3", 4.0, None), ("d4", 1.0, 1.0)],
            )
        )

        total = compute_totals(report, reference).entries[0].total

        assert total == pytest.approx(0.7 * (20.0 + 1.0))

    def test_group_without_valid_days_totals_zero(self, reference: ReferenceFactors):
        report = make_report(make_record(COAL, "Coal", [("d1", 10.0, None)]))

        assert compute_totals(report, reference).entries[0].total == 0.0

    def test_records_with_same_name_are_summed(self, reference: ReferenceFactors):
        report = make_report(
            make_record(WIND, "Onshore", [("d1", 1.0, 10.0)]),
            make_record(WIND, "Offshore", [("d1", 2.0, 10.0)]),
            make_record(WIND, "Onshore", [("d1", 3.0, 10.0)]),
        )

        entries = compute_totals(report, reference).entries

        assert [e.name for e in entries] == ["Onshore", "Offshore"]
        assert entries[0].total == pytest.approx(0.9 * 40.0)
        assert entries[1].total == pytest.approx(0.5 * 20.0)

    def test_order_is_wind_then_gas_then_coal(self, reference: ReferenceFactors):
        report = make_report(
            make_record(COAL, "Coal", [("d1", 1.0, 1.0)]),
            make_record(GAS, "Gas", [("d1", 1.0, 1.0)]),
            make_record(WIND, "Offshore", [("d1", 1.0, 1.0)]),
        )

        names = [e.name for e in compute_totals(report, reference).entries]

        assert names == ["Offshore", "Gas", "Coal"]

    def test_records_without_name_are_dropped(self, reference: ReferenceFactors):
        report = make_report(
            make_record(GAS, None, [("d1", 1.0, 1.0)]),
            make_record(GAS, "", [("d1", 1.0, 1.0)]),
            make_record(GAS, "Gas", [("d1", 1.0, 1.0)]),
        )

        assert [e.name for e in compute_totals(report, reference).entries] == ["Gas"]

    def test_total_equals_factor_times_sum(self, reference: ReferenceFactors):
        days = [(f"d{i}", float(i), 1.5 * i) for i in range(1, 8)]
        report = make_report(make_record(COAL, "Coal", days))

        total = compute_totals(report, reference).entries[0].total

        assert total == pytest.approx(0.7 * sum(e * p for _, e, p in days))

    def test_unmapped_type_contributes_zero_by_default(self, reference: ReferenceFactors, caplog):
        report = make_report(make_record(WIND, "Solar", [("d1", 10.0, 2.0)]))

        result = compute_totals(report, reference)

        assert result.entries[0].total == 0.0
        assert "no factor tier" in caplog.text

    def test_unmapped_type_is_reported_under_error_policy(self, reference: ReferenceFactors):
        settings = CalculationSettings(unmapped_factor_policy=UnmappedFactorPolicy.ERROR)
        report = make_report(
            make_record(WIND, "Solar", [("d1", 10.0, 2.0)]),
            make_record(WIND, "Offshore", [("d1", 10.0, 2.0)]),
        )

        result = compute_totals(report, reference, settings)

        assert [e.name for e in result.entries] == ["Offshore"]
        assert len(result.issues) == 1
        assert result.issues[0].record_name == "Solar"
        assert result.issues[0].error_type == "MalformedInputError"

    def test_overflowing_total_is_a_computation_issue(self, reference: ReferenceFactors):
        report = make_report(
            make_record(WIND, "Huge", [("d1", 1e308, 10.0)]),
            make_record(WIND, "Offshore", [("d1", 10.0, 2.0)]),
        )

        result = compute_totals(report, reference)

        assert [e.name for e in result.entries] == ["Offshore"]
        assert result.issues[0].record_name == "Huge"
        assert result.issues[0].error_type == "ComputationError"

    def test_missing_tier_entry_yields_zero(self):
        reference = ReferenceFactors(value_factors={FactorTierEnum.LOW: 0.5})
        report = make_report(make_record(GAS, "Gas", [("d1", 10.0, 2.0)]))

        assert compute_totals(report, reference).entries[0].total == 0.0


class TestTotalsGrouping:
    """Test suite for generators of different kinds sharing a name."""

    @pytest.fixture
    def shared_name_report(self):
        return make_report(
            make_record(GAS, "Plant", [("d1", 10.0, 1.0)]),
            make_record(COAL, "Plant", [("d1", 20.0, 1.0)]),
        )

    def test_legacy_grouping_uses_first_kind_factor(self, shared_name_report, caplog):
        reference = ReferenceFactors(value_factors={FactorTierEnum.MEDIUM: 2.0})

        entries = compute_totals(shared_name_report, reference).entries

        assert len(entries) == 1
        assert entries[0].total == pytest.approx(2.0 * 30.0)
        assert "shared by kinds" in caplog.text

    def test_name_and_kind_grouping_splits_entries(self, shared_name_report, reference):
        settings = CalculationSettings(totals_grouping=TotalsGrouping.NAME_AND_KIND)

        entries = compute_totals(shared_name_report, reference, settings).entries

        assert [e.name for e in entries] == ["Plant", "Plant"]
        assert [e.total for e in entries] == pytest.approx([7.0, 14.0])

    def test_group_records_keys(self):
        records = [make_record(GAS, "A"), make_record(COAL, "A"), make_record(GAS, "B")]

        assert list(group_records(records)) == ["A", "B"]
        assert list(group_records(records, TotalsGrouping.NAME_AND_KIND)) == [
            ("A", GAS),
            ("A", COAL),
            ("B", GAS),
        ]


class TestMaxEmissions:
    """Test suite for the MaxEmissionGenerators section."""

    @pytest.fixture
    def unit_reference(self) -> ReferenceFactors:
        return ReferenceFactors(emission_factors={FactorTierEnum.MEDIUM: 1.0})

    def test_first_maximum_wins_ties(self, unit_reference):
        report = make_report(
            make_record(
                GAS,
                "Gas",
                [("d1", 10.0, None), ("d2", 25.0, None), ("d3", 25.0, None)],
                emissions_rating=1.0,
            )
        )

        entry = compute_max_emissions(report, unit_reference).entries[0]

        assert entry.date == "d2"
        assert entry.emission == 25.0

    def test_emission_formula(self, reference: ReferenceFactors):
        report = make_report(
            make_record(
                COAL, "Coal", [("d1", 100.0, 1.0), ("d2", 300.0, 1.0)], emissions_rating=0.5
            )
        )

        entry = compute_max_emissions(report, reference).entries[0]

        assert entry.name == "Coal"
        assert entry.date == "d2"
        assert entry.emission == pytest.approx(300.0 * 0.5 * 0.6)

    def test_only_rated_gas_and_coal_qualify(self, reference: ReferenceFactors):
        report = make_report(
            make_record(WIND, "Offshore", [("d1", 1.0, 1.0)]),
            make_record(GAS, "Unrated", [("d1", 1.0, 1.0)]),
            make_record(GAS, "Gas", [("d1", 1.0, 1.0)], emissions_rating=0.1),
            make_record(COAL, "Coal", [("d1", 1.0, 1.0)], emissions_rating=0.2),
        )

        names = [e.name for e in compute_max_emissions(report, reference).entries]

        assert names == ["Gas", "Coal"]

    def test_price_is_not_required(self, unit_reference):
        report = make_report(make_record(GAS, "Gas", [("d1", 4.0, None)], emissions_rating=2.0))

        assert compute_max_emissions(report, unit_reference).entries[0].emission == 8.0

    def test_days_without_energy_are_ignored(self, unit_reference):
        report = make_report(
            make_record(GAS, "Gas", [("d1", None, 5.0), ("d2", 3.0, None)], emissions_rating=1.0)
        )

        assert compute_max_emissions(report, unit_reference).entries[0].date == "d2"

    def test_overflowing_emission_is_a_computation_issue(self, unit_reference):
        report = make_report(
            make_record(GAS, "Huge", [("d1", 1e308, None)], emissions_rating=10.0),
        )

        result = compute_max_emissions(report, unit_reference)

        assert result.entries == []
        assert result.issues[0].record_name == "Huge"
        assert result.issues[0].section == ReportSection.MAX_EMISSION_GENERATORS

    def test_record_without_days_is_a_computation_issue(self, unit_reference):
        report = make_report(
            make_record(GAS, "Empty", [], emissions_rating=1.0),
            make_record(GAS, "Gas", [("d1", 3.0, None)], emissions_rating=1.0),
        )

        result = compute_max_emissions(report, unit_reference)

        assert [e.name for e in result.entries] == ["Gas"]
        assert result.issues[0].record_name == "Empty"
        assert result.issues[0].error_type == "ComputationError"
        assert result.issues[0].section == ReportSection.MAX_EMISSION_GENERATORS

    def test_record_without_days_raises_when_failing_on_error(self, unit_reference):
        report = make_report(make_record(COAL, "Empty", [], emissions_rating=1.0))

        with pytest.raises(ComputationError) as exc_info:
            compute_max_emissions(report, unit_reference, CalculationSettings(fail_on_error=True))

        assert exc_info.value.record_name == "Empty"


class TestHeatRates:
    """Test suite for the ActualHeatRates section."""

    def test_heat_rate(self):
        report = make_report(
            make_record(COAL, "Coal", total_heat_input=11.815, actual_net_generation=11.0)
        )

        entry = compute_heat_rates(report).entries[0]

        assert entry.name == "Coal"
        assert entry.heat_rate == pytest.approx(11.815 / 11.0)

    def test_requires_both_values(self):
        report = make_report(
            make_record(COAL, "A", total_heat_input=10.0),
            make_record(COAL, "B", actual_net_generation=10.0),
            make_record(COAL, "C", total_heat_input=10.0, actual_net_generation=4.0),
        )

        assert [e.name for e in compute_heat_rates(report).entries] == ["C"]

    def test_zero_net_generation_is_not_infinity(self):
        report = make_report(
            make_record(COAL, "Idle", total_heat_input=1000.0, actual_net_generation=0.0)
        )

        result = compute_heat_rates(report)

        assert result.entries == []
        assert result.issues[0].error_type == "ComputationError"

    def test_overflowing_heat_rate_is_a_computation_issue(self):
        report = make_report(
            make_record(COAL, "Tiny", total_heat_input=1e308, actual_net_generation=1e-10)
        )

        result = compute_heat_rates(report)

        assert result.entries == []
        assert result.issues[0].record_name == "Tiny"

        with pytest.raises(ComputationError):
            compute_heat_rates(report, CalculationSettings(fail_on_error=True))

    def test_zero_net_generation_raises_when_failing_on_error(self):
        report = make_report(
            make_record(COAL, "Idle", total_heat_input=1000.0, actual_net_generation=0.0)
        )

        with pytest.raises(ComputationError):
            compute_heat_rates(report, CalculationSettings(fail_on_error=True))


class TestAggregate:
    """Test suite for the combined engine entry point."""

    @pytest.fixture
    def report(self):
        return make_report(
            make_record(WIND, "Offshore", [("d1", 10.0, 2.0), ("d2", 5.0, 3.0)]),
            make_record(GAS, "Gas", [("d1", 10.0, 1.0), ("d2", 30.0, 1.0)], emissions_rating=0.1),
            make_record(
                COAL,
                "Coal",
                [("d1", 50.0, 1.0)],
                emissions_rating=0.5,
                total_heat_input=1000.0,
                actual_net_generation=0.0,
            ),
        )

    def test_failed_heat_rate_keeps_other_sections(self, report, reference):
        output = aggregate(report, reference)

        assert [e.name for e in output.totals] == ["Offshore", "Gas", "Coal"]
        assert [e.name for e in output.max_emission_generators] == ["Gas", "Coal"]
        assert output.actual_heat_rates == []
        assert output.is_partial
        assert output.issues[0].section == ReportSection.ACTUAL_HEAT_RATES

    def test_fail_on_error_raises(self, report, reference):
        with pytest.raises(ComputationError):
            aggregate(report, reference, CalculationSettings(fail_on_error=True))

    def test_is_deterministic(self, report, reference):
        first = aggregate(report, reference)
        second = aggregate(report, reference)

        assert first == second
        assert serialize_generation_output(first) == serialize_generation_output(second)

    def test_section_failure_is_isolated(self, report, reference, monkeypatch):
        def broken_totals(*args, **kwargs):
            raise MalformedInputError("totals exploded")

        monkeypatch.setattr("genreport.analysis.aggregation.compute_totals", broken_totals)

        output = aggregate(report, reference)

        assert output.totals == []
        assert len(output.max_emission_generators) == 2
        sections = [issue.section for issue in output.issues]
        assert ReportSection.TOTALS in sections

    def test_overflow_never_reaches_the_document(self, reference):
        report = make_report(
            make_record(
                COAL,
                "Coal",
                [("d1", 1e308, 10.0)],
                emissions_rating=10.0,
                total_heat_input=1e308,
                actual_net_generation=1e-10,
            ),
        )

        output = aggregate(report, reference)
        document = serialize_generation_output(output).lower()

        assert b"inf" not in document
        assert b"nan" not in document
        assert {issue.section for issue in output.issues} == set(ReportSection)

    def test_empty_report(self, reference):
        output = aggregate(make_report(), reference)

        assert output.totals == []
        assert output.max_emission_generators == []
        assert output.actual_heat_rates == []
        assert not output.is_partial

    def test_inputs_are_not_mutated(self, report, reference):
        before = (report.model_dump(), reference.model_dump())

        aggregate(report, reference)

        assert (report.model_dump(), reference.model_dump()) == before
