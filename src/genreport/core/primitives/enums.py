# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from enum import Enum


class GeneratorKindEnum(str, Enum):
    """
    Kinds of generator records found in a generation report.

    The value is the lower-case kind label fed to the factor resolver; the
    element tag is the XML element the record is read from.
    """

    WIND = "wind"
    GAS = "gas"
    COAL = "coal"

    @property
    def element_tag(self) -> str:
        return f"{self.value.capitalize()}Generator"

    @property
    def emits(self) -> bool:
        """Whether records of this kind may carry an emissions rating."""
        return self in (GeneratorKindEnum.GAS, GeneratorKindEnum.COAL)


class FactorTierEnum(str, Enum):
    """Reference-table buckets a generator type maps to."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ReportSection(str, Enum):
    """Independent sections of a generation output document."""

    TOTALS = "Totals"
    MAX_EMISSION_GENERATORS = "MaxEmissionGenerators"
    ACTUAL_HEAT_RATES = "ActualHeatRates"


class UnmappedFactorPolicy(str, Enum):
    """How the aggregation engine treats a generator type with no tier."""

    ZERO = "zero"  # Legacy: contributes 0.0, logged as a warning
    ERROR = "error"  # Raises MalformedInputError for the affected group/record


class TotalsGrouping(str, Enum):
    """Key used to group generator records when computing value totals."""

    NAME = "name"  # Legacy: factor taken from the first record's kind
    NAME_AND_KIND = "name_and_kind"


class IngressState(str, Enum):
    """
    States of the per-file ingress state machine.

    NOTIFIED → ATTEMPTING → DONE | FAILED, with ATTEMPTING ⇄ RETRYING until
    the retry ceiling is reached (ABANDONED).
    """

    NOTIFIED = "Notified"
    ATTEMPTING = "Attempting"
    RETRYING = "Retrying"
    DONE = "Done"
    FAILED = "Failed"
    ABANDONED = "Abandoned"

    @property
    def is_terminal(self) -> bool:
        return self in (IngressState.DONE, IngressState.FAILED, IngressState.ABANDONED)


class AttemptOutcome(Enum):
    """Classification of a single processing attempt."""

    SUCCESS = 1
    RETRYABLE = 2
    FATAL = 3
