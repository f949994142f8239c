# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
GenReport Core Primitives

Immutable model base, enumerations and settings shared by the reference table,
the aggregation engine and the ingress guard.
"""

from .enums import (
    AttemptOutcome,
    FactorTierEnum,
    GeneratorKindEnum,
    IngressState,
    ReportSection,
    TotalsGrouping,
    UnmappedFactorPolicy,
)
from .model import Model
from .settings import (
    CalculationSettings,
    GenReportSettings,
    RetrySettings,
    load_settings,
)

__all__ = [
    # Base
    "Model",
    # Enums
    "AttemptOutcome",
    "FactorTierEnum",
    "GeneratorKindEnum",
    "IngressState",
    "ReportSection",
    "TotalsGrouping",
    "UnmappedFactorPolicy",
    # Settings
    "CalculationSettings",
    "GenReportSettings",
    "RetrySettings",
    "load_settings",
]
