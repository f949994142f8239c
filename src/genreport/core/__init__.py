# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
GenReport Core Framework

Foundational building blocks shared by every processing stage.
"""

from . import primitives
from .primitives import (
    AttemptOutcome,
    CalculationSettings,
    FactorTierEnum,
    GeneratorKindEnum,
    GenReportSettings,
    IngressState,
    Model,
    ReportSection,
    RetrySettings,
    TotalsGrouping,
    UnmappedFactorPolicy,
    load_settings,
)

__all__ = [
    "primitives",
    "AttemptOutcome",
    "CalculationSettings",
    "FactorTierEnum",
    "GeneratorKindEnum",
    "GenReportSettings",
    "IngressState",
    "Model",
    "ReportSection",
    "RetrySettings",
    "TotalsGrouping",
    "UnmappedFactorPolicy",
    "load_settings",
]
