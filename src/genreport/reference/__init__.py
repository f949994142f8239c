# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reference factor table and factor resolution.
"""

from .factors import (
    CATEGORY_TIERS,
    ReferenceFactors,
    load_reference_factors,
    resolve_factor,
    resolve_tier,
)

__all__ = [
    "CATEGORY_TIERS",
    "ReferenceFactors",
    "load_reference_factors",
    "resolve_factor",
    "resolve_tier",
]
