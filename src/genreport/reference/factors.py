# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Reference factor table and generator-type factor resolution.

The reference document is loaded once at start and shared read-only by every
aggregation call. Factor lookup maps a generator-type label onto a tier
(Low/Medium/High) through a fixed category map and returns that tier's
multiplier, or 0.0 when the label or the tier entry is absent.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from lxml import etree
from pydantic import Field

from ..core.primitives import FactorTierEnum, Model
from ..exceptions import ConfigurationError, MalformedInputError

logger = logging.getLogger(__name__)

# Fixed generator-type → tier category map (labels compared case-insensitively)
CATEGORY_TIERS: Dict[str, FactorTierEnum] = {
    "offshore": FactorTierEnum.LOW,
    "onshore": FactorTierEnum.HIGH,
    "gas": FactorTierEnum.MEDIUM,
    "coal": FactorTierEnum.MEDIUM,
}

FactorTable = Mapping[FactorTierEnum, float]


class ReferenceFactors(Model):
    """
    Immutable per-tier value and emission multipliers.

    Tiers missing from the reference document are simply absent from the
    mappings; lookups for them resolve to 0.0.
    """

    value_factors: Dict[FactorTierEnum, float] = Field(default_factory=dict)
    emission_factors: Dict[FactorTierEnum, float] = Field(default_factory=dict)


def resolve_tier(generator_type_label: Optional[str]) -> Optional[FactorTierEnum]:
    """Map a generator-type label onto its tier, or None when unmapped."""
    if not generator_type_label:
        return None
    return CATEGORY_TIERS.get(generator_type_label.strip().lower())


def resolve_factor(
    generator_type_label: Optional[str], factor_table: Optional[FactorTable]
) -> float:
    """
    Resolve the factor for a generator type from a tier → multiplier table.

    Args:
        generator_type_label: Label such as "Offshore", "gas" or "COAL"
        factor_table: One of the ReferenceFactors mappings

    Returns:
        The tier's multiplier, or 0.0 when the label is unmapped or the
        table has no entry for the tier.

    Example:
        ```python
        resolve_factor("OFFSHORE", factors.value_factors)  # value for Low
        resolve_factor("solar", factors.value_factors)  # 0.0
        ```
    """
    tier = resolve_tier(generator_type_label)
    if tier is None or not factor_table:
        return 0.0
    return float(factor_table.get(tier, 0.0))


def load_reference_factors(path: Union[str, Path]) -> ReferenceFactors:
    """
    Load the reference factor table from its XML document.

    Expected shape::

        <ReferenceData>
          <Factors>
            <ValueFactor><High/><Medium/><Low/></ValueFactor>
            <EmissionsFactor><High/><Medium/><Low/></EmissionsFactor>
          </Factors>
        </ReferenceData>

    Raises:
        ConfigurationError: If the document cannot be read
        MalformedInputError: If it is not XML or a factor value is not numeric
    """
    reference_path = Path(path)
    try:
        tree = etree.parse(str(reference_path))
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read reference data {reference_path}: {e}",
            context={"path": str(reference_path)},
        ) from e
    except etree.XMLSyntaxError as e:
        raise MalformedInputError(
            f"Reference data {reference_path} is not valid XML: {e}",
            context={"path": str(reference_path)},
        ) from e

    root = tree.getroot()
    factors = root if root.tag == "Factors" else root.find("Factors")
    if factors is None:
        logger.warning(f"No Factors element in {reference_path}; all factors resolve to 0.0")
        return ReferenceFactors()

    reference = ReferenceFactors(
        value_factors=_read_tiers(factors.find("ValueFactor"), reference_path),
        emission_factors=_read_tiers(factors.find("EmissionsFactor"), reference_path),
    )
    logger.info(
        f"Loaded reference factors from {reference_path}: "
        f"value={_describe(reference.value_factors)} "
        f"emissions={_describe(reference.emission_factors)}"
    )
    return reference


def _read_tiers(element, source: Path) -> Dict[FactorTierEnum, float]:
    tiers: Dict[FactorTierEnum, float] = {}
    if element is None:
        return tiers
    for tier in FactorTierEnum:
        text = element.findtext(tier.value)
        if text is None or not text.strip():
            continue
        try:
            tiers[tier] = float(text)
        except ValueError as e:
            raise MalformedInputError(
                f"Non-numeric {element.tag}/{tier.value} in {source}: {text!r}",
                context={"path": str(source), "tier": tier.value},
            ) from e
    return tiers


def _describe(table: FactorTable) -> str:
    return ", ".join(f"{tier.value}={value}" for tier, value in table.items()) or "none"
