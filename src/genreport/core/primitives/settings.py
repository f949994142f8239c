# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from pydantic import AliasChoices, Field, ValidationError

from ...exceptions import ConfigurationError
from .enums import TotalsGrouping, UnmappedFactorPolicy
from .model import Model

logger = logging.getLogger(__name__)


class RetrySettings(Model):
    """Bounded fixed-interval retry policy for files still being written."""

    max_attempts: int = Field(
        default=10,
        ge=1,
        description="Maximum processing attempts before a file is abandoned.",
    )
    delay_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Fixed wait between attempts (no exponential backoff, no jitter).",
    )
    settle_delay_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Wait after a file notification before the first attempt.",
    )


class CalculationSettings(Model):
    """
    Configuration settings for the aggregation engine behavior.

    Usage Examples:
        # Legacy-compatible output (default settings)
        calc_settings = CalculationSettings()

        # Strict processing: unmapped generator types and record errors abort the file
        calc_settings = CalculationSettings(
            unmapped_factor_policy=UnmappedFactorPolicy.ERROR,
            fail_on_error=True,
        )
    """

    unmapped_factor_policy: UnmappedFactorPolicy = Field(
        default=UnmappedFactorPolicy.ZERO,
        description="Whether an unrecognized generator type yields 0.0 or an error.",
    )
    totals_grouping: TotalsGrouping = Field(
        default=TotalsGrouping.NAME,
        description=(
            "Grouping key for value totals. NAME reproduces the legacy tool, where the "
            "factor for a group comes from its first record's kind; NAME_AND_KIND keeps "
            "generators of different kinds sharing a name in separate entries."
        ),
    )
    fail_on_error: bool = Field(
        default=False,
        description="If True, raise calculation errors; otherwise, log them and write partial output.",
    )


class GenReportSettings(Model):
    """Application configuration for the directory-watching report processor."""

    input_folder: Path = Field(
        validation_alias=AliasChoices("input_folder", "InputFolder"),
        description="Directory watched for new generation reports.",
    )
    output_folder: Path = Field(
        validation_alias=AliasChoices("output_folder", "OutputFolder"),
        description="Directory derived summary reports are written to.",
    )
    reference_data: Path = Field(
        default=Path("ReferenceData.xml"),
        validation_alias=AliasChoices("reference_data", "ReferenceData"),
        description="Static reference-factor document loaded once at start.",
    )
    file_pattern: str = Field(default="*.xml", description="Glob of files to process.")
    output_suffix: str = Field(
        default="-Result", description="Marker appended to the input file stem."
    )
    max_workers: int = Field(
        default=4, ge=1, description="Files processed concurrently by the watcher."
    )
    retry: RetrySettings = Field(default_factory=RetrySettings)
    calculation: CalculationSettings = Field(default_factory=CalculationSettings)


def load_settings(path: Union[str, Path]) -> GenReportSettings:
    """
    Load application settings from a JSON config file.

    Relative folder paths are resolved against the config file's directory.

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read config file {config_path}: {e}",
            context={"path": str(config_path)},
        ) from e

    try:
        settings = GenReportSettings.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid config file {config_path}: {e}",
            context={"path": str(config_path)},
        ) from e

    base = config_path.resolve().parent
    resolved = settings.model_copy(
        update={
            "input_folder": _resolve(settings.input_folder, base),
            "output_folder": _resolve(settings.output_folder, base),
            "reference_data": _resolve(settings.reference_data, base),
        }
    )
    logger.debug(f"Loaded settings from {config_path}")
    return resolved


def _resolve(path: Path, base: Path) -> Path:
    return path if path.is_absolute() else (base / path).resolve()
