# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base Pydantic model with common configuration.

    Immutable, slot-based models shared read-only between concurrent file
    workers. Mutable runtime state (retry counters, watcher handles) lives
    outside of models.
    """

    model_config = ConfigDict(
        frozen=True,  # Safe for unsynchronized reads across worker threads
        slots=True,
        extra="forbid",  # Catches typos in config files immediately
    )
