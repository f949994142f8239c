# GenReport Test Suite
# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
GenReport test suite.

This package contains tests for all GenReport components, organized into
unit and integration test categories.
"""
