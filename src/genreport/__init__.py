# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

import importlib
import logging

"""
GenReport - Generation Report Aggregation

Turns per-generator energy-production XML reports into summary reports:
value totals per generator, the peak-emission day of every rated gas/coal
unit, and the actual heat rate of every coal unit.

Key Entry Points:
- genreport.reference.load_reference_factors() - Load the static factor table
- genreport.analysis.aggregate() - Pure aggregation of a parsed report
- genreport.analysis.process_file() - Read and aggregate one report file
- genreport.ingress.IngressGuard - Retry-guarded processing of arriving files

Example Usage:
    ```python
    from genreport.analysis import process_file
    from genreport.reference import load_reference_factors

    reference = load_reference_factors("ReferenceData.xml")
    output = process_file("inbox/01-Basic.xml", reference)
    for entry in output.totals:
        print(entry.name, entry.total)
    ```
"""

# Library logging: applications configure their own handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())


# Public API surface (lazy-loaded on first attribute access)
__all__ = [  # noqa: F822 - lazy loading
    "analysis",
    "core",
    "exceptions",
    "ingress",
    "reference",
    "report",
]


_LAZY_MODULES = {
    "analysis": "genreport.analysis",
    "core": "genreport.core",
    "exceptions": "genreport.exceptions",
    "ingress": "genreport.ingress",
    "reference": "genreport.reference",
    "report": "genreport.report",
}


def __getattr__(name: str):
    module_path = _LAZY_MODULES.get(name)
    if module_path is None:
        raise AttributeError(f"module 'genreport' has no attribute '{name}'")
    module = importlib.import_module(module_path)
    globals()[name] = module
    return module
