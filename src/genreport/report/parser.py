# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Generation report XML parser.

Generator records are collected at any depth by element tag. Only presence is
checked: absent (or empty) optional values become None, while present values
that are not numeric make the whole document malformed.
"""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree

from ..core.primitives import GeneratorKindEnum
from ..exceptions import MalformedInputError, TransientAccessError
from .models import DayRecord, GenerationReport, GeneratorRecord

logger = logging.getLogger(__name__)


def _make_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=True)


def read_generation_report(path: Union[str, Path]) -> GenerationReport:
    """
    Read and parse a generation report from disk.

    The whole file is read on every call; partial reads are never resumed.
    Invalid XML counts as transient when the file still looks like it is
    being written: it is empty, it changed while being read, or the document
    simply stops before its root element is closed.

    Raises:
        TransientAccessError: If the file cannot be opened or read (locked,
            still being written, momentarily missing)
        MalformedInputError: If the content is not a valid generation report
    """
    report_path = Path(path)
    try:
        before = report_path.stat()
        content = report_path.read_bytes()
    except OSError as e:
        raise TransientAccessError(
            f"Cannot read {report_path}: {e}", context={"path": str(report_path)}
        ) from e

    try:
        root = etree.fromstring(content, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        if _still_being_written(report_path, content, before):
            raise TransientAccessError(
                f"{report_path} is incomplete, still being written: {e}",
                context={"path": str(report_path)},
            ) from e
        raise MalformedInputError(
            f"Malformed generation report {report_path}: {e}",
            context={"source": str(report_path)},
        ) from e
    return _build_report(root, str(report_path))


def parse_generation_report(content: bytes, source: str = "<bytes>") -> GenerationReport:
    """Parse generation report XML content into a GenerationReport."""
    try:
        root = etree.fromstring(content, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        raise MalformedInputError(
            f"Malformed generation report {source}: {e}", context={"source": source}
        ) from e
    return _build_report(root, source)


def _still_being_written(path: Path, content: bytes, before: os.stat_result) -> bool:
    if not content.strip():
        return True
    try:
        after = path.stat()
    except OSError:
        return True
    if (after.st_size, after.st_mtime_ns) != (before.st_size, before.st_mtime_ns):
        return True
    if after.st_size != len(content):
        return True
    return _ends_prematurely(content)


def _ends_prematurely(content: bytes) -> bool:
    """True when the content is well-formed so far but the document is cut off."""
    parser = _make_parser()
    try:
        parser.feed(content)
    except etree.XMLSyntaxError:
        return False
    try:
        parser.close()
    except etree.XMLSyntaxError:
        return True
    return False


def _build_report(root, source: str) -> GenerationReport:
    report = GenerationReport(
        wind=_read_records(root, GeneratorKindEnum.WIND, source),
        gas=_read_records(root, GeneratorKindEnum.GAS, source),
        coal=_read_records(root, GeneratorKindEnum.COAL, source),
    )
    logger.debug(
        f"Parsed {source}: {len(report.wind)} wind, {len(report.gas)} gas, "
        f"{len(report.coal)} coal records"
    )
    return report


def _read_records(root, kind: GeneratorKindEnum, source: str) -> List[GeneratorRecord]:
    records = []
    for element in root.iterdescendants(kind.element_tag):
        name = _text(element, "Name")
        records.append(
            GeneratorRecord(
                kind=kind,
                name=name,
                emissions_rating=_number(element, "EmissionsRating", source, name),
                total_heat_input=_number(element, "TotalHeatInput", source, name),
                actual_net_generation=_number(element, "ActualNetGeneration", source, name),
                days=[
                    DayRecord(
                        date=_text(day, "Date"),
                        energy=_number(day, "Energy", source, name),
                        price=_number(day, "Price", source, name),
                    )
                    for day in element.iterdescendants("Day")
                ],
            )
        )
    return records


def _text(element, tag: str) -> Optional[str]:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _number(element, tag: str, source: str, record_name: Optional[str]) -> Optional[float]:
    text = _text(element, tag)
    if text is None:
        return None
    try:
        value = float(text)
    except ValueError as e:
        raise MalformedInputError(
            f"Non-numeric {tag} {text!r} for generator {record_name!r} in {source}",
            context={"source": source, "record_name": record_name, "field": tag},
        ) from e
    if not math.isfinite(value):
        raise MalformedInputError(
            f"Non-finite {tag} {text!r} for generator {record_name!r} in {source}",
            context={"source": source, "record_name": record_name, "field": tag},
        )
    return value
