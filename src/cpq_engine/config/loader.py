"""Configuration source — compiled-in defaults, optionally overridden by a
persisted record.

Persisted records are YAML (JSON parses too, being a YAML subset).  They
hold only the keys that differ from the defaults; nested sections merge
key-by-key, scalars and lists replace outright.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cpq_engine.config.quote_input import QuoteInput
from cpq_engine.config.rates import RateConfiguration
from cpq_engine.errors import QuoteInputError, RateConfigError

logger = logging.getLogger(__name__)


def default_rates() -> RateConfiguration:
    """The compiled-in rate card."""
    return RateConfiguration()


def deep_merge(base: dict, overrides: dict) -> dict:
    """Recursively merge overrides into base dict."""
    for key, val in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(val, dict):
            deep_merge(base[key], val)
        else:
            base[key] = val
    return base


def read_record(path: str | Path) -> dict[str, Any]:
    """Read a YAML/JSON mapping from disk.  An empty file is an empty record."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise RateConfigError("file not found", str(path)) from exc
    except yaml.YAMLError as exc:
        raise RateConfigError(f"not valid YAML/JSON ({exc})", str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RateConfigError("top level must be a mapping", str(path))
    return data


def build_rates(overrides: dict[str, Any] | None = None, source: str | None = None) -> RateConfiguration:
    """Merge ``overrides`` onto the default rate card and validate."""
    record = default_rates().model_dump(mode="json")
    if overrides:
        deep_merge(record, copy.deepcopy(overrides))
    try:
        return RateConfiguration.model_validate(record)
    except ValidationError as exc:
        raise RateConfigError.from_validation(exc, source) from exc


def load_rates(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RateConfiguration:
    """Load a rate card: defaults ← persisted record at ``path`` ← ``overrides``.

    With neither argument this is ``default_rates()``.
    """
    if path is None and not overrides:
        rates = default_rates()
        logger.info("Using compiled-in rate card %s", rates.version)
        return rates

    record: dict[str, Any] = {}
    source = None
    if path is not None:
        source = str(path)
        record = read_record(path)
    if overrides:
        deep_merge(record, copy.deepcopy(overrides))

    rates = build_rates(record, source or "overrides")
    logger.info("Loaded rate card %s from %s", rates.version, source or "overrides")
    return rates


def parse_assignments(assignments: list[str]) -> dict[str, Any]:
    """Turn ``["travel.scan_day_fee=350", ...]`` into a nested override dict.

    Values are parsed as YAML scalars, so numbers, booleans and quoted
    strings come through typed.
    """
    result: dict[str, Any] = {}
    for item in assignments:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise RateConfigError(f"expected dotted.key=value, got {item!r}", "--set")
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise RateConfigError(f"cannot parse value in {item!r} ({exc})", "--set") from exc
        node = result
        parts = key.strip().split(".")
        for part in parts[:-1]:
            node = node.setdefault(part, {})
            if not isinstance(node, dict):
                raise RateConfigError(f"{key} conflicts with an earlier assignment", "--set")
        node[parts[-1]] = value
    return result


def load_quote_input(path: str | Path) -> QuoteInput:
    """Read a YAML/JSON quote input record; area records are classified by type."""
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise QuoteInputError("file not found", str(path)) from exc
    except yaml.YAMLError as exc:
        raise QuoteInputError(f"not valid YAML/JSON ({exc})", str(path)) from exc
    if not isinstance(data, dict):
        raise QuoteInputError("top level must be a mapping", str(path))
    try:
        return QuoteInput.model_validate(data)
    except ValidationError as exc:
        raise QuoteInputError.from_validation(exc, str(path)) from exc
