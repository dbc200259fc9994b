"""Command line — price a quote input file and print the result as JSON.

    cpq-quote project.yaml --target 45 --set travel.scan_day_fee=350

Exit codes: 0 passed/warning, 2 blocked by the margin floor, 1 bad input
or configuration.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from cpq_engine.config.loader import load_quote_input, load_rates, parse_assignments
from cpq_engine.engine.orchestrator import price_quote
from cpq_engine.errors import CPQError
from cpq_engine.logging_config import setup_logging
from cpq_engine.models.results import IntegrityStatus

logger = logging.getLogger(__name__)

RATES_PATH_ENV = "CPQ_RATES_PATH"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 2

# `--target` given without a value: use the rate card's default target.
RATE_CARD_TARGET = object()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpq-quote",
        description="Price a structured quote input against a rate card.",
    )
    parser.add_argument("quote_file", help="YAML or JSON quote input")
    parser.add_argument(
        "--rates",
        help=f"Persisted rate record (YAML/JSON). Defaults to ${RATES_PATH_ENV}, then the built-in card.",
    )
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override one rate value, e.g. margins.floor_pct=42 (repeatable)",
    )
    parser.add_argument(
        "--target",
        type=float,
        nargs="?",
        const=RATE_CARD_TARGET,
        metavar="PCT",
        help="Target gross margin percent (overrides the input file). "
             "Without a value, the rate card's default target is used.",
    )
    parser.add_argument("--output", "-o", help="Write the quote JSON here instead of stdout")
    parser.add_argument("--log-level", default="WARNING", help="DEBUG, INFO, WARNING, ERROR")
    parser.add_argument("--json-logs", action="store_true", help="Emit log lines as JSON")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level, json_output=args.json_logs)

    rates_path = args.rates or os.environ.get(RATES_PATH_ENV) or None
    try:
        overrides = parse_assignments(args.assignments)
        rates = load_rates(rates_path, overrides or None)
        quote_input = load_quote_input(args.quote_file)
    except CPQError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if args.target is RATE_CARD_TARGET:
        args.target = rates.margins.default_target_pct
    if args.target is not None:
        quote_input = quote_input.model_copy(update={"target_margin_pct": args.target})

    log_context = {"quote_file": args.quote_file, "rates_version": rates.version}
    quote = price_quote(quote_input, rates)
    logger.info(
        "Priced %d line item(s): margin %.2f%% (%s)",
        len(quote.line_items), quote.gross_margin_pct, quote.integrity_status.value,
        extra=log_context,
    )
    payload = quote.model_dump_json(indent=2)

    if args.output:
        try:
            Path(args.output).write_text(payload + "\n", encoding="utf-8")
        except OSError as exc:
            print(f"error: cannot write {args.output}: {exc}", file=sys.stderr)
            return EXIT_ERROR
        logger.info("Wrote quote to %s", args.output, extra=log_context)
    else:
        sys.stdout.write(payload + "\n")

    if quote.integrity_status is IntegrityStatus.BLOCKED:
        print(
            f"blocked: gross margin {quote.gross_margin_pct}% is below the floor of "
            f"{rates.margins.floor_pct:g}%",
            file=sys.stderr,
        )
        return EXIT_BLOCKED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
