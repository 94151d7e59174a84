################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""
Entry point for replaying recorded chirp events through the anemometer.
"""

import argparse
import contextlib
import json
import logging
import sys
from dataclasses import replace
from typing import Optional
from typing import TextIO

from oasis_anemometer.anemometer_types import ChirpEvent
from oasis_anemometer.anemometer_types import OutputRecord
from oasis_anemometer.codec.chirp_payload import ChirpPayloadError
from oasis_anemometer.config.anemometer_params import AnemometerParams
from oasis_anemometer.io.event_json import EventJsonError
from oasis_anemometer.io.event_json import dumps_record
from oasis_anemometer.io.event_json import loads_event
from oasis_anemometer.pipeline.anemometer_pipeline import AnemometerPipeline


_LOG: logging.Logger = logging.getLogger(__name__)


################################################################################
# Replay entry point
################################################################################


def _parse_args(args: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Replay JSON-lines chirp events through the anemometer"
    )
    parser.add_argument(
        "--input",
        default="-",
        help="Path to JSON-lines events, or - for stdin",
    )
    parser.add_argument(
        "--output",
        default="-",
        help="Path for JSON-lines records, or - for stdout",
    )
    parser.add_argument(
        "--params",
        default=None,
        help="Optional JSON file with nested parameter overrides",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging and per-burst sample dumps",
    )
    return parser.parse_args(args=args)


def _load_params(path: Optional[str], verbose: bool) -> AnemometerParams:
    params: AnemometerParams = AnemometerParams.defaults()
    if path is not None:
        with open(path, "r", encoding="utf-8") as handle:
            params = AnemometerParams.from_nested_dict(json.load(handle))
    if verbose:
        params = params.replace(diag=replace(params.diag, dump_bursts=True))
    return params


def replay(pipeline: AnemometerPipeline, source: TextIO, sink: TextIO) -> int:
    """Replay every event line from source, returning the records written."""
    written: int = 0
    for line_number, line in enumerate(source, start=1):
        line = line.strip()
        if not line:
            continue

        try:
            event: ChirpEvent = loads_event(line)
            record: OutputRecord = pipeline.process_event(event)
        except (EventJsonError, ChirpPayloadError) as exc:
            _LOG.error("Skipping line %d: %s", line_number, exc)
            continue

        sink.write(dumps_record(record) + "\n")
        written += 1

    return written


def main(args: Optional[list[str]] = None) -> None:
    options: argparse.Namespace = _parse_args(args=args)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    pipeline: AnemometerPipeline = AnemometerPipeline(
        _load_params(options.params, options.verbose)
    )

    with contextlib.ExitStack() as stack:
        source: TextIO = (
            sys.stdin
            if options.input == "-"
            else stack.enter_context(open(options.input, "r", encoding="utf-8"))
        )
        sink: TextIO = (
            sys.stdout
            if options.output == "-"
            else stack.enter_context(open(options.output, "w", encoding="utf-8"))
        )

        written: int = replay(pipeline, source, sink)

    _LOG.info("Wrote %d records", written)
    _LOG.debug("Burst counters: %s", pipeline.counters.to_dict())
