################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""JSON mapping for chirp events and output records.

Events are one JSON object per line with port payloads as hex strings:

    {"t_ns": 0, "device_id": "AA:BB", "build": 1, "seqno": 7, "primary": 0,
     "cal_resolution": [1, 1, 1, 1], "cal_pulse_ns": 1000,
     "payloads": ["0008...", "...", "...", "..."]}
"""

from __future__ import annotations

import json
from typing import Any
from typing import Mapping

from oasis_anemometer.anemometer_types import ChirpEvent
from oasis_anemometer.anemometer_types import OutputRecord


_EVENT_KEYS: tuple[str, ...] = (
    "t_ns",
    "device_id",
    "build",
    "seqno",
    "primary",
    "cal_resolution",
    "cal_pulse_ns",
    "payloads",
)


class EventJsonError(ValueError):
    """Raised when a JSON event cannot be mapped to a chirp event."""


def event_from_dict(data: Mapping[str, Any]) -> ChirpEvent:
    """Build a chirp event from a decoded JSON object."""
    if not isinstance(data, Mapping):
        raise EventJsonError("Event must be a JSON object")

    missing: list[str] = [key for key in _EVENT_KEYS if key not in data]
    if missing:
        raise EventJsonError(f"Event is missing keys: {missing}")

    payloads_hex: Any = data["payloads"]
    if not isinstance(payloads_hex, list):
        raise EventJsonError("payloads must be a list of hex strings")
    try:
        payloads: tuple[bytes, ...] = tuple(bytes.fromhex(p) for p in payloads_hex)
    except (TypeError, ValueError) as exc:
        raise EventJsonError(f"Invalid payload hex: {exc}") from exc

    cal_resolution: Any = data["cal_resolution"]
    if isinstance(cal_resolution, list):
        cal_resolution = tuple(cal_resolution)

    try:
        return ChirpEvent(
            t_ns=data["t_ns"],
            device_id=data["device_id"],
            build=data["build"],
            seqno=data["seqno"],
            primary=data["primary"],
            cal_resolution=cal_resolution,
            cal_pulse_ns=data["cal_pulse_ns"],
            payloads=payloads,
        )
    except ValueError as exc:
        raise EventJsonError(str(exc)) from exc


def event_to_dict(event: ChirpEvent) -> dict[str, Any]:
    """Return a JSON-compatible dictionary for a chirp event."""
    return {
        "t_ns": event.t_ns,
        "device_id": event.device_id,
        "build": event.build,
        "seqno": event.seqno,
        "primary": event.primary,
        "cal_resolution": list(event.cal_resolution),
        "cal_pulse_ns": event.cal_pulse_ns,
        "payloads": [payload.hex() for payload in event.payloads],
    }


def loads_event(line: str) -> ChirpEvent:
    """Parse one JSON line into a chirp event."""
    try:
        data: Any = json.loads(line)
    except json.JSONDecodeError as exc:
        raise EventJsonError(f"Invalid JSON: {exc}") from exc
    return event_from_dict(data)


def dumps_record(record: OutputRecord) -> str:
    """Serialize an output record as one JSON line."""
    return json.dumps(record.to_dict(), sort_keys=True)
