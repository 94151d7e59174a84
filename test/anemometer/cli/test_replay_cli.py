################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Tests for the chirp event replay CLI."""

from __future__ import annotations

import builtins
import io
import json
from pathlib import Path
from typing import IO
from typing import Any

import pytest

from oasis_anemometer.cli import replay_cli
from oasis_anemometer.cli.replay_cli import main
from oasis_anemometer.cli.replay_cli import replay
from oasis_anemometer.codec.chirp_payload import encode_port_payload
from oasis_anemometer.pipeline.anemometer_pipeline import AnemometerPipeline


_PEAK: list[int] = [0, 0, 0, 0, 8, 12, 14, 16, 18, 19, 20, 19, 18, 16, 14, 12]


def _event_line(primary: int = 0, payload_hex: str | None = None) -> str:
    if payload_hex is None:
        payload_hex = encode_port_payload(
            2048, in_phase=_PEAK, quadrature=[0] * 16
        ).hex()
    event: dict[str, Any] = {
        "t_ns": 1000,
        "device_id": "AA:BB",
        "build": 3,
        "seqno": 1,
        "primary": primary,
        "cal_resolution": 1,
        "cal_pulse_ns": 1000,
        "payloads": [payload_hex] * 4,
    }
    return json.dumps(event)


def test_replay_skips_bad_lines() -> None:
    """Malformed events should be logged and skipped, not fatal."""
    source: io.StringIO = io.StringIO(
        "\n".join(
            [
                _event_line(0),
                "",
                "{not json",
                _event_line(1, payload_hex="00" * 69),
                _event_line(2),
            ]
        )
        + "\n"
    )
    sink: io.StringIO = io.StringIO()

    written: int = replay(AnemometerPipeline(), source, sink)

    lines: list[str] = sink.getvalue().splitlines()
    assert written == 2
    assert len(lines) == 2
    assert [tof["src"] for tof in json.loads(lines[1])["tofs"]] == [2, 2, 2]


def test_main_reads_and_writes_files(tmp_path: Path) -> None:
    """main should replay an input file into an output file."""
    input_path: Path = tmp_path / "events.jsonl"
    output_path: Path = tmp_path / "records.jsonl"
    input_path.write_text(_event_line(0) + "\n" + _event_line(3) + "\n")

    main(["--input", str(input_path), "--output", str(output_path)])

    records: list[dict[str, Any]] = [
        json.loads(line) for line in output_path.read_text().splitlines()
    ]
    assert len(records) == 2
    assert records[0]["device_id"] == "AA:BB"
    assert len(records[0]["tofs"]) == 3
    assert len(records[0]["velocities"]) == 1


def test_main_applies_param_overrides(tmp_path: Path) -> None:
    """A params file should override the defaults."""
    input_path: Path = tmp_path / "events.jsonl"
    output_path: Path = tmp_path / "records.jsonl"
    params_path: Path = tmp_path / "params.json"
    input_path.write_text(_event_line(0) + "\n")
    params_path.write_text(json.dumps({"estimator": {"tof_scale": 16.0}}))

    main(
        [
            "--input",
            str(input_path),
            "--output",
            str(output_path),
            "--params",
            str(params_path),
        ]
    )

    record: dict[str, Any] = json.loads(output_path.read_text())
    assert record["tofs"][0]["tof_s"] == 8.0


def test_main_closes_input_when_output_fails(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """An unopenable output should not leak the open input file."""
    input_path: Path = tmp_path / "events.jsonl"
    input_path.write_text(_event_line(0) + "\n")
    output_path: Path = tmp_path / "missing" / "records.jsonl"

    opened: list[IO[Any]] = []

    def _tracking_open(*args: Any, **kwargs: Any) -> IO[Any]:
        handle: IO[Any] = builtins.open(*args, **kwargs)
        opened.append(handle)
        return handle

    monkeypatch.setattr(replay_cli, "open", _tracking_open, raising=False)

    with pytest.raises(FileNotFoundError):
        main(["--input", str(input_path), "--output", str(output_path)])

    assert len(opened) == 1
    assert opened[0].closed
