################################################################################
#
#  Copyright (C) 2026 Garrett Brown
#  This file is part of OASIS - https://github.com/eigendude/OASIS
#
#  SPDX-License-Identifier: Apache-2.0
#  See DOCS/LICENSING.md for more information.
#
################################################################################

"""Room anemometer pipeline orchestration.

One burst is processed synchronously end to end: decode every port,
resolve the device, estimate a ToF per receiving port, update the device
matrices, decompose the cardinal velocity and assemble one output record.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

import numpy as np

from oasis_anemometer.anemometer_types import ChirpEvent
from oasis_anemometer.anemometer_types import OutputRecord
from oasis_anemometer.anemometer_types import PortSamples
from oasis_anemometer.anemometer_types import SkippedPair
from oasis_anemometer.anemometer_types import TofEstimate
from oasis_anemometer.anemometer_types import TofMeasure
from oasis_anemometer.anemometer_types import VelocityMeasure
from oasis_anemometer.codec.chirp_payload import ChirpPayloadError
from oasis_anemometer.codec.chirp_payload import decode_port_payload
from oasis_anemometer.config.anemometer_params import NUM_TRANSDUCERS
from oasis_anemometer.config.anemometer_params import AnemometerParams
from oasis_anemometer.config.anemometer_params import AnemometerParamsError
from oasis_anemometer.diagnostics import BurstCounters
from oasis_anemometer.diagnostics import NotifyLimiter
from oasis_anemometer.dsp.tof_estimator import DegenerateBurstError
from oasis_anemometer.dsp.tof_estimator import estimate_tof
from oasis_anemometer.geometry.tetrahedron import TetrahedronGeometry
from oasis_anemometer.geometry.tetrahedron import build_geometry
from oasis_anemometer.models.velocity_decomposer import VelocityDecomposer
from oasis_anemometer.models.velocity_stages import run_stages
from oasis_anemometer.state.device_registry import DeviceRegistry
from oasis_anemometer.state.device_state import DeviceState


# Microseconds per second for the ToF matrix
_US_PER_S: float = 1.0e6

_LOG: logging.Logger = logging.getLogger(__name__)


# Callable accepting finished records, typically the output bus
OutputSink = Callable[[OutputRecord], None]


class AnemometerPipeline:
    """End-to-end coordinator for room anemometer bursts."""

    def __init__(
        self,
        params: AnemometerParams | None = None,
        *,
        sink: OutputSink | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the pipeline, failing fast on invalid configuration."""
        if params is None:
            params = AnemometerParams.defaults()
        if not isinstance(params, AnemometerParams):
            raise AnemometerParamsError("params must be AnemometerParams")
        params.validate()

        self._params: AnemometerParams = params
        self._sink: OutputSink | None = sink
        self._geometry: TetrahedronGeometry = build_geometry(params.geometry)
        self._registry: DeviceRegistry = DeviceRegistry(params.geometry)
        self._decomposer: VelocityDecomposer = VelocityDecomposer(
            self._geometry, stale_after_bursts=params.diag.stale_after_bursts
        )
        self._limiter: NotifyLimiter = NotifyLimiter(
            params.diag.notify_interval_sec, clock=clock
        )
        self._counters: BurstCounters = BurstCounters()

    @property
    def params(self) -> AnemometerParams:
        return self._params

    @property
    def geometry(self) -> TetrahedronGeometry:
        return self._geometry

    @property
    def registry(self) -> DeviceRegistry:
        return self._registry

    @property
    def counters(self) -> BurstCounters:
        return self._counters

    def process_event(self, event: ChirpEvent) -> OutputRecord:
        """Process one burst and return its output record.

        Raises:
            ChirpPayloadError: When any port payload is malformed; device
                state is left untouched
        """
        self._counters.record_burst()

        try:
            ports: list[PortSamples] = [
                decode_port_payload(payload) for payload in event.payloads
            ]
        except ChirpPayloadError as exc:
            self._counters.reject_malformed()
            _LOG.warning(
                "Dropping burst %d from %s: %s", event.seqno, event.device_id, exc
            )
            raise

        state: DeviceState = self._registry.resolve(event.device_id)

        tofs: list[TofMeasure] = []
        skipped: list[SkippedPair] = []

        with state.lock:
            for port in range(NUM_TRANSDUCERS):
                # The primary port transmits, it has no time of flight
                if port == event.primary:
                    continue

                samples: PortSamples = ports[port]
                try:
                    estimate: TofEstimate = estimate_tof(
                        samples.in_phase,
                        samples.quadrature,
                        sample_freq_factor=samples.sample_freq_factor,
                        cal_resolution=event.cal_resolution[port],
                        cal_pulse_width_ns=event.cal_pulse_ns,
                        params=self._params.estimator,
                    )
                except DegenerateBurstError as exc:
                    self._counters.reject_degenerate()
                    _LOG.debug(
                        "Skipping port %d of burst %d from %s: %s",
                        port,
                        event.seqno,
                        event.device_id,
                        exc,
                    )
                    skipped.append(SkippedPair(event.primary, port, exc.reason))
                    continue

                if self._params.diag.dump_bursts:
                    _dump_burst(event, port, samples, estimate)

                tx, rx = self._geometry.port_pair_to_indices(event.primary, port)
                stale: bool = self._decomposer.apply_tof(
                    state, tx, rx, estimate.tof_s * _US_PER_S
                )
                self._counters.record_tof(stale_reciprocal=stale)

                tofs.append(TofMeasure(event.primary, port, estimate.tof_s))

            state.sample_count += 1
            self._decomposer.decompose(state)
            filtered: np.ndarray = run_stages(state)
            velocity: VelocityMeasure = VelocityMeasure(
                x=float(filtered[0]), y=float(filtered[1]), z=float(filtered[2])
            )

        diagnostics: list[str] = []
        if self._limiter.try_acquire():
            diagnostics.append(f"anemometer {event.device_id} build is {event.build}")

        record: OutputRecord = OutputRecord(
            t_ns=event.t_ns,
            device_id=event.device_id,
            tofs=tuple(tofs),
            velocities=(velocity,),
            diagnostics=tuple(diagnostics),
            skipped=tuple(skipped),
        )

        if self._sink is not None:
            self._sink(record)

        return record


def _dump_burst(
    event: ChirpEvent, port: int, samples: PortSamples, estimate: TofEstimate
) -> None:
    """Log the samples and intermediate values of one burst."""
    if not _LOG.isEnabledFor(logging.DEBUG):
        return

    lines: list[str] = [
        f"SEQ {event.seqno} ASIC {port} primary={event.primary}",
        f"lerp_idx: {estimate.lerp_index}",
        f"tof_sf: {samples.sample_freq_factor}",
        f"freq: {estimate.freq}",
        f"tof: {estimate.tof_us:.2f} us",
        f"intensity: {samples.intensity}",
        f"tof chip estimate: {samples.tof_estimate_raw}",
        f"tof 50us estimate: {estimate.lerp_delay_us}",
        "data:",
    ]
    for index in range(len(samples.in_phase)):
        lines.append(
            f" [{index:2d}] {int(samples.quadrature[index]):6d} + "
            f"{int(samples.in_phase[index]):6d}i "
            f"({float(estimate.magnitudes[index]):.2f})"
        )

    _LOG.debug("\n".join(lines))
