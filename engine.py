"""Cycle synchronization between a Shelly relay and its RelayMeterState.

Each cycle the scheduler calls, in this order and never concurrently:
  1. on_read_tick()   poll the device, parse, publish relay/power/energy
  2. on_write_tick()  send the pending relay value if it differs from the last read

Neither phase raises on device trouble. Failures end up in the
communication_failed flag and UNKNOWN channel values.
"""

import logging

from devices.shelly_relay import CommunicationError, ShellyApi
from state import MeterType, RelayMeterState, SinglePhase
from status_parser import StatusParseError, parse_status

log = logging.getLogger(__name__)


class ShellyRelayMeter:
    """Switchable relay with single-phase power metering, backed by a Shelly Gen2."""

    def __init__(self, driver_id, ip, relay_index=0,
                 meter_type=MeterType.CONSUMPTION_METERED, phase=SinglePhase.L1,
                 api=None):
        self.driver_id = driver_id
        self.ip = ip
        self.relay_index = relay_index
        self.meter_type = meter_type
        self.phase = phase
        self._api = api
        self.api = None
        self.state = None

    @property
    def enabled(self):
        return self.state is not None

    def enable(self):
        """Create the client and a fresh state model."""
        if self.enabled:
            return
        self.api = self._api or ShellyApi(self.ip)
        self.state = RelayMeterState(self.driver_id, self.meter_type, self.phase)
        log.info("%s: enabled (ip=%s, switch:%d, %s/%s)", self.driver_id, self.ip,
                 self.relay_index, self.meter_type.value, self.phase.value)

    def disable(self):
        """Drop the state model. Pending writes are discarded."""
        if not self.enabled:
            return
        self.state = None
        self.api = None
        log.info("%s: disabled", self.driver_id)

    # ------------------------------------------------------------------
    # Cycle phases
    # ------------------------------------------------------------------

    def on_read_tick(self):
        if not self.enabled:
            return
        state = self.state

        try:
            payload = self.api.get_status()
            status = parse_status(payload, self.relay_index)
        except (CommunicationError, StatusParseError) as e:
            log.error("%s: unable to read from Shelly API: %s", self.driver_id, e)
            state.publish_unknown(e)
            return

        state.publish(status.relay, status.active_power, status.active_energy)

    def on_write_tick(self):
        if not self.enabled:
            return
        state = self.state

        desired = state.take_pending_write()
        if desired is None:
            return

        current = state.relay
        if current.is_known and current.value == desired:
            log.debug("%s: relay already %s, no command sent", self.driver_id,
                      "on" if desired else "off")
            return

        try:
            self.api.set_relay(self.relay_index, desired)
        except CommunicationError as e:
            log.error("%s: unable to switch relay %s: %s", self.driver_id,
                      "on" if desired else "off", e)
            state.record_exchange(e)
            return

        state.record_exchange()

    # ------------------------------------------------------------------
    # Actuation / inspection
    # ------------------------------------------------------------------

    def request_relay(self, on):
        """Queue a desired relay value for the next write phase."""
        state = self.state
        if state is None:
            raise RuntimeError(f"{self.driver_id} is disabled")
        state.set_pending_write(bool(on))

    def snapshot(self):
        state = self.state
        if state is None:
            return None
        return state.snapshot()

    def debug_log(self):
        """Status line like 'On|43 W' built from the published values only."""
        snap = self.snapshot()
        if snap is None:
            return "Disabled"
        return snap.summary()
