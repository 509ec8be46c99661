"""Relay and power-meter state container."""

import enum
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from resilience import DeviceHealth


@dataclass(frozen=True)
class Known:
    """A channel value that was read successfully."""
    value: Any

    @property
    def is_known(self):
        return True

    def value_or(self, default):
        return self.value


class _Unknown:
    """A channel value that could not be read (failed poll or absent field)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def is_known(self):
        return False

    def value_or(self, default):
        return default

    def __repr__(self):
        return "UNKNOWN"


UNKNOWN = _Unknown()


class MeterType(enum.Enum):
    GRID = "GRID"
    PRODUCTION = "PRODUCTION"
    PRODUCTION_AND_CONSUMPTION = "PRODUCTION_AND_CONSUMPTION"
    CONSUMPTION_METERED = "CONSUMPTION_METERED"
    CONSUMPTION_NOT_METERED = "CONSUMPTION_NOT_METERED"
    MANAGED_CONSUMPTION_METERED = "MANAGED_CONSUMPTION_METERED"


class SinglePhase(enum.Enum):
    L1 = "L1"
    L2 = "L2"
    L3 = "L3"


@dataclass(frozen=True)
class StateSnapshot:
    """Read-only copy of every channel the driver exposes."""
    relay: Any                  # Known(bool) | UNKNOWN
    active_power: Any           # Known(int) W | UNKNOWN
    active_power_l1: Any
    active_power_l2: Any
    active_power_l3: Any
    active_energy: Any          # Known(int) minute-resolution Wh | UNKNOWN
    communication_failed: bool
    meter_type: MeterType
    phase: SinglePhase
    timestamp: datetime

    def to_dict(self):
        """JSON-friendly view: UNKNOWN becomes None."""
        return {
            "relay": self.relay.value_or(None),
            "active_power_w": self.active_power.value_or(None),
            "active_power_l1_w": self.active_power_l1.value_or(None),
            "active_power_l2_w": self.active_power_l2.value_or(None),
            "active_power_l3_w": self.active_power_l3.value_or(None),
            "active_energy": self.active_energy.value_or(None),
            "communication_failed": self.communication_failed,
            "meter_type": self.meter_type.value,
            "phase": self.phase.value,
            "timestamp": self.timestamp.isoformat(),
        }

    def summary(self):
        """Status line like 'On|43 W' built from this snapshot only."""
        if self.relay.is_known:
            text = "On" if self.relay.value else "Off"
        else:
            text = "Unknown"
        if self.active_power.is_known:
            return f"{text}|{self.active_power.value} W"
        return f"{text}|Unknown"


class RelayMeterState:
    """State of one relay channel: last read values, pending write, health.

    Owned by a single ShellyRelayMeter. The read phase publishes relay, power,
    energy and the communication flag as one group; other threads only queue
    pending writes and take snapshots, all under the same lock.
    """

    def __init__(self, name, meter_type, phase):
        self.meter_type = meter_type
        self.phase = phase
        self.health = DeviceHealth(name=name)

        self._lock = threading.Lock()
        self._relay = UNKNOWN
        self._active_power = UNKNOWN
        self._active_energy = UNKNOWN
        self._pending_write: Optional[bool] = None

    @property
    def relay(self):
        with self._lock:
            return self._relay

    @property
    def active_power(self):
        with self._lock:
            return self._active_power

    @property
    def active_energy(self):
        with self._lock:
            return self._active_energy

    def publish(self, relay, active_power, active_energy):
        """Publish a successful read and mark communication healthy."""
        with self._lock:
            self._relay = relay
            self._active_power = active_power
            self._active_energy = active_energy
            self.health.record_success()

    def publish_unknown(self, error):
        """Publish a failed read: all values UNKNOWN, communication failed."""
        with self._lock:
            self._relay = UNKNOWN
            self._active_power = UNKNOWN
            self._active_energy = UNKNOWN
            self.health.record_failure(error)

    def record_exchange(self, error=None):
        """Record the outcome of a device exchange that publishes no values."""
        with self._lock:
            if error is None:
                self.health.record_success()
            else:
                self.health.record_failure(error)

    def set_pending_write(self, value):
        """Queue a desired relay value. Replaces any value not yet consumed."""
        with self._lock:
            self._pending_write = value

    def take_pending_write(self) -> Optional[bool]:
        """Return the pending value and clear the slot in one step."""
        with self._lock:
            value, self._pending_write = self._pending_write, None
            return value

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            relay = self._relay
            power = self._active_power
            energy = self._active_energy
            communication_failed = self.health.communication_failed

        # Single-phase meter: all power is attributed to the configured phase
        phases = {p: UNKNOWN for p in SinglePhase}
        phases[self.phase] = power

        return StateSnapshot(
            relay=relay,
            active_power=power,
            active_power_l1=phases[SinglePhase.L1],
            active_power_l2=phases[SinglePhase.L2],
            active_power_l3=phases[SinglePhase.L3],
            active_energy=energy,
            communication_failed=communication_failed,
            meter_type=self.meter_type,
            phase=self.phase,
            timestamp=datetime.now(),
        )
