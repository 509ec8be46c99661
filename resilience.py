"""Device communication health tracking."""

import logging
from datetime import datetime
from dataclasses import dataclass

import config

log = logging.getLogger(__name__)


@dataclass
class DeviceHealth:
    """Outcome of the most recent exchange with a device.

    There is no failure counter: communication_failed only reflects the last
    phase that talked to the device. first_failure and alert_sent exist so a
    persistent outage is reported once instead of every cycle.
    """
    name: str
    communication_failed: bool = False
    last_success: datetime = None
    last_error: str = None
    first_failure: datetime = None
    alert_sent: bool = False

    def record_success(self):
        if self.communication_failed:
            log.info("%s: communication restored", self.name)
        self.communication_failed = False
        self.last_success = datetime.now()
        self.last_error = None
        self.first_failure = None
        self.alert_sent = False

    def record_failure(self, error):
        self.communication_failed = True
        self.last_error = str(error)
        if self.first_failure is None:
            self.first_failure = datetime.now()

    def minutes_failing(self):
        if not self.communication_failed or self.first_failure is None:
            return 0.0
        delta = datetime.now() - self.first_failure
        return delta.total_seconds() / 60

    def should_alert(self):
        if self.alert_sent or not self.communication_failed:
            return False
        return self.minutes_failing() >= config.ALERT_AFTER_MINUTES

    def mark_alerted(self):
        self.alert_sent = True
