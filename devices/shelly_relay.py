"""Shelly Plus 1 PM (Gen2): status fetch and relay command.

Uses Gen2+ RPC API:
  http://<ip>/rpc/Shelly.GetStatus
  http://<ip>/rpc/Switch.Set?id=0&on=true

Each call is a single attempt. Retrying is up to whoever schedules the next call.
"""

import logging
import requests
import config

log = logging.getLogger(__name__)


class CommunicationError(Exception):
    """The device could not be reached or did not answer with a JSON object."""


class ShellyApi:
    """Talks to one Shelly Gen2 device via its local RPC API."""

    def __init__(self, ip):
        self.ip = ip
        self.base_url = f"http://{self.ip}/rpc"

    def _get(self, method, params=None):
        url = f"{self.base_url}/{method}"
        try:
            resp = requests.get(url, params=params, timeout=config.HTTP_TIMEOUT)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            raise CommunicationError(f"{method} on {self.ip} failed: {e}") from e
        except ValueError as e:
            raise CommunicationError(f"{method} on {self.ip} returned invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CommunicationError(f"{method} on {self.ip} returned {type(data).__name__}, not an object")
        return data

    def get_status(self):
        """Fetch full device status. Returns the decoded JSON object."""
        return self._get("Shelly.GetStatus")

    def set_relay(self, index, on):
        """Switch relay channel `index` on or off."""
        self._get("Switch.Set", params={"id": index, "on": "true" if on else "false"})
        log.info("%s: switch:%d turned %s", self.ip, index, "ON" if on else "OFF")
