import pytest
from pytest_socket import disable_socket

from engine import ShellyRelayMeter


def pytest_runtest_setup():
    """
    Runs before every test.
    We disable network access. Every attempt to reach a device
    (HTTP, DNS, etc) will immediately raise a SocketBlockedError.
    """
    disable_socket(allow_unix_socket=True)


@pytest.fixture
def api(mocker):
    """Stand-in for ShellyApi; tests set get_status / set_relay behaviour."""
    return mocker.Mock()


@pytest.fixture
def driver(api):
    """Enabled driver for switch:0 talking to the mocked api."""
    d = ShellyRelayMeter("io0", "192.168.1.50", api=api)
    d.enable()
    return d


def status_payload(output=True, apower=42.6, total=1.5, index=0):
    """Shelly.GetStatus body with a single switch channel."""
    return {
        f"switch:{index}": {
            "id": index,
            "source": "HTTP",
            "output": output,
            "apower": apower,
            "voltage": 231.4,
            "current": 0.21,
            "aenergy": {"total": total, "by_minute": [0.0, 0.0, 0.0], "minute_ts": 1700000000},
            "temperature": {"tC": 41.2, "tF": 106.2},
        },
        "sys": {"mac": "A8032ABE5D1C", "uptime": 3600},
    }
