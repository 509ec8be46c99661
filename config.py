"""Configuration for the Shelly relay sync driver.

Static tuning values live here. Environment-specific values (device IP, relay
channel, meter classification) live in .env and are read once at import time,
so main.py loads .env before importing this module.
"""

import os

# ---------------------------------------------------------------------------
# Device address (DHCP reservation, set SHELLY_IP in .env)
# ---------------------------------------------------------------------------
SHELLY_IP = os.getenv("SHELLY_IP", "192.168.1.XXX")   # Shelly Plus 1 PM on IoT VLAN
SHELLY_RELAY_INDEX = int(os.getenv("SHELLY_RELAY_INDEX", "0"))  # "switch:0"
DRIVER_ID = os.getenv("SHELLY_DRIVER_ID", "io0")
DRIVER_ENABLED = os.getenv("SHELLY_ENABLED", "true").lower() not in ("0", "false", "no")

# ---------------------------------------------------------------------------
# Meter classification (static, consumed at startup only)
# ---------------------------------------------------------------------------
METER_TYPE = os.getenv("METER_TYPE", "CONSUMPTION_METERED")
METER_PHASE = os.getenv("METER_PHASE", "L1")

# ---------------------------------------------------------------------------
# Cycle timing
# ---------------------------------------------------------------------------
CYCLE_INTERVAL_SECONDS = 1.0

# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
HTTP_CONNECT_TIMEOUT = 2     # seconds
HTTP_READ_TIMEOUT = 3        # seconds
HTTP_TIMEOUT = (HTTP_CONNECT_TIMEOUT, HTTP_READ_TIMEOUT)

# ---------------------------------------------------------------------------
# Web status / actuation surface
# ---------------------------------------------------------------------------
WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
WEB_PORT = int(os.getenv("WEB_PORT", "5000"))

# ---------------------------------------------------------------------------
# Alerting (minutes of continuous communication failure before alerting)
# ---------------------------------------------------------------------------
ALERT_AFTER_MINUTES = 5.0
