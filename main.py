"""Shelly relay sync: fixed-period control cycle.

Each cycle:
  1. Read phase: poll Shelly.GetStatus, publish relay state, power and energy
  2. Write phase: send the pending relay command if it differs from the last read
  3. Log the status line and raise a one-time alert on a persistent outage

Desired relay values arrive through the web surface (web/app.py), which runs in
a background thread and only touches the driver's pending-write slot.
"""

import argparse
import logging
import sys
import threading
import time

from dotenv import load_dotenv

load_dotenv()

import config
from engine import ShellyRelayMeter
from state import MeterType, SinglePhase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
log = logging.getLogger(__name__)


def build_driver():
    """Create the driver from config, hard failing on a bad meter classification."""
    try:
        meter_type = MeterType[config.METER_TYPE.upper()]
    except KeyError:
        log.error("Unknown METER_TYPE %r (expected one of: %s)", config.METER_TYPE,
                  ", ".join(m.name for m in MeterType))
        sys.exit(1)
    try:
        phase = SinglePhase[config.METER_PHASE.upper()]
    except KeyError:
        log.error("Unknown METER_PHASE %r (expected L1, L2 or L3)", config.METER_PHASE)
        sys.exit(1)

    return ShellyRelayMeter(
        config.DRIVER_ID,
        config.SHELLY_IP,
        relay_index=config.SHELLY_RELAY_INDEX,
        meter_type=meter_type,
        phase=phase,
    )


def run_cycle(driver):
    """Run one cycle: read phase strictly before write phase."""
    driver.on_read_tick()
    driver.on_write_tick()

    if not driver.enabled:
        return

    log.info("%s: %s", driver.driver_id, driver.debug_log())

    health = driver.state.health
    if health.should_alert():
        log.error("%s: no successful exchange with %s for %.0f minutes (last error: %s)",
                  driver.driver_id, driver.ip, health.minutes_failing(), health.last_error)
        health.mark_alerted()


def start_web(driver, port):
    """Serve the status/actuation API in a daemon thread."""
    from web.app import create_app

    app = create_app(driver)
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": config.WEB_HOST, "port": port, "use_reloader": False},
        name="web",
        daemon=True,
    )
    thread.start()
    log.info("Web API listening on %s:%d", config.WEB_HOST, port)
    return thread


def main(interval=config.CYCLE_INTERVAL_SECONDS, web=True, port=config.WEB_PORT, once=False):
    log.info("Shelly relay sync starting")

    driver = build_driver()
    if config.DRIVER_ENABLED:
        driver.enable()
    else:
        log.warning("%s: disabled in configuration, cycles will be no-ops", driver.driver_id)

    if web:
        start_web(driver, port)

    log.info("Entering main loop (interval: %.1fs)", interval)
    try:
        while True:
            cycle_start = time.time()

            try:
                run_cycle(driver)
            except Exception:
                log.exception("Unhandled error in cycle")

            if once:
                break

            # Sleep for remainder of interval
            elapsed = time.time() - cycle_start
            sleep_time = max(0, interval - elapsed)
            if sleep_time > 0:
                time.sleep(sleep_time)
    finally:
        driver.disable()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Shelly relay sync")
    parser.add_argument(
        "--interval",
        type=float,
        default=config.CYCLE_INTERVAL_SECONDS,
        help=f"Cycle period in seconds (default: {config.CYCLE_INTERVAL_SECONDS})",
    )
    parser.add_argument("--no-web", action="store_true", help="Do not start the web API")
    parser.add_argument("--port", type=int, default=config.WEB_PORT, help="Web API port")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    args = parser.parse_args()

    try:
        main(interval=args.interval, web=not args.no_web, port=args.port, once=args.once)
    except KeyboardInterrupt:
        log.info("Shutting down")
