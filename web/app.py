"""Flask status and actuation API for the Shelly relay driver.

Runs alongside the cycle loop. Requests never talk to the device directly:
POST /api/relay only queues a desired value, the next write phase sends it.
"""

import logging

from flask import Flask, request, jsonify

log = logging.getLogger(__name__)


def create_app(driver):
    app = Flask(__name__)

    # -----------------------------------------------------------------------
    # API: current state
    # -----------------------------------------------------------------------

    @app.route("/api/state")
    def api_state():
        snapshot = driver.snapshot()
        if snapshot is None:
            return jsonify({"driver_id": driver.driver_id, "enabled": False})

        state = snapshot.to_dict()
        state["driver_id"] = driver.driver_id
        state["enabled"] = True
        state["summary"] = snapshot.summary()
        return jsonify(state)

    # -----------------------------------------------------------------------
    # API: relay actuation
    # -----------------------------------------------------------------------

    @app.route("/api/relay", methods=["POST"])
    def api_set_relay():
        data = request.get_json(silent=True) or {}
        on = data.get("on")
        if not isinstance(on, bool):
            return jsonify({"error": "'on' must be true or false"}), 400

        try:
            driver.request_relay(on)
        except RuntimeError as e:
            return jsonify({"error": str(e)}), 409

        log.info("%s: relay %s requested via API", driver.driver_id, "on" if on else "off")
        return jsonify({"ok": True, "pending": on}), 202

    return app
