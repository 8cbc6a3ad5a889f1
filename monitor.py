"""Small Flask app exposing the collector's latest readings for monitoring."""

import logging
from time import time

from flask import Flask, jsonify


def create_app(collector):
    app = Flask(__name__)

    @app.route("/api/data")
    def api_data():
        """Latest wind and pressure readings plus counters"""
        data = collector.snapshot()
        if data["wind_data"] is None and data["baro_data"] is None:
            return jsonify({"error": "No data received yet", "status": data["status"]}), 503

        return jsonify({
            "updated_at": int(time()),
            "station_id": collector.config.station_id,
            **_jsonable(data),
        })

    @app.route("/api/status")
    def api_status():
        data = collector.snapshot()
        return jsonify({
            "status": data["status"],
            "timestamp": _jsonable_value(data["timestamp"]),
            "total_readings": data["total_readings"],
            "error_count": data["error_count"],
            "checksum_errors": data["checksum_errors"],
            "decode_errors": data["decode_errors"],
            "overflows": data["overflows"],
        })

    return app


def _jsonable_value(value):
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _jsonable(data):
    out = {}
    for key, value in data.items():
        if isinstance(value, dict):
            out[key] = _jsonable(value)
        else:
            out[key] = _jsonable_value(value)
    return out


def start_web_server(collector, port, logger=None):
    """Run the monitoring web server; meant to be the target of a daemon thread"""
    logger = logger or logging.getLogger(__name__)
    try:
        app = create_app(collector)
        logger.info(f"Web server starting on http://0.0.0.0:{port}")
        logger.info(f"JSON API available at: http://localhost:{port}/api/data")
        app.run(host="0.0.0.0", port=port, use_reloader=False)
    except Exception as e:
        logger.error(f"Web server error: {e}")
