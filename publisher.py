"""Publishes readings through the Waggle plugin interface."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

MISSING_VALUE = -9999.0

FIELD_UNITS = {
    'wind_ok': 'bool',
    'wind_dir_deg': 'degrees',
    'wind_speed_mps': 'm/s',
    'pressure_pa': 'Pa',
    'station_height_m': 'm',
    'isa_altitude_m': 'm',
    'qnh_pa': 'Pa',
    'temperature_c': 'degC',
}
for _window in ('short', 'long'):
    FIELD_UNITS.update({
        f'wind_avg_speed_{_window}': 'm/s',
        f'wind_vector_mag_{_window}': 'm/s',
        f'wind_vector_dir_{_window}': 'degrees',
        f'wind_gust_{_window}': 'm/s',
        f'wind_gust_dir_{_window}': 'degrees',
        f'wind_gust_ts_{_window}': 'iso8601',
    })


@dataclass
class Reading:
    station_id: str
    timestamp: datetime
    data: Dict[str, Any] = field(default_factory=dict)


def to_nanoseconds(ts):
    return round(ts.timestamp() * 1_000_000) * 1000


def encode_value(value):
    """Map payload values onto types the message bus accepts"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class ReadingPublisher:
    """
    Publishes every field of a reading as its own measurement

    Measurement names are ``{prefix}.{field}``; the station id travels in
    the metadata and acts as the routing key. Delivery is best effort: a
    failing publish is logged and the remaining fields are still sent;
    a reading only counts as published when every field went through.
    """

    def __init__(self, plugin, station_id="WS", prefix="env.wx", scope="beehive", sensor=None):
        self.plugin = plugin
        self.station_id = station_id
        self.prefix = prefix
        self.scope = scope
        self.sensor = sensor
        self.published = 0
        self.logger = logging.getLogger(__name__)

    def make_reading(self, timestamp, data):
        return Reading(station_id=self.station_id, timestamp=timestamp, data=dict(data))

    def publish(self, reading):
        timestamp = to_nanoseconds(reading.timestamp)
        failed = []

        for name, value in reading.data.items():
            if value is None:
                continue

            meta = {
                "station_id": reading.station_id,
                "units": FIELD_UNITS.get(name, ""),
                "missing": str(MISSING_VALUE),
            }
            if self.sensor:
                meta["sensor"] = self.sensor

            try:
                self.plugin.publish(f"{self.prefix}.{name}", encode_value(value),
                                    timestamp=timestamp,
                                    scope=self.scope,
                                    meta=meta)
            except Exception as e:
                self.logger.error(f"Failed to publish {self.prefix}.{name}: {e}")
                failed.append(name)

        if failed:
            return False
        self.published += 1
        return True
