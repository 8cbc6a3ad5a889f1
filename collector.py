"""Per-station pipeline: bytes in, published weather readings out."""

import logging
import threading
from datetime import datetime, timezone

from decoders import BaroDecoder, decode_wind
from errors import FramingOverflow
from line_buffer import LineBuffer
from nmea import SentenceDispatcher
from wind_stats import WindStatistics

WIND_TAG = "IIMWV"
ENVIRONMENT_TAG = "WIMDA"


def utc_now():
    return datetime.now(timezone.utc)


class StationCollector:
    """
    Owns the framing, decoding and statistics state of one serial device

    All mutation happens in ``feed``, called from the single loop that reads
    the device. ``snapshot`` may be called from other threads.
    """

    def __init__(self, config, publisher, clock=utc_now):
        self.config = config
        self.publisher = publisher
        self.clock = clock
        self.logger = logging.getLogger(__name__)

        self.line_buffer = LineBuffer(self.receive_line, max_buffer=config.max_line_buffer)
        self.dispatcher = SentenceDispatcher(debug=config.debug_nmea)
        self.dispatcher.register(WIND_TAG, self.handle_wind)
        self.dispatcher.register(ENVIRONMENT_TAG, self.handle_environment)

        self.wind_stats = WindStatistics(
            sample_rate=config.sample_rate,
            short_window=config.short_window,
            long_window=config.long_window,
            gust_window=config.gust_window,
        )
        self.baro = BaroDecoder(
            station_height=config.station_height,
            cal_offset=config.qfe_cal_offset,
            cal_scale=config.qfe_cal_scale,
        )

        self.overflows = 0
        self.total_readings = 0

        self._lock = threading.Lock()
        self._latest = {
            "status": "starting",
            "timestamp": None,
            "raw_line": None,
            "wind_data": None,
            "baro_data": None,
        }

    def feed(self, chunk):
        """Run one framing/decoding/publishing pass over a chunk of serial bytes"""
        if self.config.debug_serial_raw:
            self.logger.debug(f"Serial raw ({len(chunk)} bytes): {chunk!r}")

        try:
            self.line_buffer.push(chunk)
        except FramingOverflow as e:
            self.overflows += 1
            self.logger.warning(f"{e}, discarding buffered bytes")

    def receive_line(self, line):
        if self.config.debug_serial:
            self.logger.debug(f"Serial line: {line}")

        with self._lock:
            self._latest["raw_line"] = line

        self.dispatcher.dispatch(line)

    def handle_wind(self, sentence):
        sample = decode_wind(sentence.fields, self.clock())
        reading = self.wind_stats.add_sample(sample)

        if self.config.debug_data:
            self.logger.debug(
                f"Wind {sample.speed_mps:.1f} m/s from {sample.direction_deg:.0f}° "
                f"avg_short={reading.short.avg_speed:.1f} "
                f"vec_short={reading.short.vector_magnitude:.1f}@{reading.short.vector_direction_deg:.0f} "
                f"gst_short={reading.short.gust_speed:.1f} from {reading.short.gust_direction_deg:.1f} at {reading.short.gust_timestamp} "
                f"avg_long={reading.long.avg_speed:.1f} "
                f"vec_long={reading.long.vector_magnitude:.1f}@{reading.long.vector_direction_deg:.0f} "
                f"gst_long={reading.long.gust_speed:.1f} from {reading.long.gust_direction_deg:.1f} at {reading.long.gust_timestamp}"
            )

        self._publish(sample.timestamp, reading.to_payload(), "wind_data")

    def handle_environment(self, sentence):
        sample = self.baro.decode(sentence.fields, self.clock())

        if self.config.debug_data:
            temperature = "--" if sample.temperature_c is None else f"{sample.temperature_c:0.1f}"
            self.logger.debug(f"QFE={sample.pressure_pa / 100:0.1f} hPa "
                              f"QNH={sample.qnh_pa / 100:0.1f} hPa, "
                              f"Temperature {temperature}")

        self._publish(sample.timestamp, sample.to_payload(), "baro_data")

    def _publish(self, timestamp, data, kind):
        reading = self.publisher.make_reading(timestamp, data)
        self.publisher.publish(reading)

        with self._lock:
            self.total_readings += 1
            self._latest["status"] = "running"
            self._latest["timestamp"] = timestamp
            self._latest[kind] = reading.data

    def mark(self, status):
        with self._lock:
            self._latest["status"] = status

    def snapshot(self):
        """Copy of the latest readings and counters, safe to call from any thread"""
        with self._lock:
            data = dict(self._latest)
            data["total_readings"] = self.total_readings
        data["checksum_errors"] = self.dispatcher.checksum_errors
        data["decode_errors"] = self.dispatcher.decode_errors
        data["ignored_lines"] = self.dispatcher.ignored
        data["overflows"] = self.overflows
        data["error_count"] = (data["checksum_errors"] + data["decode_errors"] + data["overflows"])
        return data
