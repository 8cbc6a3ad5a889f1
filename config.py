"""Command line and environment configuration for the wind teller plugin."""

import argparse
import os
from dataclasses import dataclass

from line_buffer import DEFAULT_MAX_BUFFER
from wind_stats import (DEFAULT_GUST_WINDOW, DEFAULT_LONG_WINDOW,
                        DEFAULT_SAMPLE_RATE, DEFAULT_SHORT_WINDOW)

ENV_PREFIX = "WIND_TELLER_"


def get_env_or_default(env_var, default, convert_type=None):
    """Get value from environment variable or return default

    Args:
        env_var: Environment variable name
        default: Default value if env var not set
        convert_type: Optional type conversion function (int, float, bool)

    Returns:
        Value from environment or default
    """
    value = os.getenv(env_var)
    if value is None:
        return default

    if convert_type is None:
        return value
    elif convert_type == bool:
        return value.lower() in ('true', '1', 'yes', 'on')
    else:
        return convert_type(value)


def _env(name, default, convert_type=None):
    return get_env_or_default(ENV_PREFIX + name, default, convert_type)


def parse_args(argv=None):
    """Parse command line arguments

    All arguments can also be set via environment variables with the
    WIND_TELLER_ prefix, e.g. --port via WIND_TELLER_PORT. Command line
    arguments take precedence over environment variables.
    """
    parser = argparse.ArgumentParser(
        description="Weather station plugin for Waggle - decodes NMEA wind and pressure sentences from a serial transducer"
    )
    parser.add_argument(
        "--port",
        default=_env("PORT", "/dev/ttyUSB0"),
        help="Serial port device (env: WIND_TELLER_PORT)"
    )
    parser.add_argument(
        "--baudrate",
        type=int,
        default=_env("BAUDRATE", 4800, int),
        help="Serial port baud rate (default: 4800, env: WIND_TELLER_BAUDRATE)"
    )
    parser.add_argument(
        "--station-id",
        default=_env("STATION_ID", "WS"),
        help="Station identifier used as routing key (default: WS, env: WIND_TELLER_STATION_ID)"
    )
    parser.add_argument(
        "--station-height",
        type=float,
        default=_env("STATION_HEIGHT", 0.0, float),
        help="Barometer height above sea level in meters (default: 0, env: WIND_TELLER_STATION_HEIGHT)"
    )
    parser.add_argument(
        "--qfe-cal-offset",
        type=float,
        default=_env("QFE_CAL_OFFSET", 0.0, float),
        help="Pressure calibration offset in Pa, applied before scale (default: 0, env: WIND_TELLER_QFE_CAL_OFFSET)"
    )
    parser.add_argument(
        "--qfe-cal-scale",
        type=float,
        default=_env("QFE_CAL_SCALE", 1.0, float),
        help="Pressure calibration scale factor (default: 1.0, env: WIND_TELLER_QFE_CAL_SCALE)"
    )
    parser.add_argument(
        "--sample-rate",
        type=float,
        default=_env("SAMPLE_RATE", DEFAULT_SAMPLE_RATE, float),
        help=f"Wind sentences per second sent by the transducer (default: {DEFAULT_SAMPLE_RATE}, env: WIND_TELLER_SAMPLE_RATE)"
    )
    parser.add_argument(
        "--short-window",
        type=float,
        default=_env("SHORT_WINDOW", DEFAULT_SHORT_WINDOW, float),
        help=f"Short statistics window in seconds (default: {DEFAULT_SHORT_WINDOW}, env: WIND_TELLER_SHORT_WINDOW)"
    )
    parser.add_argument(
        "--long-window",
        type=float,
        default=_env("LONG_WINDOW", DEFAULT_LONG_WINDOW, float),
        help=f"Long statistics window in seconds (default: {DEFAULT_LONG_WINDOW}, env: WIND_TELLER_LONG_WINDOW)"
    )
    parser.add_argument(
        "--gust-window",
        type=float,
        default=_env("GUST_WINDOW", DEFAULT_GUST_WINDOW, float),
        help=f"Gust smoothing burst in seconds (default: {DEFAULT_GUST_WINDOW}, env: WIND_TELLER_GUST_WINDOW)"
    )
    parser.add_argument(
        "--max-line-buffer",
        type=int,
        default=_env("MAX_LINE_BUFFER", DEFAULT_MAX_BUFFER, int),
        help=f"Bytes buffered without a newline before resynchronizing (default: {DEFAULT_MAX_BUFFER}, env: WIND_TELLER_MAX_LINE_BUFFER)"
    )
    parser.add_argument(
        "--topic-prefix",
        default=_env("TOPIC_PREFIX", "env.wx"),
        help="Prefix of published measurement names (default: env.wx, env: WIND_TELLER_TOPIC_PREFIX)"
    )
    parser.add_argument(
        "--scope",
        default=_env("SCOPE", "beehive"),
        choices=["all", "node", "beehive"],
        help="Waggle publish scope (default: beehive, env: WIND_TELLER_SCOPE)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env("DEBUG", False, bool),
        help="Enable debug output (env: WIND_TELLER_DEBUG)"
    )
    parser.add_argument(
        "--debug-data",
        action="store_true",
        default=_env("DEBUG_DATA", False, bool),
        help="Log decoded data (env: WIND_TELLER_DEBUG_DATA)"
    )
    parser.add_argument(
        "--debug-nmea",
        action="store_true",
        default=_env("DEBUG_NMEA", False, bool),
        help="Log NMEA messages (env: WIND_TELLER_DEBUG_NMEA)"
    )
    parser.add_argument(
        "--debug-serial",
        action="store_true",
        default=_env("DEBUG_SERIAL", False, bool),
        help="Log serial lines (env: WIND_TELLER_DEBUG_SERIAL)"
    )
    parser.add_argument(
        "--debug-serial-raw",
        action="store_true",
        default=_env("DEBUG_SERIAL_RAW", False, bool),
        help="Log serial bytes (env: WIND_TELLER_DEBUG_SERIAL_RAW)"
    )
    parser.add_argument(
        "--web-server",
        action="store_true",
        default=_env("WEB_SERVER", False, bool),
        help="Enable mini web server for monitoring (env: WIND_TELLER_WEB_SERVER)"
    )
    parser.add_argument(
        "--web-port",
        type=int,
        default=_env("WEB_PORT", 8080, int),
        help="Web server port (default: 8080, env: WIND_TELLER_WEB_PORT)"
    )
    return parser.parse_args(argv)


@dataclass
class CollectorConfig:
    station_id: str = "WS"
    station_height: float = 0.0
    qfe_cal_offset: float = 0.0
    qfe_cal_scale: float = 1.0
    sample_rate: float = DEFAULT_SAMPLE_RATE
    short_window: float = DEFAULT_SHORT_WINDOW
    long_window: float = DEFAULT_LONG_WINDOW
    gust_window: float = DEFAULT_GUST_WINDOW
    max_line_buffer: int = DEFAULT_MAX_BUFFER
    debug_data: bool = False
    debug_nmea: bool = False
    debug_serial: bool = False
    debug_serial_raw: bool = False

    @classmethod
    def from_args(cls, args):
        return cls(
            station_id=args.station_id,
            station_height=args.station_height,
            qfe_cal_offset=args.qfe_cal_offset,
            qfe_cal_scale=args.qfe_cal_scale,
            sample_rate=args.sample_rate,
            short_window=args.short_window,
            long_window=args.long_window,
            gust_window=args.gust_window,
            max_line_buffer=args.max_line_buffer,
            debug_data=args.debug_data,
            debug_nmea=args.debug_nmea,
            debug_serial=args.debug_serial,
            debug_serial_raw=args.debug_serial_raw,
        )

    @property
    def any_debug(self):
        return self.debug_data or self.debug_nmea or self.debug_serial or self.debug_serial_raw
