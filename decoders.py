"""Turn sentence fields into wind and barometric samples."""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from errors import DecodeError, UnknownSpeedUnit

# Exact factors, matching the transducer documentation
SPEED_UNIT_TO_MPS = {
    'N': 1854 / 3600.0,   # knots
    'K': 1000 / 3600.0,   # km/h
    'M': 1.0,             # m/s
    'S': 1609 / 3600.0,   # mph
}

PRESSURE_MARKER = 'B'
TEMPERATURE_MARKER = 'C'

# Standard atmosphere constants for the altimeter formula
ISA_SEA_LEVEL_PA = 101325
ISA_LAPSE_RATE = 0.0065
ISA_SEA_LEVEL_K = 288.15


@dataclass
class WindSample:
    timestamp: datetime
    speed_mps: float
    direction_deg: float
    status_ok: bool

    @property
    def vector(self):
        theta = math.radians(self.direction_deg)
        return (self.speed_mps * math.cos(theta), self.speed_mps * math.sin(theta))


@dataclass
class BaroSample:
    timestamp: datetime
    pressure_pa: float
    temperature_c: Optional[float]
    station_height_m: float
    isa_altitude_m: float
    qnh_pa: float

    def to_payload(self):
        return {
            'pressure_pa': self.pressure_pa,
            'station_height_m': self.station_height_m,
            'isa_altitude_m': self.isa_altitude_m,
            'qnh_pa': self.qnh_pa,
            'temperature_c': self.temperature_c,
        }


def normalize_degrees(angle):
    """Fold an angle into [0, 360)"""
    angle = angle % 360.0
    # -1e-17 % 360 rounds to 360.0
    return 0.0 if angle >= 360.0 else angle


def _parse_finite(value):
    """Float value of a field, or None when empty, malformed, nan or infinite"""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_float(value, what):
    number = _parse_finite(value)
    if number is None:
        raise DecodeError(f"invalid {what} value {value!r}")
    return number


def decode_wind(fields, timestamp):
    """
    Decode a wind velocity sentence

    Fields: direction, relative flag, speed, speed unit, status ('A' = OK).
    A sample with status other than 'A' is still returned, flagged not OK.

    Raises:
        UnknownSpeedUnit: the unit code is not one of N, K, M, S
        DecodeError: missing fields or non-numeric values
    """
    if len(fields) < 5:
        raise DecodeError(f"wind sentence has {len(fields)} fields, expected 5")

    wind_dir, _relative, wind_speed, wind_speed_unit, status = fields[:5]

    factor = SPEED_UNIT_TO_MPS.get(wind_speed_unit)
    if factor is None:
        raise UnknownSpeedUnit(wind_speed_unit)

    speed_mps = _to_float(wind_speed, "wind speed") * factor
    if speed_mps < 0:
        raise DecodeError(f"negative wind speed {wind_speed!r}")

    direction_deg = normalize_degrees(_to_float(wind_dir, "wind direction"))

    return WindSample(
        timestamp=timestamp,
        speed_mps=speed_mps,
        direction_deg=direction_deg,
        status_ok=(status == 'A'),
    )


def pressure_altitude(qfe_pa):
    """ISA pressure altitude in meters; the formula works in hPa"""
    return 44330.77 - (11880.32 * ((qfe_pa / 100) ** 0.190263))


def sea_level_pressure(isa_altitude_m, station_height_m):
    """QNH in Pa from the pressure altitude and the station height"""
    return ISA_SEA_LEVEL_PA * ((1 - (ISA_LAPSE_RATE * ((isa_altitude_m - station_height_m) / ISA_SEA_LEVEL_K))) ** 5.25588)


class BaroDecoder:
    """
    Decodes environmental sentences made of (value, type) pairs

    Station pressure is retained between sentences: a frame without a
    pressure pair reuses the last one seen, since the transducer may split
    its fields across successive frames.
    """

    def __init__(self, station_height=0.0, cal_offset=0.0, cal_scale=1.0):
        self.station_height = station_height
        self.cal_offset = cal_offset
        self.cal_scale = cal_scale
        self.qfe = None

    def decode(self, fields, timestamp):
        temperature = None

        for i in range(len(fields) // 2):
            value, type_code = fields[i * 2], fields[i * 2 + 1]

            if type_code == PRESSURE_MARKER:
                raw = _parse_finite(value)
                if raw is None:
                    continue
                self.qfe = (raw * 100000 + self.cal_offset) * self.cal_scale
            elif type_code == TEMPERATURE_MARKER:
                parsed = _parse_finite(value)
                if parsed is not None:
                    temperature = parsed

        if self.qfe is None:
            raise DecodeError("no station pressure received yet")
        if self.qfe <= 0:
            raise DecodeError(f"non-positive station pressure {self.qfe}")

        hisa = pressure_altitude(self.qfe)
        if ISA_LAPSE_RATE * (hisa - self.station_height) >= ISA_SEA_LEVEL_K:
            raise DecodeError(f"pressure altitude {hisa:.0f} m out of range for QNH")
        qnh = sea_level_pressure(hisa, self.station_height)

        return BaroSample(
            timestamp=timestamp,
            pressure_pa=self.qfe,
            temperature_c=temperature,
            station_height_m=self.station_height,
            isa_altitude_m=hisa,
            qnh_pa=qnh,
        )
