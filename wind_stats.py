"""Rolling wind statistics over a short and a long time window."""

import math
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from itertools import islice
from typing import Optional

from decoders import WindSample, normalize_degrees

DEFAULT_SAMPLE_RATE = 2       # samples per second
DEFAULT_SHORT_WINDOW = 120    # seconds
DEFAULT_LONG_WINDOW = 600     # seconds
DEFAULT_GUST_WINDOW = 3       # seconds


@dataclass
class HistoryEntry:
    sample: WindSample
    gust: float


@dataclass
class WindowSummary:
    avg_speed: float
    vector_magnitude: float
    vector_direction_deg: float
    gust_speed: float
    gust_direction_deg: float
    gust_timestamp: datetime
    sample_count: int


@dataclass
class WindReading:
    sample: WindSample
    gust: float
    short: WindowSummary
    long: WindowSummary

    def to_payload(self):
        data = {
            'wind_ok': self.sample.status_ok,
            'wind_dir_deg': self.sample.direction_deg,
            'wind_speed_mps': self.sample.speed_mps,
        }
        for name, summary in (('short', self.short), ('long', self.long)):
            data[f'wind_avg_speed_{name}'] = summary.avg_speed
            data[f'wind_vector_mag_{name}'] = summary.vector_magnitude
            data[f'wind_vector_dir_{name}'] = summary.vector_direction_deg
            data[f'wind_gust_{name}'] = summary.gust_speed
            data[f'wind_gust_dir_{name}'] = summary.gust_direction_deg
            data[f'wind_gust_ts_{name}'] = summary.gust_timestamp
        return data


def summarize(entries):
    """
    Summarize a non-empty sequence of history entries

    Averages are taken over the entries actually present, so a window that
    has not filled up yet is not biased towards zero. Direction is the
    circular mean obtained from the averaged wind vector.
    """
    count = len(entries)

    avg_speed = sum(e.sample.speed_mps for e in entries) / count

    vectors = [e.sample.vector for e in entries]
    avg_x = sum(v[0] for v in vectors) / count
    avg_y = sum(v[1] for v in vectors) / count

    magnitude = math.sqrt(avg_x * avg_x + avg_y * avg_y)
    direction = normalize_degrees(math.degrees(math.atan2(avg_y, avg_x)))

    # First occurrence wins ties, i.e. the earliest gust is reported
    gust_entry = entries[0]
    for entry in entries[1:]:
        if entry.gust > gust_entry.gust:
            gust_entry = entry

    return WindowSummary(
        avg_speed=avg_speed,
        vector_magnitude=magnitude,
        vector_direction_deg=direction,
        gust_speed=gust_entry.gust,
        gust_direction_deg=gust_entry.sample.direction_deg,
        gust_timestamp=gust_entry.sample.timestamp,
        sample_count=count,
    )


class WindStatistics:
    """
    Streaming reducer for wind samples

    History holds (sample, gust) pairs for the long window; the short window
    is a suffix of it. Each sample's gust value is the mean speed of the
    preceding ``gust_window`` seconds of samples, which keeps single-sample
    spikes from showing up as gusts.
    """

    def __init__(self, sample_rate=DEFAULT_SAMPLE_RATE, short_window=DEFAULT_SHORT_WINDOW,
                 long_window=DEFAULT_LONG_WINDOW, gust_window=DEFAULT_GUST_WINDOW):
        if sample_rate <= 0:
            raise ValueError("sample_rate must be positive")
        if not 0 < short_window <= long_window:
            raise ValueError("windows must satisfy 0 < short_window <= long_window")

        self.sample_rate = sample_rate
        self.short_size = max(1, int(short_window * sample_rate))
        self.long_size = max(1, int(long_window * sample_rate))
        self.gust_size = max(1, int(gust_window * sample_rate))

        self.history = deque(maxlen=self.long_size)
        self.last_reading: Optional[WindReading] = None

    @property
    def capacity(self):
        return self.long_size

    def reset(self):
        self.history.clear()
        self.last_reading = None

    def _gust_for(self, sample):
        if len(self.history) < self.gust_size:
            return sample.speed_mps

        recent = islice(self.history, len(self.history) - self.gust_size, None)
        return sum(e.sample.speed_mps for e in recent) / self.gust_size

    def window(self, size):
        """The most recent ``size`` history entries, oldest first"""
        start = max(0, len(self.history) - size)
        return list(islice(self.history, start, None))

    def add_sample(self, sample) -> WindReading:
        gust = self._gust_for(sample)
        self.history.append(HistoryEntry(sample=sample, gust=gust))

        reading = WindReading(
            sample=sample,
            gust=gust,
            short=summarize(self.window(self.short_size)),
            long=summarize(self.window(self.long_size)),
        )
        self.last_reading = reading
        return reading
