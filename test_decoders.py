"""Tests for wind and barometric sentence decoding."""

import math
from datetime import datetime, timezone

import pytest

from decoders import BaroDecoder, decode_wind, pressure_altitude, sea_level_pressure
from errors import DecodeError, UnknownSpeedUnit

TS = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestDecodeWind:
    @pytest.mark.parametrize("speed,unit,expected", [
        ("12.0", "N", 12 * 1854 / 3600),
        ("10", "K", 2.7777777778),
        ("36", "S", 16.09),
        ("7.5", "M", 7.5),
    ])
    def test_unit_conversion(self, speed, unit, expected):
        sample = decode_wind(["045.0", "R", speed, unit, "A"], TS)
        assert sample.speed_mps == pytest.approx(expected, abs=1e-6)

    def test_knots_example(self):
        sample = decode_wind(["045.0", "R", "12.0", "N", "A"], TS)
        assert sample.speed_mps == pytest.approx(6.1766666667, abs=1e-6)

    def test_fields(self):
        sample = decode_wind(["045.0", "R", "10.0", "N", "A"], TS)
        assert sample.direction_deg == 45.0
        assert sample.status_ok is True
        assert sample.timestamp == TS

    def test_status_not_ok_still_decoded(self):
        sample = decode_wind(["180", "R", "3", "M", "V"], TS)
        assert sample.status_ok is False
        assert sample.speed_mps == 3.0

    def test_direction_normalized(self):
        assert decode_wind(["360.0", "R", "1", "M", "A"], TS).direction_deg == 0.0
        assert decode_wind(["-90", "R", "1", "M", "A"], TS).direction_deg == 270.0

    def test_unknown_unit_rejected(self):
        with pytest.raises(UnknownSpeedUnit) as excinfo:
            decode_wind(["045.0", "R", "10.0", "X", "A"], TS)
        assert excinfo.value.unit == "X"

    def test_unknown_unit_is_decode_error(self):
        with pytest.raises(DecodeError):
            decode_wind(["045.0", "R", "10.0", "", "A"], TS)

    @pytest.mark.parametrize("fields", [
        ["045.0", "R", "10.0", "N"],
        ["", "R", "10.0", "N", "A"],
        ["045.0", "R", "fast", "N", "A"],
        ["045.0", "R", "-1", "M", "A"],
        ["045.0", "R", "nan", "M", "A"],
        ["045.0", "R", "inf", "M", "A"],
        ["045.0", "R", "1e400", "M", "A"],
        ["inf", "R", "1", "M", "A"],
        ["nan", "R", "1", "M", "A"],
    ])
    def test_bad_fields(self, fields):
        with pytest.raises(DecodeError):
            decode_wind(fields, TS)

    def test_vector(self):
        sample = decode_wind(["90", "R", "2", "M", "A"], TS)
        x, y = sample.vector
        assert x == pytest.approx(0.0, abs=1e-12)
        assert y == pytest.approx(2.0)


class TestBarometricFormulas:
    def test_standard_pressure_is_near_sea_level(self):
        assert pressure_altitude(101325) == pytest.approx(0.0, abs=5.0)

    def test_qnh_when_station_at_pressure_altitude(self):
        assert sea_level_pressure(0.0, 0.0) == pytest.approx(101325)
        assert sea_level_pressure(350.0, 350.0) == pytest.approx(101325)

    def test_lower_pressure_is_higher_altitude(self):
        assert pressure_altitude(90000) > pressure_altitude(100000)

    def test_qnh_higher_than_qfe_above_sea_level(self):
        qfe = 95000.0
        hisa = pressure_altitude(qfe)
        qnh = sea_level_pressure(hisa, 500.0)
        assert qnh > qfe
        assert hisa > 500.0


class TestBaroDecoder:
    def test_decodes_pressure_and_temperature(self):
        decoder = BaroDecoder(station_height=100.0)
        sample = decoder.decode(["29.9", "I", "1.013", "B", "21.5", "C"], TS)

        assert sample.pressure_pa == pytest.approx(101300.0)
        assert sample.temperature_c == 21.5
        assert sample.station_height_m == 100.0
        assert sample.isa_altitude_m == pytest.approx(pressure_altitude(101300.0))
        assert sample.qnh_pa == pytest.approx(sea_level_pressure(sample.isa_altitude_m, 100.0))

    def test_calibration_offset_then_scale(self):
        decoder = BaroDecoder(cal_offset=50.0, cal_scale=1.01)
        sample = decoder.decode(["1.0", "B"], TS)
        assert sample.pressure_pa == pytest.approx((100000 + 50.0) * 1.01)

    def test_missing_pressure_reuses_previous(self):
        decoder = BaroDecoder()
        first = decoder.decode(["1.013", "B", "20.0", "C"], TS)
        second = decoder.decode(["18.0", "C"], TS)

        assert second.pressure_pa == first.pressure_pa
        assert second.temperature_c == 18.0

    def test_temperature_not_retained(self):
        decoder = BaroDecoder()
        decoder.decode(["1.013", "B", "20.0", "C"], TS)
        assert decoder.decode(["1.012", "B"], TS).temperature_c is None

    def test_no_pressure_yet(self):
        with pytest.raises(DecodeError):
            BaroDecoder().decode(["20.0", "C"], TS)

    def test_unknown_pairs_and_odd_tail_ignored(self):
        decoder = BaroDecoder()
        sample = decoder.decode(["45", "H", "1.0", "B", "12"], TS)
        assert sample.pressure_pa == pytest.approx(100000.0)
        assert sample.temperature_c is None

    def test_empty_values_ignored(self):
        decoder = BaroDecoder()
        decoder.decode(["1.0", "B"], TS)
        sample = decoder.decode(["", "B", "", "C"], TS)
        assert sample.pressure_pa == pytest.approx(100000.0)
        assert sample.temperature_c is None

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf", "1e400"])
    def test_non_finite_pressure_ignored(self, value):
        decoder = BaroDecoder()
        decoder.decode(["1.0", "B"], TS)
        sample = decoder.decode([value, "B", "20.0", "C"], TS)
        assert sample.pressure_pa == pytest.approx(100000.0)
        assert math.isfinite(sample.qnh_pa)

    def test_non_finite_pressure_is_not_a_first_reading(self):
        decoder = BaroDecoder()
        with pytest.raises(DecodeError):
            decoder.decode(["nan", "B", "20.0", "C"], TS)
        assert decoder.qfe is None

    def test_non_finite_temperature_ignored(self):
        sample = BaroDecoder().decode(["1.0", "B", "nan", "C"], TS)
        assert sample.temperature_c is None

    def test_payload_fields(self):
        sample = BaroDecoder().decode(["1.0", "B", "5", "C"], TS)
        assert set(sample.to_payload()) == {
            "pressure_pa", "station_height_m", "isa_altitude_m", "qnh_pa", "temperature_c",
        }
        assert not math.isnan(sample.to_payload()["qnh_pa"])
