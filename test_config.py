"""Tests for command line and environment configuration."""

from config import CollectorConfig, get_env_or_default, parse_args


class TestGetEnvOrDefault:
    def test_default_when_unset(self, monkeypatch):
        monkeypatch.delenv("WIND_TELLER_TEST", raising=False)
        assert get_env_or_default("WIND_TELLER_TEST", 5, int) == 5

    def test_conversion(self, monkeypatch):
        monkeypatch.setenv("WIND_TELLER_TEST", "7")
        assert get_env_or_default("WIND_TELLER_TEST", 5, int) == 7

    def test_bool(self, monkeypatch):
        monkeypatch.setenv("WIND_TELLER_TEST", "Yes")
        assert get_env_or_default("WIND_TELLER_TEST", False, bool) is True
        monkeypatch.setenv("WIND_TELLER_TEST", "0")
        assert get_env_or_default("WIND_TELLER_TEST", True, bool) is False


class TestParseArgs:
    def test_defaults(self, monkeypatch):
        for name in ("PORT", "BAUDRATE", "STATION_HEIGHT", "DEBUG_NMEA"):
            monkeypatch.delenv(f"WIND_TELLER_{name}", raising=False)
        args = parse_args([])
        assert args.port == "/dev/ttyUSB0"
        assert args.baudrate == 4800
        assert args.station_height == 0.0
        assert args.debug_nmea is False
        assert args.web_server is False

    def test_environment_overrides_default(self, monkeypatch):
        monkeypatch.setenv("WIND_TELLER_STATION_HEIGHT", "123.5")
        monkeypatch.setenv("WIND_TELLER_DEBUG_NMEA", "true")
        args = parse_args([])
        assert args.station_height == 123.5
        assert args.debug_nmea is True

    def test_command_line_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("WIND_TELLER_PORT", "/dev/ttyS1")
        args = parse_args(["--port", "/dev/ttyS2", "--debug-serial-raw"])
        assert args.port == "/dev/ttyS2"
        assert args.debug_serial_raw is True


class TestCollectorConfig:
    def test_from_args(self):
        args = parse_args(["--station-id", "LIPZ", "--qfe-cal-offset", "12", "--qfe-cal-scale", "1.002",
                           "--short-window", "60", "--debug-data"])
        config = CollectorConfig.from_args(args)
        assert config.station_id == "LIPZ"
        assert config.qfe_cal_offset == 12.0
        assert config.qfe_cal_scale == 1.002
        assert config.short_window == 60.0
        assert config.debug_data is True
        assert config.any_debug

    def test_no_debug_by_default(self):
        assert not CollectorConfig().any_debug
