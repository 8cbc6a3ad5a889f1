#!/usr/bin/env python3

import logging
import selectors
import sys
import threading
from contextlib import contextmanager

import serial
from waggle.plugin import Plugin

from collector import StationCollector
from config import CollectorConfig, parse_args
from monitor import start_web_server
from publisher import ReadingPublisher

SENSOR_NAME = "nmea-wind-transducer"

logger = logging.getLogger(__name__)


@contextmanager
def serial_connection(port, baudrate):
    """Context manager for a non-blocking 8N1 serial connection"""
    try:
        ser = serial.Serial(
            port=port,
            baudrate=baudrate,
            timeout=0,
            bytesize=serial.EIGHTBITS,
            parity=serial.PARITY_NONE,
            stopbits=serial.STOPBITS_ONE
        )
    except serial.SerialException as e:
        logger.error(f"Failed to connect to serial port {port}: {e}")
        raise

    logger.info(f"Connected to serial port {port} at {baudrate} baud")
    try:
        yield ser
    finally:
        if ser.is_open:
            ser.close()
            logger.info(f"Closed serial port {port}")


def read_available(device):
    """Read whatever the device has buffered, at least one byte"""
    return device.read(device.in_waiting or 1)


def run(device, collector):
    """
    Feed the collector from the device until the device goes away

    Every readiness event is followed by one read and a full decode pass.
    An empty read on a ready device means it was unplugged or failed; the
    device is unregistered and the loop ends rather than retrying.
    """
    selector = selectors.DefaultSelector()
    selector.register(device, selectors.EVENT_READ)
    collector.mark("running")

    try:
        while True:
            for key, _events in selector.select():
                try:
                    data = read_available(key.fileobj)
                except serial.SerialException as e:
                    logger.error(f"Serial communication error: {e}")
                    data = b""

                if not data:
                    logger.error("Serial device returned no data, stopping")
                    selector.unregister(key.fileobj)
                    collector.mark("disconnected")
                    return

                collector.feed(data)
    finally:
        selector.close()


def main(argv=None):
    args = parse_args(argv)
    config = CollectorConfig.from_args(args)

    logging.basicConfig(
        level=logging.DEBUG if (args.debug or config.any_debug) else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger.info(f"Starting weather station plugin on port {args.port}")
    logger.info(f"Station {config.station_id} at {config.station_height} m, "
                f"QFE calibration offset {config.qfe_cal_offset} Pa, scale {config.qfe_cal_scale}")
    logger.info(f"Wind windows: short {config.short_window}s, long {config.long_window}s, "
                f"gust {config.gust_window}s at {config.sample_rate} samples/s")

    with Plugin() as plugin:
        publisher = ReadingPublisher(plugin,
                                     station_id=config.station_id,
                                     prefix=args.topic_prefix,
                                     scope=args.scope,
                                     sensor=SENSOR_NAME)
        collector = StationCollector(config, publisher)

        if args.web_server:
            web_thread = threading.Thread(
                target=start_web_server,
                args=(collector, args.web_port, logger),
                daemon=True
            )
            web_thread.start()
            logger.info(f"Web monitoring enabled on port {args.web_port}")

        try:
            with serial_connection(args.port, args.baudrate) as ser:
                logger.info("Waiting for data from transducer...")
                run(ser, collector)
        except serial.SerialException:
            return 1
        except KeyboardInterrupt:
            logger.info("Weather station plugin stopped by user")
            return 0

        stats = collector.snapshot()
        logger.info(f"Processed {stats['total_readings']} readings "
                    f"({stats['checksum_errors']} checksum errors, {stats['decode_errors']} decode errors)")
        return 1


if __name__ == "__main__":
    sys.exit(main())
