import argparse
import logging
import sys
import time

from ukhasbridge.config.loader import BridgeConfig, load_config
from ukhasbridge.core.constants import LOG_DATE_FORMAT, LOG_FORMAT
from ukhasbridge.core.errors import ConfigError
from ukhasbridge.core.rate import RateCounter
from ukhasbridge.core.supervisor import ConnectionSupervisor
from ukhasbridge.routers.influx import InfluxPublisher
from ukhasbridge.transports.tcp import TcpFeed


def configure_logging(logfile: str, level: int = logging.INFO):
    """Log to stdout and to ``logfile`` with UTC timestamps."""
    formatter = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    formatter.converter = time.gmtime
    try:
        file_handler = logging.FileHandler(logfile)
    except OSError as e:
        raise ConfigError(f"Error opening log file '{logfile}': {e}") from e
    root = logging.getLogger()
    root.setLevel(level)
    for handler in (logging.StreamHandler(sys.stdout), file_handler):
        handler.setFormatter(formatter)
        root.addHandler(handler)


def build_supervisor(cfg: BridgeConfig) -> ConnectionSupervisor:
    profile = cfg.ukhasnet.profile
    feed = TcpFeed(
        name="ukhasnet",
        address=cfg.ukhasnet.socket,
        framing=profile.framing,
        read_timeout=cfg.ukhasnet.read_timeout,
        max_frame_bytes=cfg.ukhasnet.max_frame_bytes,
    )
    publisher = InfluxPublisher(
        name="influxdb",
        url=cfg.influxdb.url,
        username=cfg.influxdb.username,
        password=cfg.influxdb.password,
        timeout=cfg.influxdb.timeout,
    )
    return ConnectionSupervisor(feed, publisher, profile,
                                rate=RateCounter(),
                                retry_delay=cfg.ukhasnet.retry_delay)


def main(argv=None):
    p = argparse.ArgumentParser("ukhasbridge",
                                description="Forward UKHASnet gateway packets to InfluxDB")
    p.add_argument("--config", "-c", required=True, help="Path to YAML config")
    args = p.parse_args(argv)

    # config and log sink problems are fatal before the pipeline starts
    try:
        cfg = load_config(args.config)
        configure_logging(cfg.logfile)
    except ConfigError as e:
        raise SystemExit(f"[ukhasbridge] {e}") from e

    supervisor = build_supervisor(cfg)
    try:
        supervisor.run_forever()
    except KeyboardInterrupt:
        logging.info("[ukhasbridge] interrupted, exiting")
    finally:
        supervisor.feed.close()
        supervisor.publisher.close()


if __name__ == "__main__":
    main()
