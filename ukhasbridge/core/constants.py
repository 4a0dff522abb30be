DEFAULT_RETRY_DELAY_SECS = 10.0
DEFAULT_READ_TIMEOUT_SECS = 10.0
DEFAULT_MAX_FRAME_BYTES = 65536
RECV_CHUNK_BYTES = 4096
PACKET_MEASUREMENT = "packet"
RATE_MEASUREMENT = "packets_per_minute"
TIMESTAMP_FORMAT = "YYYY-MM-DDTHH:MM:SS.fffZ"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
ENV_PREFIX = "UKHASBRIDGE_"
