import logging
import socket
from typing import Optional, Tuple

from ukhasbridge.core.constants import DEFAULT_MAX_FRAME_BYTES, DEFAULT_READ_TIMEOUT_SECS
from ukhasbridge.core.errors import TransportFault
from ukhasbridge.transports.framing import FrameReader


def parse_tcp_address(address: str) -> Tuple[str, int]:
    # accepts 'host:port' or 'tcp://host:port'
    if address.startswith("tcp://"):
        address = address[len("tcp://"):]
    if ":" not in address:
        raise ValueError(f"Invalid socket address '{address}', expected host:port")
    host, port = address.rsplit(":", 1)
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


class TcpFeed:
    """TCP connection to the gateway feed.

    ``open()`` connects, applies the read timeout and returns a FrameReader
    over the new socket; ``close()`` drops the socket. Any failure to open is
    reported as a TransportFault.
    """

    def __init__(self, name: str, address: str, framing: str,
                 read_timeout: float = DEFAULT_READ_TIMEOUT_SECS,
                 max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
                 connect_timeout: Optional[float] = None):
        self.name = name
        self.address = address
        self.framing = framing
        self.read_timeout = read_timeout
        self.max_frame_bytes = max_frame_bytes
        self.connect_timeout = connect_timeout
        self._sock = None

    def _open_connection(self):
        host, port = parse_tcp_address(self.address)
        return socket.create_connection((host, port), timeout=self.connect_timeout)

    def open(self) -> FrameReader:
        self.close()
        logging.info(f"[tcp:{self.name}] connecting to {self.address}")
        try:
            sock = self._open_connection()
        except (OSError, ValueError) as e:
            raise TransportFault(f"Error connecting to socket '{self.address}': {e}") from e
        try:
            sock.settimeout(self.read_timeout)
        except OSError as e:
            sock.close()
            raise TransportFault(f"Error setting socket timeout: {e}") from e
        self._sock = sock
        logging.info(f"[tcp:{self.name}] connected to {self.address}")
        return FrameReader(sock, self.framing, max_frame_bytes=self.max_frame_bytes)

    def close(self):
        if self._sock is None:
            return
        try:
            self._sock.close()
        except OSError as e:
            logging.debug(f"[tcp:{self.name}] error closing socket: {e}")
        self._sock = None
