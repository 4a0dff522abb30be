"""Frame extraction from the gateway byte stream.

Two disciplines are supported, chosen by the schema profile:
- newline: one frame per line, trailing CR removed, blank lines skipped
- object: a frame ends at (and includes) the first '}' byte; whitespace
  before a frame is skipped
"""
import socket

from ukhasbridge.core.constants import DEFAULT_MAX_FRAME_BYTES, RECV_CHUNK_BYTES
from ukhasbridge.core.errors import TransportFault
from ukhasbridge.core.schema import FRAMING_NEWLINE, FRAMING_OBJECT

_DELIMITERS = {
    FRAMING_NEWLINE: b"\n",
    FRAMING_OBJECT: b"}",
}


class FrameReader:
    def __init__(self, sock, framing: str, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
                 chunk_size: int = RECV_CHUNK_BYTES):
        if framing not in _DELIMITERS:
            raise ValueError(f"Unknown framing: {framing}")
        self._sock = sock
        self.framing = framing
        self._delim = _DELIMITERS[framing]
        self.max_frame_bytes = max_frame_bytes
        self.chunk_size = chunk_size
        self._buf = bytearray()

    def read_frame(self) -> bytes:
        """Block until a complete frame is buffered; raise TransportFault otherwise."""
        while True:
            frame = self._take()
            if frame is not None:
                return frame
            if len(self._buf) > self.max_frame_bytes:
                size = len(self._buf)
                self._buf.clear()
                raise TransportFault(
                    f"Invalid framing: {size} bytes without a {self._delim!r} delimiter "
                    f"(limit {self.max_frame_bytes})")
            self._fill()

    def _take(self):
        while True:
            idx = self._buf.find(self._delim)
            if idx == -1:
                return None
            if self.framing == FRAMING_NEWLINE:
                frame = bytes(self._buf[:idx]).rstrip(b"\r")
                del self._buf[:idx + 1]
                if not frame.strip():
                    continue
                return frame
            frame = bytes(self._buf[:idx + 1]).lstrip()
            del self._buf[:idx + 1]
            return frame

    def _fill(self):
        try:
            chunk = self._sock.recv(self.chunk_size)
        except socket.timeout as e:
            raise TransportFault(f"Read timed out: {e}") from e
        except OSError as e:
            raise TransportFault(f"Error reading from socket: {e}") from e
        if not chunk:
            raise TransportFault("Connection closed by peer")
        self._buf.extend(chunk)
