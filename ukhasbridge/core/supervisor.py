"""Connection supervisor.

Owns the connect/retry state machine for the gateway feed and runs every frame
through decode -> parse -> encode -> publish -> meter.

    DISCONNECTED -> CONNECTING -> CONNECTED -> (transport fault) -> DISCONNECTED

Connect failures and transport faults wait ``retry_delay`` seconds and try
again, forever. Message faults drop the frame and keep the connection.
"""
import logging
import time
from enum import Enum
from typing import Callable

from ukhasbridge.core.constants import DEFAULT_RETRY_DELAY_SECS
from ukhasbridge.core.decoder import MessageDecoder
from ukhasbridge.core.errors import MessageFault, PublishError, TransportFault
from ukhasbridge.core.line_encoder import LineEncoder
from ukhasbridge.core.rate import RateCounter
from ukhasbridge.core.schema import SchemaProfile
from ukhasbridge.core.sentence import parse


class ConnState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class ConnectionSupervisor:
    def __init__(self, feed, publisher, profile: SchemaProfile,
                 rate: RateCounter = None,
                 retry_delay: float = DEFAULT_RETRY_DELAY_SECS,
                 parser: Callable = parse,
                 sleep: Callable[[float], None] = time.sleep):
        self.feed = feed              # open() -> FrameReader, close()
        self.publisher = publisher    # publish(line) raises PublishError
        self.profile = profile
        self.rate = rate if rate is not None else RateCounter()
        self.retry_delay = retry_delay
        self.parser = parser
        self._sleep = sleep
        self.decoder = MessageDecoder(profile)
        self.encoder = LineEncoder(profile)
        self.state = ConnState.DISCONNECTED
        self._reader = None
        # diagnostics
        self.connect_attempts = 0
        self.frames_published = 0
        self.frames_dropped = 0

    # ---- lifecycle ----
    def run_forever(self):
        logging.info(f"[supervisor] starting with schema {self.profile.name}, retry delay {self.retry_delay:g}s")
        while True:
            self.step()

    def step(self):
        """Perform one state transition."""
        if self.state is ConnState.CONNECTED:
            self._read_one()
        else:
            self._connect()

    def _connect(self):
        self.state = ConnState.CONNECTING
        self.connect_attempts += 1
        try:
            self._reader = self.feed.open()
        except TransportFault as e:
            logging.error(f"[supervisor] {e}, retrying in {self.retry_delay:g}s")
            self.state = ConnState.DISCONNECTED
            self._sleep(self.retry_delay)
            return
        self.state = ConnState.CONNECTED

    def _disconnect(self, reason):
        logging.error(f"[supervisor] connection lost: {reason}; reconnecting in {self.retry_delay:g}s")
        self.feed.close()
        self._reader = None
        self.state = ConnState.DISCONNECTED
        self._sleep(self.retry_delay)

    def _read_one(self):
        try:
            frame = self._reader.read_frame()
            self.process_frame(frame)
        except TransportFault as e:
            self._disconnect(e)
        except Exception as e:
            logging.exception("[supervisor] unexpected error in frame pipeline")
            self._disconnect(e)

    # ---- pipeline ----
    def process_frame(self, frame: bytes) -> bool:
        """Run one frame end to end. Returns True when the record was published.

        Message faults are logged and swallowed; TransportFault propagates.
        """
        try:
            envelope = self.decoder.decode(frame)
            logging.info(f"Received packet [{envelope.timestamp}] RSSI={envelope.rssi} "
                         f"AGE={envelope.age} GW={envelope.gateway} {envelope.sentence}")
            packet = self.parser(envelope.sentence, inline_comment=self.profile.inline_comment)
            line = self.encoder.encode(envelope, packet)
            self.publisher.publish(line)
        except MessageFault as e:
            self.frames_dropped += 1
            logging.error(f"[supervisor] dropping frame: {e} (frame={frame!r})")
            return False
        self.frames_published += 1
        self._meter()
        return True

    def _meter(self):
        line = self.rate.record_publish()
        if line is None:
            return
        logging.info(f"[supervisor] {line}")
        try:
            self.publisher.publish(line)
        except PublishError as e:
            logging.warning(f"[supervisor] could not publish packet rate: {e}")
