"""Exception hierarchy for the collector.

Transport faults force a reconnect; message faults drop a single frame and
keep the connection. ConfigError is the only fatal class and is raised before
the pipeline starts.
"""


class BridgeError(Exception):
    pass


class ConfigError(BridgeError):
    pass


class TransportFault(BridgeError):
    pass


class MessageFault(BridgeError):
    pass


class DecodeError(MessageFault):
    pass


class SentenceParseError(MessageFault):
    MALFORMED = "malformed"
    INCOMPLETE = "incomplete"

    def __init__(self, kind: str, message: str, position: int = None):
        self.kind = kind
        self.position = position
        if position is not None:
            message = f"{message} at offset {position}"
        super().__init__(f"{kind} sentence: {message}")


class EncodeError(MessageFault):
    pass


class MissingPath(EncodeError):
    pass


class BadTimestamp(EncodeError):
    pass


class PublishError(MessageFault):
    pass
