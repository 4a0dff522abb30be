"""Frame decoder.

Turns one frame from the gateway feed into an Envelope. How an undecodable
byte sequence is treated depends on the schema profile: strict profiles treat
it as a broken stream (TransportFault), the others drop the frame.
"""
import json

from pydantic import ValidationError

from ukhasbridge.core.errors import DecodeError, TransportFault
from ukhasbridge.core.packet import Envelope
from ukhasbridge.core.schema import SchemaProfile


class MessageDecoder:
    def __init__(self, profile: SchemaProfile, encoding: str = "utf-8"):
        self.profile = profile
        self.encoding = encoding

    def decode(self, frame: bytes) -> Envelope:
        try:
            text = frame.decode(self.encoding)
        except UnicodeDecodeError as e:
            if self.profile.strict_encoding:
                raise TransportFault(f"Stream is not valid {self.encoding}: {e}") from e
            raise DecodeError(f"Frame is not valid {self.encoding}: {e}") from e

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Error parsing message JSON: {e}") from e
        if not isinstance(data, dict):
            raise DecodeError(f"Message JSON is not an object: {type(data).__name__}")

        try:
            envelope = Envelope(**data)
        except ValidationError as e:
            raise DecodeError(f"Message is missing or has mistyped fields: {_summarize(e)}") from e

        if self.profile.has_age and envelope.age is None:
            raise DecodeError("Message is missing required field 'a' (age)")
        return envelope


def _summarize(err: ValidationError) -> str:
    parts = []
    for item in err.errors():
        loc = ".".join(str(p) for p in item.get("loc", ()))
        parts.append(f"{loc}: {item.get('msg')}")
    return "; ".join(parts)
