"""UKHASnet sentence parser.

A sentence looks like ``3aT12.5,11.0V3.3L51.5,-0.1,20:hello[AB1,GW2]``: a
repeat digit, a lowercase sequence letter, zero or more data fields, an
optional ``:comment`` and the bracketed node path. Each data field is a single
uppercase letter followed by its comma-separated values.

Errors distinguish sentences that stop short (``incomplete``) from sentences
that contain something the grammar does not allow (``malformed``).
"""
import re
from typing import List, Optional

from ukhasbridge.core.errors import SentenceParseError
from ukhasbridge.core.packet import (
    Comment, DataField, FieldKind, Location, Numeric, Packet, WindSpeed, Zombie,
)

NUMERIC_LETTERS = {
    "T": FieldKind.TEMPERATURE,
    "V": FieldKind.VOLTAGE,
    "I": FieldKind.CURRENT,
    "H": FieldKind.HUMIDITY,
    "P": FieldKind.PRESSURE,
    "S": FieldKind.SUN,
    "R": FieldKind.RSSI,
    "C": FieldKind.COUNT,
    "X": FieldKind.CUSTOM,
}
VALUE_CHARS = frozenset("0123456789.,-")

_NUMBER_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")
_INT_RE = re.compile(r"\d+")
_NODE_RE = re.compile(r"[A-Za-z0-9_-]+")


def parse(sentence: str, inline_comment: bool = False) -> Packet:
    """Parse one sentence into a Packet.

    With ``inline_comment`` the comment is appended to ``Packet.data`` as a
    Comment field instead of being stored on ``Packet.comment``.
    Raises SentenceParseError.
    """
    return _SentenceParser(sentence, inline_comment).parse()


class _SentenceParser:
    def __init__(self, text: str, inline_comment: bool):
        self.text = text.rstrip("\r\n")
        self.inline_comment = inline_comment
        self.pos = 0

    def _malformed(self, message: str, position: int = None):
        return SentenceParseError(SentenceParseError.MALFORMED, message, position)

    def _incomplete(self, message: str):
        return SentenceParseError(SentenceParseError.INCOMPLETE, message, len(self.text))

    def parse(self) -> Packet:
        text = self.text
        if len(text) < 2:
            raise self._incomplete("missing repeat count or sequence letter")
        if text[0] not in "0123456789":
            raise self._malformed(f"repeat count must be a digit, got '{text[0]}'", 0)
        if not ("a" <= text[1] <= "z"):
            raise self._malformed(f"sequence must be a lowercase letter, got '{text[1]}'", 1)
        self.pos = 2

        data: List[DataField] = []
        while True:
            if self.pos >= len(text):
                raise self._incomplete("missing path")
            if text[self.pos] in ":[":
                break
            data.append(self._field())

        comment: Optional[str] = None
        if text[self.pos] == ":":
            end = text.find("[", self.pos)
            if end == -1:
                raise self._incomplete("comment is not followed by a path")
            comment = text[self.pos + 1:end]
            self.pos = end

        path = self._path()
        if comment is not None and self.inline_comment:
            data.append(Comment(comment))
            comment = None
        return Packet(path=path, data=data, comment=comment,
                      repeat=int(text[0]), sequence=text[1])

    def _field(self) -> DataField:
        text = self.text
        start = self.pos
        letter = text[start]
        end = start + 1
        while end < len(text) and text[end] in VALUE_CHARS:
            end += 1
        raw = text[start + 1:end]
        self.pos = end

        if letter in NUMERIC_LETTERS:
            if not raw:
                raise self._malformed(f"field '{letter}' has no values", start)
            return Numeric(NUMERIC_LETTERS[letter], [self._number(p, start) for p in raw.split(",")])
        if letter == "L":
            return self._location(raw, start)
        if letter == "W":
            return self._wind(raw, start)
        if letter == "Z":
            if not _INT_RE.fullmatch(raw):
                raise self._malformed(f"zombie flag must be an integer, got '{raw}'", start)
            return Zombie(int(raw))
        raise self._malformed(f"unknown field type '{letter}'", start)

    def _number(self, raw: str, position: int) -> float:
        if not _NUMBER_RE.fullmatch(raw):
            raise self._malformed(f"invalid number '{raw}'", position)
        return float(raw)

    def _optional(self, raw: str, position: int) -> Optional[float]:
        return self._number(raw, position) if raw else None

    def _location(self, raw: str, position: int) -> Location:
        if not raw:
            return Location()
        parts = raw.split(",")
        if len(parts) not in (2, 3):
            raise self._malformed(f"location needs 'lat,lon[,alt]', got '{raw}'", position)
        lat = self._optional(parts[0], position)
        lon = self._optional(parts[1], position)
        if (lat is None) != (lon is None):
            raise self._malformed("location has only one coordinate", position)
        alt = self._optional(parts[2], position) if len(parts) == 3 else None
        return Location(latlng=(lat, lon) if lat is not None else None, alt=alt)

    def _wind(self, raw: str, position: int) -> WindSpeed:
        parts = raw.split(",") if raw else []
        if len(parts) > 2:
            raise self._malformed(f"wind needs 'speed[,bearing]', got '{raw}'", position)
        speed = self._optional(parts[0], position) if parts else None
        bearing = self._optional(parts[1], position) if len(parts) == 2 else None
        return WindSpeed(speed=speed, bearing=bearing)

    def _path(self) -> List[str]:
        text = self.text
        start = self.pos
        end = text.find("]", start)
        if end == -1:
            raise self._incomplete("path is not terminated by ']'")
        if end != len(text) - 1:
            raise self._malformed("unexpected characters after path", end + 1)
        inner = text[start + 1:end]
        if not inner:
            return []
        nodes = inner.split(",")
        for node in nodes:
            if not _NODE_RE.fullmatch(node):
                raise self._malformed(f"invalid node name '{node}'", start)
        return nodes
