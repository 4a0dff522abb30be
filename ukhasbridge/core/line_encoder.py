"""Conversion of received packets into InfluxDB line-protocol records.

Output for identical input is byte-identical: data fields keep their sentence
order and every field of a given kind is numbered from 1 in order of
appearance, so ``T1T2,3`` always becomes ``temperature_1_1``,
``temperature_2_1`` and ``temperature_2_2``.

String values are quoted but embedded quotes are not escaped.
"""
import calendar
import re
from datetime import datetime
from typing import Dict, List, Tuple

from ukhasbridge.core.constants import PACKET_MEASUREMENT, RATE_MEASUREMENT, TIMESTAMP_FORMAT
from ukhasbridge.core.errors import BadTimestamp, EncodeError, MissingPath
from ukhasbridge.core.packet import (
    NUMERIC_KINDS, DataField, Envelope, FieldKind, Packet,
)
from ukhasbridge.core.schema import SchemaProfile

NS_PER_SEC = 1_000_000_000

_TIMESTAMP_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})\.(\d{1,9})Z")


def index_fields(data: List[DataField]) -> List[Tuple[DataField, int]]:
    """Pair every data field with its 1-based index among fields of the same kind."""
    seen: Dict[FieldKind, int] = {}
    out = []
    for df in data:
        seen[df.kind] = seen.get(df.kind, 0) + 1
        out.append((df, seen[df.kind]))
    return out


def format_float(value: float) -> str:
    return repr(float(value))


def _numeric_pairs(df, index: int) -> List[str]:
    return [f"{df.kind.value}_{index}_{sub}={format_float(v)}"
            for sub, v in enumerate(df.values, start=1)]


def _location_pairs(df, index: int) -> List[str]:
    out = []
    if df.latlng is not None:
        lat, lon = df.latlng
        out.append(f"location_{index}_latitude={format_float(lat)}")
        out.append(f"location_{index}_longitude={format_float(lon)}")
    if df.alt is not None:
        out.append(f"location_{index}_altitude={format_float(df.alt)}")
    return out


def _windspeed_pairs(df, index: int) -> List[str]:
    out = []
    if df.speed is not None:
        out.append(f"windspeed_{index}_speed={format_float(df.speed)}")
    if df.bearing is not None:
        out.append(f"windspeed_{index}_bearing={format_float(df.bearing)}")
    return out


def _zombie_pairs(df, index: int) -> List[str]:
    return [f"zombie_{index}={int(df.mode)}i"]


def _comment_pairs(df, index: int) -> List[str]:
    return [f'comment_{index}="{df.text}"']


FIELD_WRITERS = {kind: _numeric_pairs for kind in NUMERIC_KINDS}
FIELD_WRITERS.update({
    FieldKind.LOCATION: _location_pairs,
    FieldKind.WINDSPEED: _windspeed_pairs,
    FieldKind.ZOMBIE: _zombie_pairs,
    FieldKind.COMMENT: _comment_pairs,
})


def field_pairs(df: DataField, index: int) -> List[str]:
    writer = FIELD_WRITERS.get(getattr(df, "kind", None))
    if writer is None:
        raise EncodeError(f"Unsupported data field: {df!r}")
    return writer(df, index)


def timestamp_to_ns(ts: str) -> int:
    m = _TIMESTAMP_RE.fullmatch(ts)
    if not m:
        raise BadTimestamp(f"Cannot parse timestamp '{ts}', expected {TIMESTAMP_FORMAT}")
    *parts, fraction = m.groups()
    try:
        dt = datetime(*(int(p) for p in parts))
    except ValueError as e:
        raise BadTimestamp(f"Cannot parse timestamp '{ts}': {e}") from e
    return calendar.timegm(dt.timetuple()) * NS_PER_SEC + int(fraction.ljust(9, "0"))


def rate_line(count: int) -> str:
    return f"{RATE_MEASUREMENT} rate={int(count)}i"


class LineEncoder:
    """Encodes (Envelope, Packet) pairs for one schema profile."""

    def __init__(self, profile: SchemaProfile):
        self.profile = profile

    def encode(self, envelope: Envelope, packet: Packet) -> str:
        if not packet.path:
            raise MissingPath("No origin node name in path")
        head = (f"{PACKET_MEASUREMENT},gateway={envelope.gateway},"
                f"node={packet.path[0]},pathend={packet.path[-1]}")

        fields = [f"gw_rssi={envelope.rssi}i"]
        if self.profile.has_age:
            if envelope.age is None:
                raise EncodeError("Envelope has no age but the schema requires one")
            fields.append(f"gw_age={envelope.age}i")
        for df, index in index_fields(packet.data):
            fields.extend(field_pairs(df, index))
        if self.profile.packet_comment and packet.comment is not None:
            fields.append(f'message="{packet.comment}"')
        if self.profile.include_sentence:
            fields.append(f'sentence="{envelope.sentence}"')

        ts = timestamp_to_ns(envelope.timestamp)
        return f"{head} {','.join(fields)} {ts}"
