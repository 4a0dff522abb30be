from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr


class Envelope(BaseModel):
    """One JSON message from the gateway feed, wrapping a raw sentence."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    gateway: StrictStr = Field(alias="nn")
    sentence: StrictStr = Field(alias="p")
    rssi: StrictInt = Field(alias="r")
    timestamp: StrictStr = Field(alias="t")
    age: Optional[StrictInt] = Field(default=None, alias="a")
    seq: Optional[StrictInt] = Field(default=None, alias="i")
    hops: Optional[StrictInt] = Field(default=None, alias="h")


class FieldKind(str, Enum):
    TEMPERATURE = "temperature"
    VOLTAGE = "voltage"
    CURRENT = "current"
    HUMIDITY = "humidity"
    PRESSURE = "pressure"
    SUN = "sun"
    RSSI = "rssi"
    COUNT = "count"
    CUSTOM = "custom"
    LOCATION = "location"
    WINDSPEED = "windspeed"
    ZOMBIE = "zombie"
    COMMENT = "comment"


NUMERIC_KINDS = (
    FieldKind.TEMPERATURE,
    FieldKind.VOLTAGE,
    FieldKind.CURRENT,
    FieldKind.HUMIDITY,
    FieldKind.PRESSURE,
    FieldKind.SUN,
    FieldKind.RSSI,
    FieldKind.COUNT,
    FieldKind.CUSTOM,
)


@dataclass
class Numeric:
    kind: FieldKind
    values: List[float]


@dataclass
class Location:
    latlng: Optional[Tuple[float, float]] = None
    alt: Optional[float] = None
    kind: FieldKind = field(default=FieldKind.LOCATION, init=False)


@dataclass
class WindSpeed:
    speed: Optional[float] = None
    bearing: Optional[float] = None
    kind: FieldKind = field(default=FieldKind.WINDSPEED, init=False)


@dataclass
class Zombie:
    mode: int
    kind: FieldKind = field(default=FieldKind.ZOMBIE, init=False)


@dataclass
class Comment:
    text: str
    kind: FieldKind = field(default=FieldKind.COMMENT, init=False)


DataField = Union[Numeric, Location, WindSpeed, Zombie, Comment]


@dataclass
class Packet:
    path: List[str]              # path[0] is the origin node, path[-1] the last relay
    data: List[DataField] = field(default_factory=list)
    comment: Optional[str] = None
    repeat: int = 0
    sequence: str = "a"
