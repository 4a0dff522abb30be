import json

import pytest

from ukhasbridge.core.decoder import MessageDecoder
from ukhasbridge.core.errors import DecodeError, TransportFault
from ukhasbridge.core.schema import PROFILES


def frame(**fields):
    data = {"nn": "GW1", "p": "3aT1[AB]", "r": -80, "t": "2021-05-01T12:00:00.500Z"}
    data.update(fields)
    return json.dumps(data).encode("utf-8")


def test_v1_decodes_envelope():
    env = MessageDecoder(PROFILES["v1"]).decode(frame(a=0))
    assert env.gateway == "GW1"
    assert env.sentence == "3aT1[AB]"
    assert env.rssi == -80
    assert env.age == 0
    assert env.timestamp == "2021-05-01T12:00:00.500Z"


def test_v1_requires_age():
    with pytest.raises(DecodeError, match="age"):
        MessageDecoder(PROFILES["v1"]).decode(frame())


def test_v2_does_not_need_age():
    env = MessageDecoder(PROFILES["v2"]).decode(frame())
    assert env.age is None


def test_optional_identifiers_and_unknown_keys():
    env = MessageDecoder(PROFILES["v2"]).decode(frame(i=7, h=2, extra="x"))
    assert env.seq == 7
    assert env.hops == 2


@pytest.mark.parametrize("raw", [
    b"not json",
    b"[1, 2, 3]",
    b"",
    frame(r="-80"),
    frame(r=-80.5),
    frame(nn=None),
])
def test_bad_messages_are_decode_errors(raw):
    with pytest.raises(DecodeError):
        MessageDecoder(PROFILES["v2"]).decode(raw)


def test_missing_required_field():
    raw = json.dumps({"nn": "GW1", "r": -80, "t": "2021-05-01T12:00:00.500Z"}).encode()
    with pytest.raises(DecodeError, match="p: Field required"):
        MessageDecoder(PROFILES["v2"]).decode(raw)


def test_invalid_utf8_is_transport_fault_in_strict_profile():
    with pytest.raises(TransportFault):
        MessageDecoder(PROFILES["v1"]).decode(b'{"nn": "\xff\xfe"}')


def test_invalid_utf8_is_decode_error_in_lenient_profile():
    with pytest.raises(DecodeError):
        MessageDecoder(PROFILES["v2"]).decode(b'{"nn": "\xff\xfe"}')
