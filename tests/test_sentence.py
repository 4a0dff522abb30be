import pytest

from ukhasbridge.core.errors import SentenceParseError
from ukhasbridge.core.packet import Comment, FieldKind, Location, Numeric, WindSpeed, Zombie
from ukhasbridge.core.sentence import parse


def test_parse_numeric_fields_and_path():
    p = parse("3aT12.5,11.0V3.3[AB1,GW2]")
    assert p.repeat == 3
    assert p.sequence == "a"
    assert p.data == [
        Numeric(FieldKind.TEMPERATURE, [12.5, 11.0]),
        Numeric(FieldKind.VOLTAGE, [3.3]),
    ]
    assert p.path == ["AB1", "GW2"]
    assert p.comment is None


def test_parse_all_numeric_letters():
    p = parse("0aT1I2H3P4S5R-6C7X8[A]")
    kinds = [df.kind for df in p.data]
    assert kinds == [
        FieldKind.TEMPERATURE, FieldKind.CURRENT, FieldKind.HUMIDITY, FieldKind.PRESSURE,
        FieldKind.SUN, FieldKind.RSSI, FieldKind.COUNT, FieldKind.CUSTOM,
    ]
    assert p.data[5].values == [-6.0]


def test_parse_negative_and_leading_dot_numbers():
    p = parse("1bT-1.5,.5[A]")
    assert p.data[0].values == [-1.5, 0.5]


def test_parse_location_variants():
    assert parse("2bL51.5,-0.1,20[AB]").data == [Location(latlng=(51.5, -0.1), alt=20.0)]
    assert parse("2bL51.5,-0.1[AB]").data == [Location(latlng=(51.5, -0.1))]
    assert parse("2bL,,20[AB]").data == [Location(alt=20.0)]


def test_parse_wind_and_zombie():
    p = parse("0aW12.5,180W,90Z1[X1]")
    assert p.data == [
        WindSpeed(speed=12.5, bearing=180.0),
        WindSpeed(speed=None, bearing=90.0),
        Zombie(1),
    ]


def test_comment_on_packet_by_default():
    p = parse("3aT1:hello world[AB]")
    assert p.comment == "hello world"
    assert p.data == [Numeric(FieldKind.TEMPERATURE, [1.0])]


def test_inline_comment_becomes_data_field():
    p = parse("3aT1:hello world[AB]", inline_comment=True)
    assert p.comment is None
    assert p.data[-1] == Comment("hello world")


def test_empty_path_is_accepted_by_parser():
    assert parse("3aT1[]").path == []


def test_trailing_newline_is_ignored():
    assert parse("3aT1[A]\r\n").path == ["A"]


@pytest.mark.parametrize("sentence", ["", "3", "3aT12", "3aT12[AB", "3a:hi", "3a"])
def test_incomplete_sentences(sentence):
    with pytest.raises(SentenceParseError) as exc:
        parse(sentence)
    assert exc.value.kind == SentenceParseError.INCOMPLETE


@pytest.mark.parametrize("sentence", [
    "xaT1[A]",
    "3AT1[A]",
    "3aQ1[A]",
    "3aT1[A]x",
    "3aT1..2[A]",
    "3aT[A]",
    "3aT1[A,]",
    "3aL51.5[A]",
    "3aL51.5,,3[A]",
    "3aW1,2,3[A]",
    "3aZx[A]",
    "3a12[A]",
])
def test_malformed_sentences(sentence):
    with pytest.raises(SentenceParseError) as exc:
        parse(sentence)
    assert exc.value.kind == SentenceParseError.MALFORMED


def test_parse_error_reports_offset():
    with pytest.raises(SentenceParseError) as exc:
        parse("3aT1Q2[A]")
    assert exc.value.position == 4
    assert "unknown field type 'Q'" in str(exc.value)
