"""Ingress schema profiles.

Gateway deployments disagree on the envelope shape and on how frames are
delimited. Each known variant is a named profile picked in configuration;
profiles are never guessed from traffic and never combined.
"""
from dataclasses import dataclass
from typing import Dict

FRAMING_NEWLINE = "newline"
FRAMING_OBJECT = "object"


@dataclass(frozen=True)
class SchemaProfile:
    name: str
    framing: str                 # FRAMING_NEWLINE or FRAMING_OBJECT
    has_age: bool                # envelope carries "a", emitted as gw_age
    include_sentence: bool       # raw sentence emitted as a string field
    packet_comment: bool         # packet comment emitted as "message"
    inline_comment: bool         # parser places the comment among data fields
    strict_encoding: bool        # invalid UTF-8 is a transport fault


PROFILES: Dict[str, SchemaProfile] = {
    "v1": SchemaProfile(
        name="v1",
        framing=FRAMING_NEWLINE,
        has_age=True,
        include_sentence=True,
        packet_comment=True,
        inline_comment=False,
        strict_encoding=True,
    ),
    "v2": SchemaProfile(
        name="v2",
        framing=FRAMING_OBJECT,
        has_age=False,
        include_sentence=False,
        packet_comment=False,
        inline_comment=True,
        strict_encoding=False,
    ),
}


def get_profile(name: str) -> SchemaProfile:
    try:
        return PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        raise ValueError(f"Unknown schema profile '{name}' (known: {known})") from None
