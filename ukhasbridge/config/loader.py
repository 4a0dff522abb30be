import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ukhasbridge.core.constants import (
    DEFAULT_MAX_FRAME_BYTES, DEFAULT_READ_TIMEOUT_SECS, DEFAULT_RETRY_DELAY_SECS, ENV_PREFIX,
)
from ukhasbridge.core.errors import ConfigError
from ukhasbridge.core.schema import PROFILES, SchemaProfile, get_profile


class UkhasnetConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    socket: str
    schema_name: str = Field(default="v1", alias="schema")
    retry_delay: float = Field(default=DEFAULT_RETRY_DELAY_SECS, ge=0)
    read_timeout: float = Field(default=DEFAULT_READ_TIMEOUT_SECS, gt=0)
    max_frame_bytes: int = Field(default=DEFAULT_MAX_FRAME_BYTES, gt=0)

    @field_validator("schema_name")
    @classmethod
    def _known_schema(cls, v: str) -> str:
        if v not in PROFILES:
            raise ValueError(f"unknown schema '{v}', expected one of {sorted(PROFILES)}")
        return v

    @property
    def profile(self) -> SchemaProfile:
        return get_profile(self.schema_name)


class InfluxDBConfig(BaseModel):
    url: str
    username: str
    password: str
    timeout: Optional[float] = Field(default=None, gt=0)


class BridgeConfig(BaseModel):
    ukhasnet: UkhasnetConfig
    influxdb: InfluxDBConfig
    logfile: str


# environment variable suffix -> (section, key)
ENV_OVERRIDES = {
    "SOCKET": ("ukhasnet", "socket"),
    "INFLUX_URL": ("influxdb", "url"),
    "INFLUX_USERNAME": ("influxdb", "username"),
    "INFLUX_PASSWORD": ("influxdb", "password"),
}


def apply_env_overrides(data: dict, environ=None) -> dict:
    environ = os.environ if environ is None else environ
    for suffix, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value is None:
            continue
        if not isinstance(data.get(section), dict):
            data[section] = {}
        data[section][key] = value
    return data


def load_config(path: str, environ=None) -> BridgeConfig:
    """Read, override and validate the YAML config. Any problem is a ConfigError."""
    if not path:
        raise ConfigError("Please specify path to config file.")
    try:
        with open(Path(path), "r") as fh:
            text = fh.read()
    except OSError as e:
        raise ConfigError(f"Error opening config file '{path}': {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing config file '{path}': {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Error parsing config file '{path}': top level must be a mapping")

    data = apply_env_overrides(data, environ)
    try:
        return BridgeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Error parsing config file '{path}': {e}") from e
