import os
import re
from typing import Literal

from dotenv import load_dotenv, find_dotenv
from pydantic import BaseModel, Field, field_validator

from huegraph.errors import ConfigurationError

# Erste Bridge-Firmware mit CLIP v2
MIN_V2_SW_VERSION = 1948086000

_IP_PATTERN = re.compile(r"(\d+\.\d+\.\d+\.\d+)")


class BridgeSettings(BaseModel):
    bridge_ip: str
    app_key: str
    port: int = 443
    timeout: float = Field(5.0, gt=0)
    stream_timeout: float = Field(60.0, gt=0)
    stream_framing: Literal["auto", "json", "sse"] = "auto"
    retry_delay: float = Field(3.0, ge=0)
    reconnect_delay: float = Field(1.0, ge=0)
    min_sw_version: int = MIN_V2_SW_VERSION

    @field_validator("bridge_ip")
    @classmethod
    def _extract_ip(cls, value: str) -> str:
        match = _IP_PATTERN.search(value or "")
        if not match:
            raise ValueError(f"no IPv4 address in {value!r}")
        return match.group(1)

    @field_validator("app_key")
    @classmethod
    def _strip_key(cls, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise ValueError("application key is empty")
        return value

    @property
    def base_url(self) -> str:
        return f"https://{self.bridge_ip}:{self.port}"

    @property
    def headers(self) -> dict[str, str]:
        return {"hue-application-key": self.app_key}

    @classmethod
    def from_env(cls, use_dotenv: bool = True, **overrides) -> "BridgeSettings":
        """Build settings from HUE_BRIDGE_IP / HUE_APP_KEY, loading .env first.

        V2_APP_KEY and APP_KEY are accepted as older names for the key.
        """
        if use_dotenv:
            load_dotenv(find_dotenv(usecwd=True))

        bridge_ip = os.getenv("HUE_BRIDGE_IP")
        app_key = os.getenv("HUE_APP_KEY") or os.getenv("V2_APP_KEY") or os.getenv("APP_KEY")
        if not bridge_ip:
            raise ConfigurationError("HUE_BRIDGE_IP is not set - bridge IP address missing")
        if not app_key:
            raise ConfigurationError("HUE_APP_KEY is not set - bridge application key missing")

        try:
            return cls(bridge_ip=bridge_ip, app_key=app_key, **overrides)
        except ValueError as e:
            # pydantic.ValidationError ist ein ValueError
            raise ConfigurationError(str(e)) from e
