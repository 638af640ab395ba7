from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RunConfig(BaseModel):
    """
    Immutable settings for one probing run.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    interval: float = Field(2.0, gt=0, description="Seconds between probe dispatches")
    timeout: float = Field(60.0, gt=0, description="Per-probe deadline in seconds")
    grace: float = Field(0.0, ge=0, description="Shutdown wait for in-flight probes")
    metrics_port: Optional[int] = Field(None, ge=1, le=65535)

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        try:
            parsed = httpx.URL(value)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid URL {value!r}: {e}") from e
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"URL must use http or https, got {value!r}")
        if not parsed.host:
            raise ValueError(f"URL has no host: {value!r}")
        return value
