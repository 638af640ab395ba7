from datetime import datetime, timezone
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Success(BaseModel):
    """
    A response arrived and its body was read in full, whatever the HTTP status.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    status_code: int
    body_length: int
    elapsed: float = Field(ge=0, description="Seconds from connection ready to body read")


class TimedOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["timed_out"] = "timed_out"


class TransportError(BaseModel):
    """
    The probe failed before a full response was read (DNS, connect, TLS, body read).
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["transport_error"] = "transport_error"
    message: str


ProbeStatus = Annotated[
    Union[Success, TimedOut, TransportError], Field(discriminator="kind")
]


def _utcnow():
    return datetime.now(timezone.utc)


class ProbeOutcome(BaseModel):
    """
    Data model for the classified result of one probe.
    """

    model_config = ConfigDict(frozen=True)

    requested_at: datetime = Field(default_factory=_utcnow)
    status: ProbeStatus

    @property
    def succeeded(self) -> bool:
        return isinstance(self.status, Success)

    @property
    def elapsed(self) -> Optional[float]:
        if isinstance(self.status, Success):
            return self.status.elapsed
        return None

    def __repr__(self):
        return f"ProbeOutcome(kind={self.status.kind}, requested_at={self.requested_at.isoformat()})"
