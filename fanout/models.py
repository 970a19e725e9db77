from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

HeaderList = list[Tuple[str, str]]


class CannedBody(BaseModel):
    """JSON body returned when no forwarded response is passed through."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str


@dataclass(frozen=True)
class TargetOrigin:
    scheme: str
    host: str
    port: Optional[int] = None

    @property
    def origin(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None:
            return f"{self.scheme}://{host}"
        return f"{self.scheme}://{host}:{self.port}"

    def __str__(self) -> str:
        return self.origin


@dataclass(frozen=True)
class InboundRequest:
    method: str
    # Original path including any query string, not yet normalized.
    path: str
    headers: HeaderList = field(default_factory=list)
    body: Optional[bytes] = None


@dataclass(frozen=True)
class ForwardSuccess:
    status_code: int
    headers: Mapping[str, str]
    raw_body: bytes = b""


@dataclass(frozen=True)
class ForwardFailed:
    # Transport error description, only used for logging.
    reason: str = ""


@dataclass(frozen=True)
class ForwardAttempt:
    target: TargetOrigin
    outcome: Union[ForwardSuccess, ForwardFailed]

    @property
    def succeeded(self) -> bool:
        return isinstance(self.outcome, ForwardSuccess)


@dataclass(frozen=True)
class OutboundResponse:
    """Framework-independent description of the response sent to the caller."""

    status_code: int
    body: Optional[bytes] = None
    content_type: Optional[str] = None
