from dataclasses import dataclass
from enum import Enum

from fanout.models import CannedBody

AWAIT_FORWARD_TOKEN = "await-fwd"

CANNED_RESPONSES = {
    "400": (400, "Bad Request"),
    "404": (404, "Not Found"),
    "500": (500, "Internal Error"),
    "503": (503, "Service Unavailable"),
}

DEFAULT_BODY = CannedBody(code="200", message="OK")


class PolicyMode(str, Enum):
    FIXED = "fixed"
    DEFAULT_200 = "default-200"
    AWAIT_FORWARD = "await-forward"


@dataclass(frozen=True)
class ResponsePolicy:
    mode: PolicyMode
    status_code: int
    body: CannedBody
    # Only consulted in AWAIT_FORWARD mode
    prioritize_success: bool = False

    @property
    def awaits_forward(self) -> bool:
        return self.mode is PolicyMode.AWAIT_FORWARD


def resolve_policy(value: str, prioritize_success: bool = False) -> ResponsePolicy:
    """
    Map the RESPONSE setting to the process-wide response policy.
    Unknown values fall through to an immediate 200 OK.
    """
    if value in CANNED_RESPONSES:
        status_code, message = CANNED_RESPONSES[value]
        return ResponsePolicy(
            mode=PolicyMode.FIXED,
            status_code=status_code,
            body=CannedBody(code=value, message=message),
            prioritize_success=prioritize_success,
        )

    mode = (
        PolicyMode.AWAIT_FORWARD
        if value == AWAIT_FORWARD_TOKEN
        else PolicyMode.DEFAULT_200
    )
    return ResponsePolicy(
        mode=mode,
        status_code=200,
        body=DEFAULT_BODY,
        prioritize_success=prioritize_success,
    )
