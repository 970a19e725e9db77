from typing import Optional, Sequence

from fanout.forwarder.policy import ResponsePolicy
from fanout.models import ForwardAttempt, ForwardSuccess, OutboundResponse

JSON_CONTENT_TYPE = "application/json"


def select_forward_result(
    attempts: Sequence[ForwardAttempt], prioritize_success: bool = False
) -> Optional[ForwardSuccess]:
    """
    Pick one forwarded response, scanning in target-list order.

    Failed attempts are skipped. With prioritize_success the first 200 wins;
    otherwise (or when there is none) the first non-200 wins, and failing
    that the last 200 seen.
    """
    results = [a.outcome for a in attempts if isinstance(a.outcome, ForwardSuccess)]

    if prioritize_success:
        for result in results:
            if result.status_code == 200:
                return result

    selected = None
    for result in results:
        if result.status_code != 200:
            return result
        selected = result
    return selected


def canned_response(policy: ResponsePolicy) -> OutboundResponse:
    return OutboundResponse(
        status_code=policy.status_code,
        body=policy.body.model_dump_json().encode("utf-8"),
        content_type=JSON_CONTENT_TYPE,
    )


def reconcile(
    attempts: Sequence[ForwardAttempt], policy: ResponsePolicy
) -> OutboundResponse:
    """Produce the single response for the caller from all settled attempts."""
    if not policy.awaits_forward:
        return canned_response(policy)

    selected = select_forward_result(attempts, policy.prioritize_success)
    if selected is None:
        return canned_response(policy)

    if not selected.raw_body:
        return OutboundResponse(status_code=selected.status_code)

    return OutboundResponse(
        status_code=selected.status_code,
        body=selected.raw_body,
        content_type=selected.headers.get("content-type"),
    )
