import logging
import time
from contextlib import contextmanager
from typing import Any, Mapping, Optional

from opentelemetry.trace import Tracer

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_request(
    tracer: Tracer,
    operation: str,
    start_message: str,
    extra_attrs: Optional[Mapping[str, Any]] = None,
):
    """
    Open a span for one unit of forwarding work and log its start and
    duration at DEBUG. Attributes with a None value are skipped; the span
    records any exception escaping the block.
    """
    started = time.monotonic()
    with tracer.start_as_current_span(operation) as span:
        for key, value in (extra_attrs or {}).items():
            if value is not None:
                span.set_attribute(key, value)
        logger.debug(start_message)
        try:
            yield span
        finally:
            elapsed_ms = (time.monotonic() - started) * 1000
            span.set_attribute(f"{operation}.duration_ms", round(elapsed_ms, 2))
            logger.debug(f"{operation} finished in {elapsed_ms:.1f}ms")
