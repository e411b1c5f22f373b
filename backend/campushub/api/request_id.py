"""Request ID helper for endpoints.

Relies on observability middleware binding the request id into the logging
context. Falls back to the value ObservabilityMiddleware stores on request.state.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

from campushub.obs import logging as obs_logging

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Optional[Request] = None, default: str = "unknown") -> str:
    """Return the current request id if bound, else a default."""
    rid: Optional[str] = obs_logging.current_request_id()
    if not rid and request is not None:
        rid = getattr(request.state, REQUEST_ID_ATTR, None)
    return rid or default
