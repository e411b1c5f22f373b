from __future__ import annotations

from typing import Any, Mapping, Optional

from campushub.api.request_id import get_request_id
from campushub.obs.logging import get_logger

audit_logger = get_logger("audit.admin")


def log_admin_event(
    event: str,
    *,
    actor: str,
    institution_id: Optional[str],
    outcome: str,
    extra: Optional[Mapping[str, Any]] = None,
) -> None:
    payload: dict[str, Any] = {
        "event": event,
        "actor": actor,
        "institution_id": institution_id,
        "outcome": outcome,
        "request_id": get_request_id(),
    }
    if extra:
        payload.update(extra)
    filtered = {key: value for key, value in payload.items() if value is not None}
    if outcome == "denied":
        audit_logger.warning("admin_action", extra=filtered)
    else:
        audit_logger.info("admin_action", extra=filtered)
