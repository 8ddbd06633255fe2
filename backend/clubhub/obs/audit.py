"""Audit trail for workflow decisions.

Every committed mutation (club/event submission, approval, rejection,
membership and registration changes, announcements) is written to the
`clubhub.audit` logger and appended to a Redis stream for downstream review.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from redis.exceptions import RedisError

from clubhub.infra.auth import Actor
from clubhub.infra.redis import redis_client
from clubhub.obs import metrics as obs_metrics
from clubhub.obs.logging import AUDIT_LOGGER, get_logger

STREAM_KEY = "x:clubs.audit"
STREAM_MAXLEN = 10_000

audit_logger = get_logger(AUDIT_LOGGER)


def _stringify(meta: Mapping[str, Any]) -> dict[str, str]:
    return {key: ("" if value is None else str(value)) for key, value in meta.items()}


async def log_event(
    actor: Actor,
    event: str,
    *,
    meta: Optional[Mapping[str, Any]] = None,
) -> None:
    payload: dict[str, Any] = {
        "event": event,
        "ts": datetime.now(timezone.utc).isoformat(),
        "actor_id": actor.id,
        "actor_role": actor.role,
    }
    if meta:
        payload.update(meta)
    audit_logger.info("workflow_event", extra={"audit": _stringify(payload)})
    try:
        await redis_client.xadd(STREAM_KEY, _stringify(payload), maxlen=STREAM_MAXLEN, approximate=True)
    except (RedisError, OSError):
        # mutation is already committed
        obs_metrics.inc_audit_publish_failure()
        audit_logger.warning("audit_stream_unavailable", extra={"event_name": event}, exc_info=True)
