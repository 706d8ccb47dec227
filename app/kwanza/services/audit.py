import json
import logging
from dataclasses import dataclass

from app.kwanza.core.context import RequestContext
from app.kwanza.db.models import AuditEvent
from app.kwanza.domain.records import utcnow
from app.kwanza.repos.audit import AuditRepository

logger = logging.getLogger(__name__)


@dataclass
class AuditEventPayload:
    action: str
    entity_type: str
    entity_id: str | None
    operator_id: int | None
    trace_id: str | None
    metadata: dict | None = None

    @classmethod
    def from_context(
        cls,
        context: RequestContext,
        *,
        action: str,
        entity_type: str,
        entity_id,
        metadata: dict | None = None,
    ) -> "AuditEventPayload":
        return cls(
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            operator_id=context.user_id,
            trace_id=context.trace_id,
            metadata=metadata,
        )


class AuditService:
    """Best-effort audit logging.

    Failures are logged and swallowed so they never break the request.
    """

    def __init__(self, db):
        self.db = db
        self.repo = AuditRepository(db)

    def record_event(self, payload: AuditEventPayload) -> None:
        try:
            # Decimal and datetime values are stored as strings
            metadata = json.loads(json.dumps(payload.metadata or {}, default=str))
            event = AuditEvent(
                action=payload.action,
                entity_type=payload.entity_type,
                entity_id=payload.entity_id,
                operator_id=payload.operator_id,
                trace_id=payload.trace_id,
                event_metadata=metadata,
                created_at=utcnow(),
            )
            self.repo.create(event)
        except Exception:
            self.db.rollback()
            logger.exception(
                "Failed to write audit event",
                extra={
                    "action": payload.action,
                    "trace_id": payload.trace_id,
                    "entity_id": payload.entity_id,
                },
            )
