import uuid

from sqlalchemy.orm import Session

from collabill.models.audit import AuditLog

def record_audit(
    db: Session,
    *,
    actor_id: uuid.UUID | None,
    action: str,
    entity: str,
    entity_id: uuid.UUID | None = None,
    detail: str | None = None,
) -> AuditLog:
    """Append an audit entry to the current transaction; the caller commits."""
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        entity=entity,
        entity_id=entity_id,
        detail=detail[:500] if detail else None,
    )
    db.add(entry)
    return entry
