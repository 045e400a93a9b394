"""Reviewer decisions on pending documents.

State flow:
    PENDING -> APPROVED | REJECTED

APPROVED is final. REJECTED only leaves through a member replace, which is
handled by ``replace_service`` rather than a reviewer decision.
"""
import logging

from sqlalchemy.orm import Session

from docverify.errors import Conflict, DocumentNotFound, Forbidden, InvalidState, MissingReason
from docverify.models.document import Document, DocumentStatus
from docverify.services.document_service import compare_and_set, record_history
from docverify.services.events import DocumentDecided, event_bus
from docverify.services.scope import Caller, GlobalScope, OwnScope, Scope
from docverify.services.visibility import visible_documents
from docverify.utils.timestamps import utc_now

logger = logging.getLogger("docverify.verification")

ALLOWED_TRANSITIONS = {
    DocumentStatus.PENDING: [DocumentStatus.APPROVED, DocumentStatus.REJECTED],
    DocumentStatus.APPROVED: [],
    # Reached again only via replace
    DocumentStatus.REJECTED: [DocumentStatus.PENDING],
}

DECISION_OUTCOMES = (DocumentStatus.APPROVED, DocumentStatus.REJECTED)


def can_transition(current: DocumentStatus, target: DocumentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, [])


def validate_transition(current: DocumentStatus, target: DocumentStatus) -> None:
    if not can_transition(current, target):
        raise InvalidState(f"Cannot move document from {current.value} to {target.value}")


def _load_for_review(db: Session, scope: Scope, caller: Caller, document_id: str) -> Document:
    if isinstance(scope, OwnScope):
        logger.warning("Member %s attempted to review document %s", caller.caller_id, document_id)
        raise Forbidden("Members cannot review documents")

    doc = visible_documents(db, scope).filter(Document.id == document_id).first()
    if doc is None:
        if isinstance(scope, GlobalScope):
            raise DocumentNotFound()
        logger.warning("Reviewer %s denied on document %s", caller.caller_id, document_id)
        raise Forbidden()
    return doc


def decide(
    db: Session,
    scope: Scope,
    caller: Caller,
    document_id: str,
    version: int,
    outcome: str,
    note: str | None = None,
) -> Document:
    """Approve or reject a pending document.

    Checks run in a fixed order: scope, version, status, reason. The write is a
    compare-and-set on ``version`` so only one of several concurrent decisions
    can succeed; the rest get Conflict.
    """
    outcome = DocumentStatus(outcome)
    if outcome not in DECISION_OUTCOMES:
        raise InvalidState(f"{outcome.value} is not a decision outcome")

    doc = _load_for_review(db, scope, caller, document_id)

    if doc.version != version:
        raise Conflict()

    validate_transition(DocumentStatus(doc.status), outcome)

    note = note.strip() if note else None
    if outcome == DocumentStatus.REJECTED and not note:
        raise MissingReason()

    now = utc_now()
    review_note = note if outcome == DocumentStatus.REJECTED else None
    new_version = compare_and_set(
        db,
        doc.id,
        version,
        {
            Document.status: outcome.value,
            Document.decided_at: now,
            Document.decided_by: caller.caller_id,
            Document.review_note: review_note,
        },
    )
    record_history(
        db, doc, outcome.value, caller.caller_id,
        version=new_version, note=review_note, file_name=doc.file_name, occurred_at=now,
    )
    db.commit()
    db.refresh(doc)

    logger.info("Document %s %s by %s (version %s)", doc.id, outcome.value, caller.caller_id, new_version)
    event_bus.publish(DocumentDecided(
        document_id=doc.id,
        owner_id=doc.owner_id,
        version=new_version,
        outcome=outcome.value,
    ))
    return doc
