import logging

from sqlalchemy.orm import Session

from docverify.errors import Conflict, Forbidden
from docverify.models.document import Document, DocumentStatus
from docverify.services.document_service import compare_and_set, record_history
from docverify.services.events import DocumentResubmitted, event_bus
from docverify.services.scope import Caller, OwnScope, Scope
from docverify.services.verification_service import validate_transition
from docverify.services.visibility import visible_documents
from docverify.utils.files import check_file_metadata
from docverify.utils.timestamps import utc_now

logger = logging.getLogger("docverify.replace")


def replace(
    db: Session,
    scope: Scope,
    caller: Caller,
    document_id: str,
    file_name: str,
    file_ref: str,
    mime_type: str | None = None,
    file_size_bytes: int | None = None,
    expected_version: int | None = None,
) -> Document:
    """Swap the file of the caller's own rejected document and resubmit it.

    Keeps the document id so the slot and its history stay continuous. The
    previous decision fields are cleared; the decision itself stays in
    ``document_history``.
    """
    if not isinstance(scope, OwnScope):
        logger.warning("Replace of document %s denied for non-owner %s", document_id, caller.caller_id)
        raise Forbidden("Only the owning member may replace a document")

    doc = visible_documents(db, scope).filter(Document.id == document_id).first()
    if doc is None:
        raise Forbidden()

    validate_transition(DocumentStatus(doc.status), DocumentStatus.PENDING)
    check_file_metadata(mime_type, file_size_bytes)

    if expected_version is not None and expected_version != doc.version:
        raise Conflict()

    now = utc_now()
    new_version = compare_and_set(
        db,
        doc.id,
        doc.version,
        {
            Document.file_name: file_name,
            Document.file_ref: file_ref,
            Document.mime_type: mime_type,
            Document.file_size_bytes: file_size_bytes,
            Document.status: DocumentStatus.PENDING.value,
            Document.review_note: None,
            Document.decided_at: None,
            Document.decided_by: None,
            Document.submitted_at: now,
            Document.submitted_by: caller.caller_id,
        },
    )
    record_history(db, doc, "REPLACED", caller.caller_id, version=new_version, file_name=file_name, occurred_at=now)
    db.commit()
    db.refresh(doc)

    logger.info("Document %s replaced by %s (version %s)", doc.id, caller.caller_id, new_version)
    event_bus.publish(DocumentResubmitted(document_id=doc.id, owner_id=doc.owner_id, version=new_version))
    return doc
