import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from docverify.errors import (
    Conflict,
    DocumentNotFound,
    DuplicateSlot,
    Forbidden,
    MemberNotFound,
    MissingTitle,
)
from docverify.models.area import Member
from docverify.models.document import (
    ACTIVE_STATUSES,
    Document,
    DocumentHistory,
    DocumentKind,
    DocumentStatus,
)
from docverify.services.scope import Caller, GlobalScope, Scope
from docverify.services.visibility import member_in_scope, visible_documents
from docverify.utils.files import check_file_metadata
from docverify.utils.timestamps import utc_now

logger = logging.getLogger("docverify.documents")

SORTABLE_COLUMNS = {
    "submitted_at": Document.submitted_at,
    "status": Document.status,
    "kind": Document.kind,
    "file_name": Document.file_name,
}


@dataclass
class ListFilters:
    status: str | None = None
    kind: str | None = None
    owner_id: str | None = None
    search: str | None = None
    page: int = 1
    per_page: int = 20
    sort_by: str | None = None
    sort_order: str = "desc"


def escape_like(text: str) -> str:
    """Make ``text`` match literally inside a LIKE pattern using ``\\`` as escape."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def record_history(
    db: Session,
    document: Document,
    action: str,
    actor: str,
    version: int,
    note: str | None = None,
    file_name: str | None = None,
    occurred_at: str | None = None,
) -> DocumentHistory:
    entry = DocumentHistory(
        id=str(uuid.uuid4()),
        document_id=document.id,
        action=action,
        actor=actor,
        note=note,
        file_name=file_name,
        version=version,
        occurred_at=occurred_at or utc_now(),
    )
    db.add(entry)
    return entry


def compare_and_set(db: Session, document_id: str, expected_version: int, values: dict) -> int:
    """Apply ``values`` only if the row is still at ``expected_version``.

    Bumps the version in the same statement and returns the new version.
    Raises Conflict when another write got there first, and DuplicateSlot when
    the change would put a second active document in a mandatory slot. Does not
    commit.
    """
    try:
        updated = (
            db.query(Document)
            .filter(Document.id == document_id, Document.version == expected_version)
            .update({**values, Document.version: Document.version + 1}, synchronize_session=False)
        )
    except IntegrityError:
        db.rollback()
        raise DuplicateSlot()
    if updated != 1:
        db.rollback()
        logger.info("Stale write on document %s at version %s", document_id, expected_version)
        raise Conflict()
    return expected_version + 1


def create_document(
    db: Session,
    scope: Scope,
    caller: Caller,
    owner_id: str,
    kind: str,
    file_name: str,
    file_ref: str,
    title: str | None = None,
    mime_type: str | None = None,
    file_size_bytes: int | None = None,
) -> Document:
    kind = DocumentKind(kind)
    title = title.strip() if title else None
    if kind == DocumentKind.OTHER and not title:
        raise MissingTitle()
    check_file_metadata(mime_type, file_size_bytes)

    if not member_in_scope(db, scope, owner_id):
        raise Forbidden("Cannot submit documents for this member")
    if db.get(Member, owner_id) is None:
        raise MemberNotFound()

    if kind != DocumentKind.OTHER:
        existing = (
            db.query(Document.id)
            .filter(
                Document.owner_id == owner_id,
                Document.kind == kind.value,
                Document.status.in_(ACTIVE_STATUSES),
            )
            .first()
        )
        if existing:
            raise DuplicateSlot()

    now = utc_now()
    doc = Document(
        id=str(uuid.uuid4()),
        owner_id=owner_id,
        kind=kind.value,
        title=title if kind == DocumentKind.OTHER else None,
        file_name=file_name,
        file_ref=file_ref,
        mime_type=mime_type,
        file_size_bytes=file_size_bytes,
        status=DocumentStatus.PENDING.value,
        submitted_at=now,
        submitted_by=caller.caller_id,
        version=1,
    )
    db.add(doc)
    record_history(db, doc, "SUBMITTED", caller.caller_id, version=1, file_name=file_name, occurred_at=now)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent upload took the slot between the check and the insert
        db.rollback()
        raise DuplicateSlot()
    db.refresh(doc)
    logger.info("Document %s (%s) submitted for member %s by %s", doc.id, doc.kind, owner_id, caller.caller_id)
    return doc


def get_document(db: Session, scope: Scope, document_id: str) -> Document:
    doc = visible_documents(db, scope).filter(Document.id == document_id).first()
    if not doc:
        raise DocumentNotFound()
    return doc


def list_documents(db: Session, scope: Scope, filters: ListFilters) -> tuple[list[Document], int]:
    query = visible_documents(db, scope)

    if filters.status:
        query = query.filter(Document.status == filters.status)
    if filters.kind:
        query = query.filter(Document.kind == filters.kind)
    if filters.owner_id:
        query = query.filter(Document.owner_id == filters.owner_id)
    if filters.search:
        pattern = f"%{escape_like(filters.search)}%"
        query = query.filter(
            Document.file_name.ilike(pattern, escape="\\")
            | Document.title.ilike(pattern, escape="\\")
        )

    total = query.count()

    column = SORTABLE_COLUMNS.get(filters.sort_by or "")
    if column is not None:
        direction = column.asc() if filters.sort_order == "asc" else column.desc()
        query = query.order_by(direction, Document.id)
    else:
        # Review queue: pending first, newest first
        pending_first = case((Document.status == DocumentStatus.PENDING.value, 0), else_=1)
        query = query.order_by(pending_first, Document.submitted_at.desc(), Document.id)

    items = query.offset((filters.page - 1) * filters.per_page).limit(filters.per_page).all()
    return items, total


def list_member_documents(db: Session, scope: Scope, member_id: str) -> list[Document]:
    if not member_in_scope(db, scope, member_id):
        raise Forbidden("Cannot view documents of this member")
    if db.get(Member, member_id) is None:
        raise MemberNotFound()
    return (
        visible_documents(db, scope)
        .filter(Document.owner_id == member_id)
        .order_by(Document.submitted_at.desc(), Document.id)
        .all()
    )


def get_history(db: Session, scope: Scope, document_id: str) -> list[DocumentHistory]:
    doc = get_document(db, scope, document_id)
    return (
        db.query(DocumentHistory)
        .filter(DocumentHistory.document_id == doc.id)
        .order_by(DocumentHistory.version.asc())
        .all()
    )


def delete_document(db: Session, scope: Scope, caller: Caller, document_id: str, expected_version: int | None = None):
    if not isinstance(scope, GlobalScope):
        logger.warning("Delete of document %s denied for %s", document_id, caller.caller_id)
        raise Forbidden("Only global reviewers may delete documents")

    doc = db.get(Document, document_id)
    if not doc:
        raise DocumentNotFound()
    if expected_version is not None and expected_version != doc.version:
        raise Conflict()

    deleted = (
        db.query(Document)
        .filter(Document.id == document_id, Document.version == doc.version)
        .delete(synchronize_session=False)
    )
    if deleted != 1:
        db.rollback()
        raise Conflict()
    db.commit()
    logger.info("Document %s deleted by %s", document_id, caller.caller_id)
