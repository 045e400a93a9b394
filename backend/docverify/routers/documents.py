import logging
import math

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from docverify.config import settings
from docverify.database import get_db
from docverify.dependencies import get_caller, get_scope
from docverify.errors import Forbidden, UnscopedReviewer
from docverify.models.document import Document, DocumentHistory, DocumentKind, DocumentStatus
from docverify.schemas.document import (
    DecisionRequest,
    DocumentCreate,
    DocumentHistoryResponse,
    DocumentListResponse,
    DocumentResponse,
    ReplaceRequest,
)
from docverify.services import document_service, replace_service, verification_service
from docverify.services.scope import Caller, OwnScope, Scope, resolve_scope

logger = logging.getLogger("docverify.documents")

router = APIRouter(prefix="/documents", tags=["documents"])


def _doc_to_response(doc: Document) -> DocumentResponse:
    return DocumentResponse(
        id=doc.id,
        owner_id=doc.owner_id,
        owner_name=doc.owner.name,
        area_id=doc.owner.household.area_id,
        kind=doc.kind,
        title=doc.display_title,
        file_name=doc.file_name,
        file_ref=doc.file_ref,
        mime_type=doc.mime_type,
        file_size_bytes=doc.file_size_bytes,
        status=doc.status,
        review_note=doc.review_note,
        submitted_at=doc.submitted_at,
        submitted_by=doc.submitted_by,
        decided_at=doc.decided_at,
        decided_by=doc.decided_by,
        version=doc.version,
    )


def _history_to_response(entry: DocumentHistory) -> DocumentHistoryResponse:
    return DocumentHistoryResponse(
        id=entry.id,
        document_id=entry.document_id,
        action=entry.action,
        actor=entry.actor,
        note=entry.note,
        file_name=entry.file_name,
        version=entry.version,
        occurred_at=entry.occurred_at,
    )


@router.post("", response_model=DocumentResponse, status_code=201)
async def create_document(
    req: DocumentCreate,
    caller: Caller = Depends(get_caller),
    scope: Scope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    owner_id = req.owner_id
    if owner_id is None:
        if not isinstance(scope, OwnScope):
            raise Forbidden("owner_id is required when uploading on behalf of a member")
        owner_id = scope.member_id

    doc = document_service.create_document(
        db,
        scope,
        caller,
        owner_id=owner_id,
        kind=req.kind.value,
        title=req.title,
        file_name=req.file_name,
        file_ref=req.file_ref,
        mime_type=req.mime_type,
        file_size_bytes=req.file_size_bytes,
    )
    return _doc_to_response(doc)


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    status: DocumentStatus | None = None,
    kind: DocumentKind | None = None,
    owner_id: str | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort_by: str | None = Query(None, pattern="^(submitted_at|status|kind|file_name)$"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
):
    try:
        scope = resolve_scope(caller)
    except (UnscopedReviewer, Forbidden) as exc:
        # Listing never errors on scope; an unresolvable caller simply sees nothing.
        logger.warning("Empty listing for %s: %s", caller.caller_id, exc.message)
        return DocumentListResponse(
            items=[], total=0, page=page, per_page=per_page,
            total_pages=0, has_next=False, has_prev=page > 1,
        )

    filters = document_service.ListFilters(
        status=status.value if status else None,
        kind=kind.value if kind else None,
        owner_id=owner_id,
        search=search,
        page=page,
        per_page=per_page,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    items, total = document_service.list_documents(db, scope, filters)
    total_pages = math.ceil(total / per_page)

    return DocumentListResponse(
        items=[_doc_to_response(d) for d in items],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(document_id: str, scope: Scope = Depends(get_scope), db: Session = Depends(get_db)):
    return _doc_to_response(document_service.get_document(db, scope, document_id))


@router.get("/{document_id}/history", response_model=list[DocumentHistoryResponse])
async def get_document_history(document_id: str, scope: Scope = Depends(get_scope), db: Session = Depends(get_db)):
    """Every submission, decision and replacement of a document, oldest first."""
    entries = document_service.get_history(db, scope, document_id)
    return [_history_to_response(e) for e in entries]


@router.post("/{document_id}/decide", response_model=DocumentResponse)
async def decide_document(
    document_id: str,
    req: DecisionRequest,
    caller: Caller = Depends(get_caller),
    scope: Scope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    doc = verification_service.decide(
        db, scope, caller, document_id,
        version=req.version,
        outcome=req.outcome,
        note=req.note,
    )
    return _doc_to_response(doc)


@router.post("/{document_id}/replace", response_model=DocumentResponse)
async def replace_document(
    document_id: str,
    req: ReplaceRequest,
    caller: Caller = Depends(get_caller),
    scope: Scope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    """Resubmit a rejected document with a new file. Only the owner may do this."""
    doc = replace_service.replace(
        db, scope, caller, document_id,
        file_name=req.file_name,
        file_ref=req.file_ref,
        mime_type=req.mime_type,
        file_size_bytes=req.file_size_bytes,
        expected_version=req.version,
    )
    return _doc_to_response(doc)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    version: int | None = Query(None, ge=1),
    caller: Caller = Depends(get_caller),
    scope: Scope = Depends(get_scope),
    db: Session = Depends(get_db),
):
    document_service.delete_document(db, scope, caller, document_id, expected_version=version)
    return Response(status_code=204)
