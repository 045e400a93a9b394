from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from docverify.database import get_db
from docverify.dependencies import get_scope
from docverify.routers.documents import _doc_to_response
from docverify.schemas.document import DocumentResponse
from docverify.schemas.progress import ProgressResponse
from docverify.services import document_service
from docverify.services.progress_service import get_member_progress
from docverify.services.scope import Scope

router = APIRouter(prefix="/members", tags=["members"])


@router.get("/{member_id}/progress", response_model=ProgressResponse)
async def member_progress(member_id: str, scope: Scope = Depends(get_scope), db: Session = Depends(get_db)):
    return ProgressResponse(**asdict(get_member_progress(db, scope, member_id)))


@router.get("/{member_id}/documents", response_model=list[DocumentResponse])
async def member_documents(member_id: str, scope: Scope = Depends(get_scope), db: Session = Depends(get_db)):
    docs = document_service.list_member_documents(db, scope, member_id)
    return [_doc_to_response(d) for d in docs]
