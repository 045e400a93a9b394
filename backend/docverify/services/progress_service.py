from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from docverify.errors import Forbidden, MemberNotFound
from docverify.models.area import Member
from docverify.models.document import ACTIVE_STATUSES, MANDATORY_KINDS, Document, DocumentStatus
from docverify.services.scope import Scope
from docverify.services.visibility import member_in_scope


@dataclass
class Progress:
    member_id: str
    completed: int
    total: int
    ratio: float
    percent: int
    missing: list[str] = field(default_factory=list)
    uploaded: int = 0
    approved: int = 0


def compute_progress(db: Session, member_id: str) -> Progress:
    """Completion of the mandatory slots, counted on APPROVED documents only.

    Computed from the documents table on every call.
    """
    rows = db.query(Document.kind, Document.status).filter(Document.owner_id == member_id).all()

    approved_kinds = {kind for kind, status in rows if status == DocumentStatus.APPROVED.value}
    missing = [k.value for k in MANDATORY_KINDS if k.value not in approved_kinds]
    total = len(MANDATORY_KINDS)
    completed = total - len(missing)

    return Progress(
        member_id=member_id,
        completed=completed,
        total=total,
        ratio=round(completed / total, 3),
        percent=round(completed / total * 100),
        missing=missing,
        uploaded=sum(1 for _, status in rows if status in ACTIVE_STATUSES),
        approved=sum(1 for _, status in rows if status == DocumentStatus.APPROVED.value),
    )


def get_member_progress(db: Session, scope: Scope, member_id: str) -> Progress:
    if not member_in_scope(db, scope, member_id):
        raise Forbidden("Cannot view progress of this member")
    if db.get(Member, member_id) is None:
        raise MemberNotFound()
    return compute_progress(db, member_id)
