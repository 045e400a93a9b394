from sqlalchemy.orm import Query, Session

from docverify.models.area import Household, Member
from docverify.models.document import Document
from docverify.services.scope import AreaScope, GlobalScope, OwnScope, Scope


def scope_documents(query: Query, scope: Scope) -> Query:
    """Restrict a Document query to what ``scope`` may see.

    Applied while building the query so totals and pagination are computed
    over visible rows only.
    """
    if isinstance(scope, GlobalScope):
        return query
    if isinstance(scope, OwnScope):
        return query.filter(Document.owner_id == scope.member_id)
    if isinstance(scope, AreaScope):
        return (
            query.join(Member, Member.id == Document.owner_id)
            .join(Household, Household.id == Member.household_id)
            .filter(Household.area_id == scope.area_id)
        )
    raise TypeError(f"Unsupported scope: {scope!r}")


def visible_documents(db: Session, scope: Scope) -> Query:
    return scope_documents(db.query(Document), scope)


def member_area(db: Session, member_id: str) -> str | None:
    row = (
        db.query(Household.area_id)
        .join(Member, Member.household_id == Household.id)
        .filter(Member.id == member_id)
        .first()
    )
    return row[0] if row else None


def member_in_scope(db: Session, scope: Scope, member_id: str) -> bool:
    if isinstance(scope, GlobalScope):
        return True
    if isinstance(scope, OwnScope):
        return scope.member_id == member_id
    if isinstance(scope, AreaScope):
        return member_area(db, member_id) == scope.area_id
    return False

