"""Caller identity and authorization scope.

A request's caller is resolved exactly once into a ``Scope``; every document
operation consumes that scope instead of re-checking roles.
"""
from dataclasses import dataclass
from enum import Enum

from docverify.errors import Forbidden, UnscopedReviewer


class Role(str, Enum):
    MEMBER = "MEMBER"
    AREA_REVIEWER = "AREA_REVIEWER"
    GLOBAL_REVIEWER = "GLOBAL_REVIEWER"


@dataclass(frozen=True)
class Caller:
    caller_id: str
    role: Role
    member_id: str | None = None
    area_id: str | None = None


@dataclass(frozen=True)
class OwnScope:
    member_id: str


@dataclass(frozen=True)
class AreaScope:
    area_id: str


@dataclass(frozen=True)
class GlobalScope:
    pass


Scope = OwnScope | AreaScope | GlobalScope


def resolve_scope(caller: Caller) -> Scope:
    """Map a caller to the set of documents they may act on.

    Fails closed: a member without a member id or an area reviewer without an
    area is denied rather than widened.
    """
    if caller.role == Role.GLOBAL_REVIEWER:
        return GlobalScope()
    if caller.role == Role.AREA_REVIEWER:
        if not caller.area_id:
            raise UnscopedReviewer()
        return AreaScope(caller.area_id)
    if caller.role == Role.MEMBER:
        if not caller.member_id:
            raise Forbidden("Member caller has no member id")
        return OwnScope(caller.member_id)
    raise Forbidden(f"Unknown role: {caller.role}")
