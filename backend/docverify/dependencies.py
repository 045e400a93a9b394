from fastapi import Depends, Header, HTTPException

from docverify.services.scope import Caller, Role, Scope, resolve_scope


async def get_caller(
    x_caller_id: str | None = Header(None),
    x_caller_role: str | None = Header(None),
    x_member_id: str | None = Header(None),
    x_area_id: str | None = Header(None),
) -> Caller:
    # Identity headers are set by the authenticating gateway in front of this service.
    if not x_caller_id or not x_caller_role:
        raise HTTPException(status_code=401, detail="Missing caller identity")
    try:
        role = Role(x_caller_role.upper())
    except ValueError:
        raise HTTPException(status_code=401, detail="Unknown caller role")
    return Caller(
        caller_id=x_caller_id,
        role=role,
        member_id=x_member_id or None,
        area_id=x_area_id or None,
    )


async def get_scope(caller: Caller = Depends(get_caller)) -> Scope:
    return resolve_scope(caller)
