"""Request actor resolution.

Authentication happens upstream (API gateway or auth service), which
forwards the authenticated user's id and role as headers:

    X-User-Id:   the user's id
    X-User-Role: "admin" for administrators, anything else otherwise
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Header, HTTPException

from storefront.errors import AdminRequired


@dataclass(frozen=True)
class Actor:
    id: str
    is_admin: bool = False


def optional_actor(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Actor | None:
    if not x_user_id:
        return None
    return Actor(id=x_user_id, is_admin=(x_user_role or "").strip().lower() == "admin")


def current_actor(actor: Annotated[Actor | None, Depends(optional_actor)]) -> Actor:
    if actor is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return actor


def admin_actor(actor: Annotated[Actor, Depends(current_actor)]) -> Actor:
    if not actor.is_admin:
        raise AdminRequired("perform this action")
    return actor
