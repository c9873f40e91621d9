"""Resolve the acting user from request headers."""
from __future__ import annotations

from fastapi import Header, HTTPException

from review.models import Actor, Role


def get_actor(
    x_actor_id: str = Header(..., alias="X-Actor-Id"),
    x_actor_name: str = Header("", alias="X-Actor-Name"),
    x_actor_role: str = Header(Role.INSPECTOR.value, alias="X-Actor-Role"),
) -> Actor:
    """FastAPI dependency building an ``Actor`` from the gateway's identity headers."""
    try:
        role = Role(x_actor_role.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown actor role: {x_actor_role}") from None
    return Actor(id=x_actor_id, name=x_actor_name, role=role)
