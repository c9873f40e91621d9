"""Role capability checks guarding every mutating review/config operation."""

from __future__ import annotations

import logging

from inspections.errors import AuthorizationError

from .models import Actor, Authorized, Capability, Denied, Role

logger = logging.getLogger(__name__)


def require_admin(actor: Actor, action: str) -> Capability[Actor]:
    if actor.role is Role.ADMIN:
        return Authorized(actor)
    return Denied(f"Only intelligence administrators may {action}")


def ensure_authorized(capability: Capability) -> object:
    """Unwrap an ``Authorized`` value or raise ``AuthorizationError``."""
    if isinstance(capability, Denied):
        logger.warning("Authorization denied: %s", capability.reason)
        raise AuthorizationError(capability.reason)
    return capability.value
