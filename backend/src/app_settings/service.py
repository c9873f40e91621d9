"""Load/save lifecycle for the global reference configuration."""

from __future__ import annotations

import logging

from db.config import get_app_defaults
from db.session import session_scope
from review.capabilities import ensure_authorized, require_admin
from review.models import Actor

from . import repository
from .models import GlobalReferenceConfig, UpdateSettingsPayload

logger = logging.getLogger(__name__)


class SettingsService:
    def load(self) -> GlobalReferenceConfig:
        """Read the current configuration, falling back to defaults when unset."""
        with session_scope() as db:
            row = repository.get_global_config(db)
            if row is None:
                return GlobalReferenceConfig(ic_email=get_app_defaults().ic_email)
            return GlobalReferenceConfig.model_validate(row)

    def save(self, payload: UpdateSettingsPayload, actor: Actor) -> GlobalReferenceConfig:
        ensure_authorized(require_admin(actor, "change the global reference configuration"))
        ic_email = payload.ic_email.strip() or get_app_defaults().ic_email
        with session_scope() as db:
            row = repository.upsert_global_config(
                db,
                ic_email=ic_email,
                reference_identifiers=payload.reference_identifiers,
            )
            config = GlobalReferenceConfig.model_validate(row)
        logger.info(
            "Global reference configuration updated by %s (%d reference roots)",
            actor.id,
            len(config.reference_roots),
        )
        return config


settings_service = SettingsService()
