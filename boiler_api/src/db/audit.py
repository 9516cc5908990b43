"""
Audit stamping hooked into SQLAlchemy's insert/update pipeline.

Any mapped class declaring created_on, updated_on, created_by and updated_by is
audited; everything else passes through untouched. The acting profile comes
from the RequestContext a repository stored in the ORM session's info dict.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

from sqlalchemy import event
from sqlalchemy.orm import Mapper, object_session

from src.core.context import RequestContext
from src.db.base import Base
from src.schemas.auth import UserProfile, anonymous_profile

logger = logging.getLogger(__name__)

AUDIT_FIELDS = ("created_on", "updated_on", "created_by", "updated_by")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
CONTEXT_KEY = "request_context"

_audited_types: Dict[type, bool] = {}
_registered_bases: Set[type] = set()


# PUBLIC_INTERFACE
def is_audited(cls: type) -> bool:
    """Whether instances of cls carry the audit fields. Cached per class."""
    try:
        return _audited_types[cls]
    except KeyError:
        result = all(hasattr(cls, name) for name in AUDIT_FIELDS)
        _audited_types[cls] = result
        return result


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # some dialects (sqlite) hand back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# PUBLIC_INTERFACE
def stamp_insert(entity: Any, profile: UserProfile, now: Optional[datetime] = None) -> None:
    """Stamp fresh creation and update metadata, overwriting whatever the entity carries."""
    if not is_audited(type(entity)):
        return
    now = now or datetime.now(tz=timezone.utc)
    entity.created_by = profile.username
    entity.updated_by = profile.username
    entity.created_on = now
    entity.updated_on = now


# PUBLIC_INTERFACE
def stamp_update(entity: Any, profile: UserProfile, now: Optional[datetime] = None) -> None:
    """
    Stamp update metadata and backfill creation metadata that was never set.

    created_on counts as unset when missing or earlier than the Unix epoch;
    created_by when missing or blank.
    """
    if not is_audited(type(entity)):
        return
    now = now or datetime.now(tz=timezone.utc)
    entity.updated_by = profile.username
    entity.updated_on = now

    created_on = _as_utc(entity.created_on)
    if created_on is None or created_on < EPOCH:
        entity.created_on = entity.updated_on
    if entity.created_by is None or not entity.created_by.strip():
        entity.created_by = entity.updated_by


def _resolve_profile(target: Any) -> UserProfile:
    session = object_session(target)
    context: Optional[RequestContext] = session.info.get(CONTEXT_KEY) if session is not None else None
    if context is None:
        logger.debug("No request context for %s write; stamping as anonymous", type(target).__name__)
        return anonymous_profile()
    return context.profile


def _insert_filter(mapper: Mapper, connection: Any, target: Any) -> None:
    if is_audited(type(target)):
        stamp_insert(target, _resolve_profile(target))


def _update_filter(mapper: Mapper, connection: Any, target: Any) -> None:
    if is_audited(type(target)):
        stamp_update(target, _resolve_profile(target))


# PUBLIC_INTERFACE
def register_audit_filters(base: type = Base) -> None:
    """
    Plug the audit filters into every class mapped from base. Safe to call
    more than once.
    """
    if base in _registered_bases:
        return
    event.listen(base, "before_insert", _insert_filter, propagate=True)
    event.listen(base, "before_update", _update_filter, propagate=True)
    _registered_bases.add(base)
    logger.info("Audit filters registered on %s", base.__name__)
