from typing import Optional, Any, Dict

from django.contrib.auth import get_user_model

from records.models import AuditEvent
from records.structured_logging import get_logger

User = get_user_model()
logger = get_logger(__name__)


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    return AuditEvent.objects.create(
        user=user if isinstance(user, User) or getattr(user, 'id', None) else None,
        action=action,
        object_type=object_type, object_id=object_id,
        detail=detail or {},
    )


def try_log_action(**kwargs) -> Optional[AuditEvent]:
    """Like :func:`log_action` but never lets an audit failure break a request."""
    try:
        return log_action(**kwargs)
    except Exception:
        logger.warning('audit_write_failed', action=kwargs.get('action'), exc_info=True)
        return None
