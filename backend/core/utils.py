"""Audit trail helpers shared by every app"""
import logging
from decimal import Decimal

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address of X-Forwarded-For, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None) or {}
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        return forwarded.split(',')[0].strip() or None
    return meta.get('REMOTE_ADDR') or None


def _audit_value(value):
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, 'pk'):
        return value.pk
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return value


def field_changes(instance, new_values):
    """
    {field: {'old': ..., 'new': ...}} for every field in new_values whose
    value differs from the one currently on instance. Call before saving.
    """
    changes = {}
    for field, new in new_values.items():
        old = _audit_value(getattr(instance, field, None))
        new = _audit_value(new)
        if old != new:
            changes[field] = {'old': old, 'new': new}
    return changes


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Record an audit entry. Never raises: failures are logged and None is returned.

    The acting user is `user` when given, otherwise request.user; anonymous
    users are stored as NULL.
    """
    if not (action and model_name and object_id):
        logger.warning(
            f"Audit log skipped, missing fields: action={action}, model_name={model_name}, object_id={object_id}"
        )
        return None

    actor = user if user is not None else getattr(request, 'user', None)
    if actor is not None and not actor.is_authenticated:
        actor = None

    try:
        return AuditLog.objects.create(
            user=actor,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to create audit log for {model_name} {object_id}: {str(e)}")
        return None
