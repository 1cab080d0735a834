"""Audit trail helpers"""
import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First X-Forwarded-For hop, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None)
    if not meta:
        return None
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    ip = forwarded.split(',')[0].strip() if forwarded else meta.get('REMOTE_ADDR')
    return ip or None


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None):
    """
    Record a catalog change.

    The acting user comes from `user` or `request.user`; anonymous storefront
    requests and background jobs are stored without a user. Returns the entry,
    or None when required fields are missing or the write fails. A failed
    audit write never breaks the operation being audited.
    """
    if not action or not model_name or object_id is None:
        logger.warning(f"Skipping audit log for {model_name}/{object_id}: action, model and object id are required")
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
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Audit log for {action} {model_name} {object_id} failed: {str(e)}")
        return None
