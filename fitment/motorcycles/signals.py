"""
Cache invalidation signals
Drop the cached make/year lookups whenever a motorcycle changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from fitment.core.cache_utils import is_suspended
from .models import Motorcycle
from .utils import invalidate_motorcycle_lookups

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Motorcycle)
@receiver(post_delete, sender=Motorcycle)
def invalidate_motorcycle_cache(sender, instance, **kwargs):
    """Invalidate distinct makes/years when a motorcycle is saved or deleted"""
    if is_suspended():
        return
    try:
        invalidate_motorcycle_lookups()
    except Exception as e:
        logger.error(f"Error invalidating motorcycle cache for {instance.pk}: {e}")
