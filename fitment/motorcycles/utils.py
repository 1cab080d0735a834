"""
Motorcycle helpers: RECID allocation, search and cached lookups
"""
from contextlib import contextmanager
import logging
import threading

from django.conf import settings
from django.db import connection
from django.db.models import Max, Q

from fitment.core.cache_utils import cached_lookup
from .models import Motorcycle

logger = logging.getLogger(__name__)

MAKES_CACHE_PREFIX = 'motorcycle_makes'
YEARS_CACHE_PREFIX = 'motorcycle_years'

_process_lock = threading.Lock()


class RecidLockUnavailable(Exception):
    """Another request is allocating RECIDs right now; retry later"""


@contextmanager
def recid_allocation_lock():
    """
    Non-blocking named lock around RECID computation.

    PostgreSQL uses a session advisory lock so concurrent workers exclude
    each other; other backends fall back to a process-level lock.
    Raises RecidLockUnavailable immediately when the lock is held.
    """
    lock_key = getattr(settings, 'MOTORCYCLE_RECID_LOCK_KEY', 774201)

    if connection.vendor == 'postgresql':
        with connection.cursor() as cursor:
            cursor.execute('SELECT pg_try_advisory_lock(%s)', [lock_key])
            acquired = cursor.fetchone()[0]
        if not acquired:
            logger.warning(f"RECID advisory lock {lock_key} is held by another session")
            raise RecidLockUnavailable('RECID allocation is in progress, please retry')
        try:
            yield
        finally:
            with connection.cursor() as cursor:
                cursor.execute('SELECT pg_advisory_unlock(%s)', [lock_key])
        return

    if not _process_lock.acquire(blocking=False):
        logger.warning("RECID allocation lock is held by another thread")
        raise RecidLockUnavailable('RECID allocation is in progress, please retry')
    try:
        yield
    finally:
        _process_lock.release()


def _next_free_recid():
    start = getattr(settings, 'MOTORCYCLE_RECID_START', 1)
    current_max = Motorcycle.objects.aggregate(max_recid=Max('recid'))['max_recid']
    if current_max is None:
        return start
    return max(current_max + 1, start)


def next_recid():
    """Next sequential RECID (max + 1), computed under the allocation lock"""
    with recid_allocation_lock():
        return _next_free_recid()


def allocate_recids(count, floor=None):
    """Reserve `count` sequential RECIDs for a bulk insert, starting above `floor` if given"""
    if count <= 0:
        return []
    with recid_allocation_lock():
        first = _next_free_recid()
        if floor is not None:
            first = max(first, floor + 1)
        return list(range(first, first + count))


def search_motorcycles(queryset, search_term):
    """
    Free-text motorcycle search.

    A purely numeric term is a RECID lookup. A single word matches make or
    model. Several words match the full phrase or every word individually.
    """
    term = (search_term or '').strip()
    if not term:
        return queryset

    if term.isdigit():
        return queryset.filter(recid=int(term))

    words = [w for w in term.split() if w]
    if len(words) == 1:
        query = Q(bikemake__icontains=term) | Q(bikemodel__icontains=term)
        return queryset.filter(query)

    phrase = Q(bikemake__icontains=term) | Q(bikemodel__icontains=term)
    all_words = Q()
    for word in words:
        all_words &= Q(bikemake__icontains=word) | Q(bikemodel__icontains=word)
    return queryset.filter(phrase | all_words)


@cached_lookup(MAKES_CACHE_PREFIX)
def get_distinct_makes():
    return list(
        Motorcycle.objects.order_by('bikemake').values_list('bikemake', flat=True).distinct()
    )


@cached_lookup(YEARS_CACHE_PREFIX)
def get_distinct_years():
    """Every year covered by any motorcycle's range, newest first"""
    years = set()
    for firstyear, lastyear in Motorcycle.objects.values_list('firstyear', 'lastyear'):
        years.update(range(firstyear, lastyear + 1))
    return sorted(years, reverse=True)


def invalidate_motorcycle_lookups():
    get_distinct_makes.invalidate()
    get_distinct_years.invalidate()
    logger.debug("Invalidated motorcycle make/year lookups")
