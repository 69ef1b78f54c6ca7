"""
Dashboard statistics for admins and technicians.

Admin counts are cached (Redis in production) and dropped once a lifecycle
mutation commits; the ``refresh_dashboard_metrics`` beat task rewarms them.
Reads inside an open transaction bypass the cache in both directions.
"""

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import transaction
from django.db.models import Count, Q

from apps.complaints.models import Complaint

logger = logging.getLogger(__name__)

User = get_user_model()

DASHBOARD_CACHE_KEY = 'complaints:dashboard_stats'
TECHNICIAN_CACHE_KEY = 'complaints:technician_stats'


def _timeout():
    return getattr(settings, 'DASHBOARD_STATS_CACHE_TIMEOUT', 300)


def _status_counts(qs):
    return qs.aggregate(
        total=Count('id'),
        pending=Count('id', filter=Q(status=Complaint.STATUS_PENDING)),
        in_process=Count('id', filter=Q(status=Complaint.STATUS_IN_PROCESS)),
        closed=Count('id', filter=Q(status=Complaint.STATUS_CLOSED)),
        cancelled=Count('id', filter=Q(status=Complaint.STATUS_CANCELLED)),
        not_forwarded=Count('id', filter=Q(status=Complaint.STATUS_PENDING, assigned_to__isnull=True)),
    )


def compute_dashboard_stats():
    return _status_counts(Complaint.objects.all())


def compute_technician_stats():
    technicians = (
        User.objects
        .filter(role=User.ROLE_TECHNICIAN, is_active=True)
        .annotate(
            total=Count('assigned_complaints'),
            pending=Count('assigned_complaints', filter=Q(assigned_complaints__status=Complaint.STATUS_PENDING)),
            in_process=Count('assigned_complaints', filter=Q(assigned_complaints__status=Complaint.STATUS_IN_PROCESS)),
            closed=Count('assigned_complaints', filter=Q(assigned_complaints__status=Complaint.STATUS_CLOSED)),
        )
        .order_by('first_name', 'username')
    )
    return [
        {
            'id': tech.id,
            'name': tech.display_name,
            'department': tech.department,
            'total': tech.total,
            'pending': tech.pending,
            'in_process': tech.in_process,
            'closed': tech.closed,
        }
        for tech in technicians
    ]


def _cacheable():
    # Counts read inside an open transaction can include writes that never commit
    return not transaction.get_connection().in_atomic_block


def get_dashboard_stats():
    if not _cacheable():
        return compute_dashboard_stats()
    stats = cache.get(DASHBOARD_CACHE_KEY)
    if stats is None:
        stats = compute_dashboard_stats()
        cache.set(DASHBOARD_CACHE_KEY, stats, _timeout())
    return stats


def get_technician_stats():
    if not _cacheable():
        return compute_technician_stats()
    stats = cache.get(TECHNICIAN_CACHE_KEY)
    if stats is None:
        stats = compute_technician_stats()
        cache.set(TECHNICIAN_CACHE_KEY, stats, _timeout())
    return stats


def get_technician_own_stats(technician):
    """Counts for the complaints currently assigned to one technician. Not cached."""
    counts = _status_counts(Complaint.objects.filter(assigned_to=technician))
    counts.pop('not_forwarded')
    return counts


def invalidate_dashboard_cache():
    cache.delete_many([DASHBOARD_CACHE_KEY, TECHNICIAN_CACHE_KEY])


def invalidate_on_commit():
    """Drop the cached counters once the current transaction commits."""
    transaction.on_commit(invalidate_dashboard_cache)


def refresh_dashboard_cache():
    dashboard = compute_dashboard_stats()
    technicians = compute_technician_stats()
    cache.set_many({DASHBOARD_CACHE_KEY: dashboard, TECHNICIAN_CACHE_KEY: technicians}, _timeout())
    logger.info("Dashboard metrics refreshed: %s", dashboard)
    return dashboard
