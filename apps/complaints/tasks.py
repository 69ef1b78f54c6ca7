import logging

from celery import shared_task

from .services import stats_service

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=True)
def refresh_dashboard_metrics(self):
    """Rewarm the cached admin dashboard and per-technician counts."""
    stats = stats_service.refresh_dashboard_cache()
    return f"Refreshed dashboard metrics for {stats['total']} complaints"
