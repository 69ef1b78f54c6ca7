"""
Health probes and business counters for the complaint service.
"""

import logging
import time

from django.conf import settings
from django.core.cache import cache
from django.db import connection, transaction
from django.http import JsonResponse
from django.utils import timezone
from django.views import View

logger = logging.getLogger(__name__)


def _check_database():
    start = time.time()
    with connection.cursor() as cursor:
        cursor.execute("SELECT 1")
    return round((time.time() - start) * 1000, 2)


def _check_cache(key):
    start = time.time()
    cache.set(key, 'ok', 10)
    if cache.get(key) != 'ok':
        raise RuntimeError("Cache round trip failed")
    return round((time.time() - start) * 1000, 2)


class HealthCheckView(View):
    """
    Database and cache health. Returns 503 when either is down.
    """

    def get(self, request):
        start_time = time.time()
        health_data = {
            'status': 'healthy',
            'timestamp': timezone.now().isoformat(),
            'version': getattr(settings, 'VERSION', '1.0.0'),
            'checks': {}
        }

        try:
            health_data['checks']['database'] = {
                'status': 'healthy',
                'response_time_ms': _check_database(),
            }
        except Exception:
            logger.exception("Health check: database unavailable")
            health_data['checks']['database'] = {'status': 'unhealthy'}
            health_data['status'] = 'unhealthy'

        try:
            health_data['checks']['cache'] = {
                'status': 'healthy',
                'response_time_ms': _check_cache('health_check'),
            }
        except Exception:
            logger.exception("Health check: cache unavailable")
            health_data['checks']['cache'] = {'status': 'unhealthy'}
            health_data['status'] = 'unhealthy'

        health_data['response_time_ms'] = round((time.time() - start_time) * 1000, 2)
        status_code = 200 if health_data['status'] == 'healthy' else 503
        return JsonResponse(health_data, status=status_code)


class MetricsView(View):
    """
    Complaint counters in Prometheus text form, read from the dashboard cache.
    """

    @classmethod
    def as_view(cls, **initkwargs):
        return transaction.non_atomic_requests(super().as_view(**initkwargs))

    def get(self, request):
        from apps.complaints.services import stats_service

        stats = stats_service.get_dashboard_stats()
        metrics = [f'ecare_complaints_{name} {value}' for name, value in stats.items()]
        return JsonResponse({
            'metrics': '\n'.join(metrics) + '\n',
            'timestamp': timezone.now().isoformat()
        })


class ReadinessView(View):
    def get(self, request):
        try:
            _check_database()
            _check_cache('readiness_check')
        except Exception:
            logger.exception("Readiness check failed")
            return JsonResponse({
                'status': 'not_ready',
                'timestamp': timezone.now().isoformat()
            }, status=503)
        return JsonResponse({
            'status': 'ready',
            'timestamp': timezone.now().isoformat()
        })


class LivenessView(View):
    def get(self, request):
        return JsonResponse({
            'status': 'alive',
            'timestamp': timezone.now().isoformat()
        })
